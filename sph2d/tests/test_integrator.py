"""
Tests for time integration and the wall boundary.
"""

import numpy as np
import pytest

from sph2d.core.config import SPHConfig
from sph2d.core.particles import ParticleArrays
from sph2d.core.integrator_vectorized import (apply_boundary_clamp_vectorized,
                                              integrate_symplectic_euler_vectorized)


def single_particle(x, y, vx=0.0, vy=0.0, fx=0.0, fy=0.0, density=1.0):
    particles = ParticleArrays.from_positions(np.array([[x, y]]))
    particles.velocity_x[0] = vx
    particles.velocity_y[0] = vy
    particles.force_x[0] = fx
    particles.force_y[0] = fy
    particles.density[0] = density
    return particles


class TestSymplecticEuler:

    def test_velocity_updated_before_position(self):
        config = SPHConfig()
        particles = single_particle(500.0, 500.0, fx=2.0, density=2.0)

        integrate_symplectic_euler_vectorized(particles, config)

        dt = config.dt
        assert particles.velocity_x[0] == pytest.approx(dt * 1.0)
        assert particles.position_x[0] == pytest.approx(500.0 + dt * dt)

    def test_force_divided_by_density(self):
        config = SPHConfig()
        particles = single_particle(500.0, 500.0, fy=-30.0, density=3.0)
        integrate_symplectic_euler_vectorized(particles, config)
        assert particles.velocity_y[0] == pytest.approx(-10.0 * config.dt)

    def test_empty_population(self):
        particles = ParticleArrays.allocate(0)
        integrate_symplectic_euler_vectorized(particles, SPHConfig())
        assert particles.n_particles == 0


class TestBoundary:

    def test_bounce_at_lower_x_wall(self):
        config = SPHConfig()
        particles = single_particle(config.eps, 500.0, vx=-2.0)

        integrate_symplectic_euler_vectorized(particles, config)

        assert particles.position_x[0] == config.eps
        assert particles.velocity_x[0] == pytest.approx(1.0)
        assert particles.velocity_y[0] == 0.0

    def test_bounce_at_upper_x_wall(self):
        config = SPHConfig()
        particles = single_particle(config.domain_width - config.eps, 500.0, vx=2.0)

        integrate_symplectic_euler_vectorized(particles, config)

        assert particles.position_x[0] == config.domain_width - config.eps
        assert particles.velocity_x[0] == pytest.approx(-1.0)

    def test_bounce_at_floor_and_ceiling(self):
        config = SPHConfig()
        floor = single_particle(500.0, 1.0, vy=-4.0)
        ceiling = single_particle(500.0, 999.0, vy=4.0)

        integrate_symplectic_euler_vectorized(floor, config)
        integrate_symplectic_euler_vectorized(ceiling, config)

        assert floor.position_y[0] == config.eps
        assert floor.velocity_y[0] == pytest.approx(2.0)
        assert ceiling.position_y[0] == config.domain_height - config.eps
        assert ceiling.velocity_y[0] == pytest.approx(-2.0)

    def test_axes_are_independent(self):
        particles = single_particle(-50.0, 2000.0, vx=-3.0, vy=6.0)
        apply_boundary_clamp_vectorized(particles, (1000.0, 1000.0), 16.0, -0.5)

        assert particles.position_x[0] == 16.0
        assert particles.position_y[0] == 984.0
        assert particles.velocity_x[0] == pytest.approx(1.5)
        assert particles.velocity_y[0] == pytest.approx(-3.0)

    def test_interior_particle_untouched(self):
        particles = single_particle(300.0, 400.0, vx=5.0, vy=-5.0)
        apply_boundary_clamp_vectorized(particles, (1000.0, 1000.0), 16.0, -0.5)
        assert particles.position_x[0] == 300.0 and particles.position_y[0] == 400.0
        assert particles.velocity_x[0] == 5.0 and particles.velocity_y[0] == -5.0

    def test_containment_for_violent_motion(self):
        config = SPHConfig()
        rng = np.random.default_rng(3)
        n = 500
        particles = ParticleArrays.from_positions(rng.uniform(-500.0, 1500.0, size=(n, 2)))
        particles.velocity_x[:] = rng.normal(0.0, 1e5, n)
        particles.velocity_y[:] = rng.normal(0.0, 1e5, n)
        particles.force_x[:] = rng.normal(0.0, 1e3, n)
        particles.force_y[:] = rng.normal(0.0, 1e3, n)
        particles.density[:] = rng.uniform(0.01, 1.0, n)

        for _ in range(10):
            integrate_symplectic_euler_vectorized(particles, config)
            assert np.all(particles.position_x >= config.eps)
            assert np.all(particles.position_x <= config.domain_width - config.eps)
            assert np.all(particles.position_y >= config.eps)
            assert np.all(particles.position_y <= config.domain_height - config.eps)
