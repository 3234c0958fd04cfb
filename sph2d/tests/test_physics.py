"""
Physics validation tests for the density and force passes.

Tests physical correctness including:
- Density self-inclusion and kernel support
- Force self-exclusion
- Momentum conservation for symmetric configurations
- Density guard behaviour
"""

import numpy as np
import pytest

import sph2d
from sph2d.core.config import SPHConfig
from sph2d.core.particles import ParticleArrays


H = 16.0
MASS = 2.5
SELF_DENSITY = MASS * 4.0 / (np.pi * H ** 8) * H ** 6


def make_particles(positions, velocities=None):
    particles = ParticleArrays.from_positions(np.array(positions, dtype=np.float64))
    if velocities is not None:
        velocities = np.array(velocities, dtype=np.float64)
        particles.velocity_x[:] = velocities[:, 0]
        particles.velocity_y[:] = velocities[:, 1]
    return particles


def compute_all(particles, config, backend=None):
    sph2d.compute_density_pressure(particles, config, backend=backend)
    sph2d.compute_forces(particles, config, backend=backend)


class TestDensity:

    def test_isolated_particle_counts_itself(self, backend):
        particles = make_particles([[500.0, 500.0]])
        sph2d.compute_density_pressure(particles, SPHConfig())

        assert particles.density[0] == pytest.approx(SELF_DENSITY, rel=1e-12)
        assert particles.pressure[0] == pytest.approx(2000.0 * (SELF_DENSITY - 300.0), rel=1e-12)

    def test_pair_within_support(self, backend):
        particles = make_particles([[500.0, 500.0], [508.0, 500.0]])
        sph2d.compute_density_pressure(particles, SPHConfig())

        neighbor = MASS * 4.0 / (np.pi * H ** 8) * (H * H - 64.0) ** 3
        np.testing.assert_allclose(particles.density, SELF_DENSITY + neighbor, rtol=1e-12)

    def test_pair_at_support_contributes_nothing(self, backend):
        particles = make_particles([[500.0, 500.0], [500.0 + H, 500.0]])
        sph2d.compute_density_pressure(particles, SPHConfig())
        np.testing.assert_allclose(particles.density, SELF_DENSITY, rtol=1e-12)

    def test_pressure_negative_below_rest_density(self):
        particles = make_particles([[100.0, 100.0], [110.0, 100.0]])
        sph2d.compute_density_pressure(particles, SPHConfig())
        assert np.all(particles.pressure < 0), "Sparse particles sit far below rest density"


class TestForces:

    def test_isolated_particle_feels_only_gravity(self, backend):
        config = SPHConfig()
        particles = make_particles([[500.0, 500.0]])
        compute_all(particles, config)

        assert particles.force_x[0] == 0.0, "No self-interaction in the force pass"
        assert particles.force_y[0] == pytest.approx(-10.0 * MASS / SELF_DENSITY, rel=1e-12)

    def test_unscaled_gravity(self, backend):
        config = SPHConfig(density_scaled_gravity=False)
        particles = make_particles([[500.0, 500.0]])
        compute_all(particles, config)
        assert particles.force_y[0] == pytest.approx(-10.0 * MASS, rel=1e-12)

    def test_zero_gravity_isolated_particle(self, backend):
        particles = make_particles([[500.0, 500.0]])
        compute_all(particles, SPHConfig(gravity=(0.0, 0.0)))
        assert particles.force_x[0] == 0.0 and particles.force_y[0] == 0.0

    def test_pair_is_repulsive_below_rest_density(self, backend):
        particles = make_particles([[500.0, 500.0], [510.0, 500.0]])
        compute_all(particles, SPHConfig(gravity=(0.0, 0.0)))

        assert particles.force_x[0] < 0, "Left particle should be pushed left"
        assert particles.force_x[1] > 0, "Right particle should be pushed right"
        assert particles.force_y[0] == pytest.approx(0.0, abs=1e-12)

    def test_pair_beyond_support_no_interaction(self, backend):
        particles = make_particles([[500.0, 500.0], [520.0, 500.0]], [[1.0, 0.0], [-1.0, 0.0]])
        compute_all(particles, SPHConfig(gravity=(0.0, 0.0)))
        np.testing.assert_array_equal(particles.force_x, [0.0, 0.0])
        np.testing.assert_array_equal(particles.force_y, [0.0, 0.0])

    def test_two_particle_conservation(self, backend):
        particles = make_particles([[500.0, 500.0], [507.0, 504.0]],
                                   [[3.0, -1.0], [-2.0, 5.0]])
        compute_all(particles, SPHConfig(gravity=(0.0, 0.0)))

        scale = np.abs(particles.force_x).max() + np.abs(particles.force_y).max()
        assert scale > 0
        assert abs(particles.force_x.sum()) < 1e-10 * scale
        assert abs(particles.force_y.sum()) < 1e-10 * scale

    def test_four_particle_square_conservation(self, backend):
        particles = make_particles([[500.0, 500.0], [508.0, 500.0],
                                    [500.0, 508.0], [508.0, 508.0]])
        compute_all(particles, SPHConfig(gravity=(0.0, 0.0)))

        scale = np.abs(particles.force_x).max()
        assert scale > 0
        assert abs(particles.force_x.sum()) < 1e-10 * scale
        assert abs(particles.force_y.sum()) < 1e-10 * scale

        # Symmetry: every corner is pushed outward along the diagonal
        np.testing.assert_allclose(np.abs(particles.force_x), scale, rtol=1e-10)
        assert particles.force_x[0] < 0 and particles.force_y[0] < 0
        assert particles.force_x[3] > 0 and particles.force_y[3] > 0

    def test_coincident_particles(self, backend):
        particles = make_particles([[500.0, 500.0], [500.0, 500.0]],
                                   [[1.0, 0.0], [0.0, 0.0]])
        config = SPHConfig(gravity=(0.0, 0.0))
        compute_all(particles, config)

        assert np.all(np.isfinite(particles.force_x)) and np.all(np.isfinite(particles.force_y))

        # Only viscosity acts between coincident particles
        rho = 2.0 * SELF_DENSITY
        visc = 200.0 * MASS / rho * 40.0 / (np.pi * H ** 5) * H
        np.testing.assert_allclose(particles.force_x, [-visc, visc], rtol=1e-12)
        np.testing.assert_allclose(particles.force_y, [0.0, 0.0], atol=1e-15)


class TestDensityGuard:

    def test_zero_density_is_guarded(self, backend):
        config = SPHConfig()
        particles = make_particles([[500.0, 500.0], [505.0, 500.0]])
        particles.density[:] = 0.0
        particles.pressure[:] = 0.0

        sph2d.compute_forces(particles, config)
        assert np.all(np.isfinite(particles.force_x))
        assert np.all(np.isfinite(particles.force_y))
        np.testing.assert_array_equal(particles.density, [0.0, 0.0])

        sph2d.integrate(particles, config)
        assert np.all(np.isfinite(particles.velocity_y))

    def test_guard_uses_min_density(self):
        config = SPHConfig(gravity=(0.0, -1.0), density_scaled_gravity=True, min_density=0.5)
        particles = make_particles([[500.0, 500.0]])
        particles.density[:] = -3.0

        sph2d.compute_forces(particles, config, backend='cpu')
        assert particles.force_y[0] == pytest.approx(-MASS / 0.5)

    def test_unguarded_zero_density_is_not_finite(self):
        config = SPHConfig(guard_density=False)
        particles = make_particles([[500.0, 500.0]])
        particles.density[:] = 0.0

        with np.errstate(divide='ignore', invalid='ignore'):
            sph2d.compute_forces(particles, config, backend='cpu')
        assert not np.isfinite(particles.force_y[0])
