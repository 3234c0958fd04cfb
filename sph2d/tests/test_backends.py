"""
Test suite for SPH backend implementations.

Tests the CPU and Numba backends for correctness and consistency.
"""

import warnings

import numpy as np
import pytest

import sph2d
from sph2d.core.backend import dispatch
from sph2d.core.config import SPHConfig
from sph2d.core.particles import ParticleArrays
from sph2d.core.simulation import SPHSimulation
from sph2d.scenarios.dam_break import generate_grid_block_positions


def setup_particles(n=120, seed=12345):
    """Random but reproducible particle cloud with overlapping neighborhoods."""
    rng = np.random.default_rng(seed)
    particles = ParticleArrays.from_positions(rng.uniform(100.0, 180.0, size=(n, 2)))
    particles.velocity_x[:] = rng.uniform(-5.0, 5.0, n)
    particles.velocity_y[:] = rng.uniform(-5.0, 5.0, n)
    return particles


class TestBackendManagement:

    def test_list_backends(self):
        backends = sph2d.list_backends()
        assert backends['cpu'] is True
        assert 'numba' in backends

    def test_invalid_backend_warns(self):
        original = sph2d.get_backend()
        with pytest.warns(UserWarning):
            assert sph2d.set_backend('gpu') is False
        assert sph2d.get_backend() == original

    def test_dispatch_unknown_backend_name(self):
        with pytest.raises(ValueError):
            dispatch("integrate", ParticleArrays.allocate(0), SPHConfig(), backend='tpu')

    def test_dispatch_unknown_function(self):
        with pytest.raises(ValueError):
            dispatch("compute_temperature")

    def test_set_and_restore(self, backend):
        assert sph2d.get_backend() == backend


class TestBackends:
    """Each backend on its own: results are sane."""

    def test_density_computation(self, backend):
        particles = setup_particles()
        sph2d.compute_density_pressure(particles, SPHConfig())

        assert np.all(particles.density > 0), "Density must be positive"
        assert np.all(np.isfinite(particles.pressure))

    def test_full_timestep(self, backend):
        config = SPHConfig()
        particles = setup_particles()

        sph2d.compute_density_pressure(particles, config)
        sph2d.compute_forces(particles, config)
        sph2d.integrate(particles, config)

        assert np.all(np.isfinite(particles.position_x))
        assert np.all(np.isfinite(particles.position_y))
        assert np.all(particles.position_x >= config.eps)
        assert np.all(particles.position_y >= config.eps)


class TestBackendConsistency:
    """Numba results agree with the NumPy reference."""

    def test_density_consistency(self):
        config = SPHConfig()
        cpu = setup_particles()
        numba = setup_particles()

        sph2d.compute_density_pressure(cpu, config, backend='cpu')
        sph2d.compute_density_pressure(numba, config, backend='numba')

        np.testing.assert_allclose(numba.density, cpu.density, rtol=1e-10,
                                   err_msg="numba density differs from CPU")
        np.testing.assert_allclose(numba.pressure, cpu.pressure, rtol=1e-10,
                                   err_msg="numba pressure differs from CPU")

    @pytest.mark.parametrize("scaled_gravity", [True, False])
    def test_forces_consistency(self, scaled_gravity):
        config = SPHConfig(density_scaled_gravity=scaled_gravity)
        cpu = setup_particles()
        sph2d.compute_density_pressure(cpu, config, backend='cpu')
        numba = cpu.copy()

        sph2d.compute_forces(cpu, config, backend='cpu')
        sph2d.compute_forces(numba, config, backend='numba')

        atol = 1e-9 * max(np.abs(cpu.force_x).max(), np.abs(cpu.force_y).max())
        np.testing.assert_allclose(numba.force_x, cpu.force_x, rtol=1e-8, atol=atol,
                                   err_msg="numba force_x differs from CPU")
        np.testing.assert_allclose(numba.force_y, cpu.force_y, rtol=1e-8, atol=atol,
                                   err_msg="numba force_y differs from CPU")

    def test_simulation_consistency(self):
        positions = generate_grid_block_positions((200.0, 16.0), 8, 6, 12.0, jitter=1.0,
                                                  rng=np.random.default_rng(5))
        results = {}
        for name in ('cpu', 'numba'):
            sim = SPHSimulation(SPHConfig(backend=name), log_level="WARNING")
            sim.load_positions(positions)
            sim.advance(5)
            results[name] = sim.snapshot_positions()

        np.testing.assert_allclose(results['numba'], results['cpu'], rtol=1e-8, atol=1e-8)

    def test_grid_search_matches_all_pairs(self):
        positions = generate_grid_block_positions((150.0, 16.0), 10, 10, 9.0, jitter=1.0,
                                                  rng=np.random.default_rng(11))
        results = {}
        for mode in ('all_pairs', 'grid'):
            sim = SPHSimulation(SPHConfig(backend='cpu', neighbor_search=mode),
                                log_level="WARNING")
            sim.load_positions(positions)
            sim.advance(3)
            results[mode] = sim.snapshot_positions()

        np.testing.assert_array_equal(results['grid'], results['all_pairs'])


def test_auto_select_small_problem():
    original = sph2d.get_backend()
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            assert sph2d.auto_select_backend(10) == 'cpu'
    finally:
        sph2d.set_backend(original)
