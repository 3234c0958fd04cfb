"""Pytest configuration for sph2d tests."""
import os
import sys
from pathlib import Path

import numpy as np
import pytest


def pytest_configure(config):
    """Configure pytest environment for sph2d tests."""
    # Add workspace root to Python path for sph2d package imports
    workspace_root = Path(__file__).parent.parent.parent
    if str(workspace_root) not in sys.path:
        sys.path.insert(0, str(workspace_root))

    # Set SDL to use dummy video driver for headless operation
    os.environ['SDL_VIDEODRIVER'] = 'dummy'
    os.environ['SDL_AUDIODRIVER'] = 'dummy'
    os.environ['MPLBACKEND'] = 'Agg'


@pytest.fixture
def config():
    """Default dam-break constants with a fixed seed."""
    from sph2d.core.config import SPHConfig
    return SPHConfig(seed=1234)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture(params=['cpu', 'numba'])
def backend(request):
    """Parametrize tests over both backends, restoring the global choice."""
    import sph2d
    original_backend = sph2d.get_backend()
    if not sph2d.list_backends().get(request.param, False):
        pytest.skip(f"Backend {request.param} not available")
    sph2d.set_backend(request.param)
    yield request.param
    sph2d.set_backend(original_backend)
