"""
Backend selection and dispatch system for SPH.

Supports two backends:
1. CPU (NumPy) - Always available, vectorized pair-list implementation
2. Numba - JIT-compiled CPU loops, parallel over particles

The backend can be selected globally or per-function call.
"""

import enum
import logging
import warnings
from typing import Optional, Dict, Callable, List
from dataclasses import dataclass

import numba

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    """Available computation backends."""
    CPU = "cpu"      # NumPy (always available)
    NUMBA = "numba"  # Numba JIT


@dataclass
class BackendInfo:
    """Information about a backend."""
    backend: Backend
    available: bool
    device_name: str = "CPU"
    threads: int = 1


class BackendManager:
    """Manages backend selection and dispatching."""

    def __init__(self):
        self._current_backend = Backend.CPU
        self._available_backends = {}
        self._implementations = {}
        self._detect_backends()

    def _detect_backends(self):
        """Describe the backends this installation provides."""
        self._available_backends[Backend.CPU] = BackendInfo(
            backend=Backend.CPU,
            available=True,
            device_name="CPU (NumPy)"
        )

        # Setting NUMBA_DISABLE_JIT turns the kernels into slow pure Python
        jit_disabled = bool(numba.config.DISABLE_JIT)
        self._available_backends[Backend.NUMBA] = BackendInfo(
            backend=Backend.NUMBA,
            available=not jit_disabled,
            device_name=f"CPU (Numba {numba.__version__})",
            threads=numba.config.NUMBA_NUM_THREADS
        )
        if jit_disabled:
            logger.info("Numba JIT disabled via environment, numba backend unavailable")

    @property
    def current_backend(self) -> Backend:
        """Get current backend."""
        return self._current_backend

    @property
    def available_backends(self) -> List[Backend]:
        """Get list of available backends."""
        return [b for b, info in self._available_backends.items() if info.available]

    def set_backend(self, backend: Backend) -> bool:
        """Set the current backend.

        Args:
            backend: Backend to use

        Returns:
            True if backend was set successfully
        """
        if not self._available_backends[backend].available:
            warnings.warn(f"Backend {backend.value} not available, keeping {self._current_backend.value}")
            return False

        self._current_backend = backend
        logger.info("Backend set to: %s", self._available_backends[backend].device_name)
        return True

    def auto_select_backend(self, n_particles: int) -> Backend:
        """Pick a backend from the problem size.

        The pair-list NumPy path wins for small populations where JIT
        dispatch overhead dominates.
        """
        if self._available_backends[Backend.NUMBA].available and n_particles > 1000:
            return Backend.NUMBA
        return Backend.CPU

    def register_implementation(self, function_name: str, backend: Backend,
                                implementation: Callable):
        """Register a backend-specific implementation.

        Args:
            function_name: Name of the function
            backend: Backend for this implementation
            implementation: The implementation function
        """
        if function_name not in self._implementations:
            self._implementations[function_name] = {}
        self._implementations[function_name][backend] = implementation

    def get_implementation(self, function_name: str,
                           backend: Optional[Backend] = None) -> Callable:
        """Get implementation for a function.

        Args:
            function_name: Name of the function
            backend: Backend to use (None for current)

        Returns:
            Implementation function

        Raises:
            ValueError: If no implementation found
        """
        if backend is None:
            backend = self._current_backend

        if function_name not in self._implementations:
            raise ValueError(f"No implementations registered for {function_name}")

        if backend in self._implementations[function_name]:
            return self._implementations[function_name][backend]

        # Fall back to CPU
        if Backend.CPU in self._implementations[function_name]:
            if backend != Backend.CPU:
                warnings.warn(f"No {backend.value} implementation for {function_name}, using CPU")
            return self._implementations[function_name][Backend.CPU]

        raise ValueError(f"No implementation found for {function_name}")

    def dispatch(self, function_name: str, *args, backend: Optional[Backend] = None, **kwargs):
        """Dispatch a function call to appropriate backend."""
        impl = self.get_implementation(function_name, backend)
        return impl(*args, **kwargs)

    def print_info(self):
        """Print information about available backends."""
        print("\nSPH Backend Information")
        print("=" * 60)

        for backend, info in self._available_backends.items():
            status = "+" if info.available else "-"
            print(f"{status} {backend.value:6s}: {info.device_name}")
            if backend == Backend.NUMBA and info.available:
                print(f"           Threads: {info.threads}")

        print(f"\nCurrent backend: {self._current_backend.value}")
        print("=" * 60)


# Global backend manager instance
_backend_manager = BackendManager()


def parse_backend(backend: str) -> Backend:
    """Convert a backend name to the enum.

    Raises:
        ValueError: For unknown names
    """
    try:
        return Backend(backend.lower())
    except ValueError:
        names = ", ".join(b.value for b in Backend)
        raise ValueError(f"Invalid backend: {backend}. Choose from: {names}") from None


# Public API
def set_backend(backend: str) -> bool:
    """Set the global backend.

    Args:
        backend: 'cpu' or 'numba'

    Returns:
        True if successful
    """
    try:
        backend_enum = parse_backend(backend)
    except ValueError as e:
        warnings.warn(str(e))
        return False
    return _backend_manager.set_backend(backend_enum)


def get_backend() -> str:
    """Get current backend name."""
    return _backend_manager.current_backend.value


def list_backends() -> Dict[str, bool]:
    """Get dictionary of backend availability."""
    return {
        b.value: info.available
        for b, info in _backend_manager._available_backends.items()
    }


def auto_select_backend(n_particles: int) -> str:
    """Auto-select best backend for particle count."""
    backend = _backend_manager.auto_select_backend(n_particles)
    _backend_manager.set_backend(backend)
    return backend.value


def print_backend_info():
    """Print backend information."""
    _backend_manager.print_info()


# Decorator for backend-specific implementations
def backend_function(function_name: str):
    """Decorator to register backend-specific implementations.

    Usage:
        @backend_function("compute_density_pressure")
        @for_backend(Backend.NUMBA)
        def _compute_density_pressure_numba(...):
            ...
    """
    def decorator(func):
        if hasattr(func, '_backend'):
            _backend_manager.register_implementation(function_name, func._backend, func)
        return func
    return decorator


def for_backend(backend: Backend):
    """Helper decorator to specify backend."""
    def decorator(func):
        func._backend = backend
        return func
    return decorator


def dispatch(function_name: str, *args, backend: Optional[str] = None, **kwargs):
    """Dispatch function to appropriate backend.

    Args:
        function_name: Name of the function
        *args: Positional arguments
        backend: Override backend (None for current)
        **kwargs: Keyword arguments

    Returns:
        Function result
    """
    backend_enum = parse_backend(backend) if backend else None
    return _backend_manager.dispatch(function_name, *args, backend=backend_enum, **kwargs)
