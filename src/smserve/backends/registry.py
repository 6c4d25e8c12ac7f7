"""
Backend discovery and registration.
"""

from typing import Dict, Type

from ..core.errors import BackendError
from .base import EnvironmentValidation, ExecutionBackend


class BackendRegistry:
    """
    Central registry for all execution backends.
    """

    _backends: Dict[str, Type[ExecutionBackend]] = {}

    @classmethod
    def register(cls, name: str, backend_cls: Type[ExecutionBackend]):
        """Register a backend class."""
        cls._backends[name] = backend_cls

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._backends.pop(name, None)

    @classmethod
    def get_backend(cls, name: str) -> ExecutionBackend:
        """Get a validated backend instance by name."""
        if name not in cls._backends:
            available = ", ".join(sorted(cls._backends)) or "none"
            raise BackendError(
                f"Unknown backend: '{name}'. Available: {available}",
                backend=name,
            )

        backend = cls._backends[name]()

        validation = backend.validate_environment()
        if not validation.is_valid:
            errors = "\n  ".join(validation.errors)
            raise BackendError(
                f"Backend '{name}' not available:\n  {errors}\n\n"
                f"Run 'smserve doctor' for details",
                backend=name,
            )

        return backend

    @classmethod
    def list_backends(cls) -> Dict[str, EnvironmentValidation]:
        """List all backends with their validation status."""
        results = {}
        for name, backend_cls in cls._backends.items():
            try:
                results[name] = backend_cls().validate_environment()
            except Exception as e:
                results[name] = EnvironmentValidation(
                    is_valid=False,
                    backend_name=name,
                    errors=[str(e)],
                    warnings=[],
                    info={},
                )
        return results
