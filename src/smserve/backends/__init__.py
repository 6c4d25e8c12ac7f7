"""
smserve execution backends.

This file ensures all backends are auto-registered on import.
"""

from .registry import BackendRegistry
from .base import ExecutionBackend, EnvironmentValidation

# Force import of all backends to trigger auto-registration
from . import tensorflow

__all__ = [
    'BackendRegistry',
    'ExecutionBackend',
    'EnvironmentValidation',
]
