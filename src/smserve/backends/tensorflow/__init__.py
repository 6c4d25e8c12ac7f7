"""TensorFlow session backend for SavedModel inference."""

from .backend import TensorFlowBackend

# Auto-register
from ..registry import BackendRegistry
BackendRegistry.register("tensorflow", TensorFlowBackend)

__all__ = ["TensorFlowBackend"]
