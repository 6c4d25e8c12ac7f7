"""SavedModel inference handles."""

from .inputs import NamedTensors, SingleTensor, TensorList, as_predict_inputs
from .saved_model import (
    SavedModelHandle,
    count_loaded_models,
    get_default_registry,
    load_saved_model,
    set_default_registry,
    shutdown_default_registry,
)

__all__ = [
    "NamedTensors",
    "SingleTensor",
    "TensorList",
    "as_predict_inputs",
    "SavedModelHandle",
    "count_loaded_models",
    "get_default_registry",
    "load_saved_model",
    "set_default_registry",
    "shutdown_default_registry",
]
