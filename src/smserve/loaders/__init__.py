"""
SavedModel descriptor loaders for smserve.
"""

from .descriptor import read_saved_model_proto
from .inspector import (
    get_meta_graphs_from_saved_model,
    get_signature_def_entry,
    inspect_descriptor,
)

__all__ = [
    "read_saved_model_proto",
    "get_meta_graphs_from_saved_model",
    "get_signature_def_entry",
    "inspect_descriptor",
]
