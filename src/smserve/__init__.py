"""
smserve - SavedModel signature inspection and inference over TensorFlow sessions.
"""

__version__ = "0.1.0"

# Lazy imports - don't load TensorFlow at module level
def __getattr__(name):
    if name in ("load_saved_model", "count_loaded_models", "SavedModelHandle"):
        from .model import saved_model
        return getattr(saved_model, name)
    elif name in ("inspect_descriptor", "get_meta_graphs_from_saved_model"):
        from .loaders import inspector
        return getattr(inspector, name)
    elif name == "SessionRegistry":
        from .sessions.registry import SessionRegistry
        return SessionRegistry
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = ["__version__"]
