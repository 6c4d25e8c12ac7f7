from .registry import SessionRegistry, serialize_tags

__all__ = ["SessionRegistry", "serialize_tags"]
