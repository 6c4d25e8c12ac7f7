"""Core primitives for smserve."""

from .types import (
    DType,
    MetaGraph,
    PredictConfig,
    SessionRecord,
    SignatureDefEntry,
    TensorInfo,
)
from .dtypes import map_tf_dtype_to_dtype
from .config import RuntimeConfig, load_config
from .errors import (
    SMServeError,
    DescriptorNotFoundError,
    DescriptorPermissionError,
    CorruptDescriptorError,
    TagsNotFoundError,
    SignatureNotFoundError,
    UnsupportedDtypeError,
    InputMismatchError,
    OutputCountMismatchError,
    UseAfterDisposeError,
    AlreadyDisposedError,
    ExecuteNotSupportedError,
    RegistryClosedError,
    BackendError,
    ConfigError,
)

__all__ = [
    "DType",
    "MetaGraph",
    "PredictConfig",
    "SessionRecord",
    "SignatureDefEntry",
    "TensorInfo",
    "map_tf_dtype_to_dtype",
    "RuntimeConfig",
    "load_config",
    "SMServeError",
    "DescriptorNotFoundError",
    "DescriptorPermissionError",
    "CorruptDescriptorError",
    "TagsNotFoundError",
    "SignatureNotFoundError",
    "UnsupportedDtypeError",
    "InputMismatchError",
    "OutputCountMismatchError",
    "UseAfterDisposeError",
    "AlreadyDisposedError",
    "ExecuteNotSupportedError",
    "RegistryClosedError",
    "BackendError",
    "ConfigError",
]
