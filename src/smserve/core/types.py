from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


# -----------------------------
# Enums
# -----------------------------
class DType(str, Enum):
    """Wrapper tensor types. Coarser than TensorFlow's DataType enum."""
    FLOAT32 = "float32"
    INT32 = "int32"
    BOOL = "bool"
    COMPLEX64 = "complex64"
    STRING = "string"

    @property
    def numpy_dtype(self):
        """numpy dtype used when marshaling tensors of this type."""
        import numpy as np

        return {
            DType.FLOAT32: np.float32,
            DType.INT32: np.int32,
            DType.BOOL: np.bool_,
            DType.COMPLEX64: np.complex64,
            DType.STRING: np.object_,
        }[self]


# -----------------------------
# Configs
# -----------------------------
@dataclass(frozen=True)
class PredictConfig:
    """Per-call predict options."""
    batch_size: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        if self.batch_size is not None and self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")


# -----------------------------
# Core Data Types
# -----------------------------
@dataclass(frozen=True)
class TensorInfo:
    """
    One tensor of a signature.

    `name` is the graph node reference as stored in the descriptor and may
    carry an output-index suffix such as ":0".
    """
    name: str
    dtype: DType
    tf_dtype: str                           # e.g. 'DT_FLOAT'
    shape: Optional[Tuple[int, ...]]        # -1 for unknown dims, None for unknown rank

    def with_name(self, name: str) -> "TensorInfo":
        return replace(self, name=name)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "dtype": self.dtype.value,
            "tf_dtype": self.tf_dtype,
            "shape": list(self.shape) if self.shape is not None else None,
        }


@dataclass(frozen=True)
class SignatureDefEntry:
    """Inputs and outputs of one named signature, keyed by signature tensor key."""
    inputs: Dict[str, TensorInfo]
    outputs: Dict[str, TensorInfo]
    method_name: str = ""

    def to_dict(self) -> dict:
        return {
            "method_name": self.method_name,
            "inputs": {k: v.to_dict() for k, v in self.inputs.items()},
            "outputs": {k: v.to_dict() for k, v in self.outputs.items()},
        }


@dataclass(frozen=True)
class MetaGraph:
    """
    One tagged graph of a SavedModel.

    Tag sets compare as sets; `tag_list` keeps descriptor order for display.
    """
    tags: FrozenSet[str]
    signature_defs: Dict[str, SignatureDefEntry]
    tag_list: Tuple[str, ...] = ()

    def has_tags(self, tags) -> bool:
        return self.tags == frozenset(tags)

    def to_dict(self) -> dict:
        return {
            "tags": list(self.tag_list or sorted(self.tags)),
            "signature_defs": {
                name: entry.to_dict() for name, entry in self.signature_defs.items()
            },
        }


@dataclass
class SessionRecord:
    """
    A native session shared by every handle loaded from the same
    (path, tag set). Mutable: ref_count tracks live handles.
    """
    path: str
    tags: FrozenSet[str]
    native_handle: int
    ref_count: int = field(default=0)
