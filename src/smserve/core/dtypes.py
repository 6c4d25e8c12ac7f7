"""
Mapping from TensorFlow DataType keys to smserve dtypes.

Several TensorFlow integer widths collapse onto INT32. Unknown keys are
rejected rather than defaulted, since callers cannot marshal a tensor whose
representation is unknown.
"""

from __future__ import annotations

from typing import Dict, Optional

from .errors import UnsupportedDtypeError
from .types import DType


TF_DTYPE_MAP: Dict[str, DType] = {
    "DT_FLOAT": DType.FLOAT32,
    "DT_INT64": DType.INT32,
    "DT_INT32": DType.INT32,
    "DT_UINT8": DType.INT32,
    "DT_BOOL": DType.BOOL,
    "DT_COMPLEX64": DType.COMPLEX64,
    "DT_STRING": DType.STRING,
}


def map_tf_dtype_to_dtype(tf_dtype: Optional[str]) -> DType:
    """
    Translate a TensorFlow DataType key (e.g. 'DT_FLOAT') to a DType.

    Raises:
        UnsupportedDtypeError: If the key has no mapping.
    """
    try:
        return TF_DTYPE_MAP[tf_dtype]
    except KeyError:
        raise UnsupportedDtypeError(tf_dtype) from None


def supported_tf_dtypes() -> tuple[str, ...]:
    return tuple(sorted(TF_DTYPE_MAP))


__all__ = ["TF_DTYPE_MAP", "map_tf_dtype_to_dtype", "supported_tf_dtypes"]
