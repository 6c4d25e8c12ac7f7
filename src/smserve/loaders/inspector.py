"""
MetaGraph inspection for SavedModel descriptors.

A SavedModel may hold several MetaGraphs, identified by tag sets. Each
MetaGraph has its own SignatureDefs, whose input and output TensorInfos are
converted here into smserve types.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tensorflow.core.framework import types_pb2

from ..core.dtypes import map_tf_dtype_to_dtype
from ..core.errors import SignatureNotFoundError, TagsNotFoundError
from ..core.types import MetaGraph, SignatureDefEntry, TensorInfo
from .descriptor import read_saved_model_proto

logger = logging.getLogger(__name__)

# TensorFlow-internal signature holding the SavedModel's init op.
SAVED_MODEL_INIT_OP_KEY = "__saved_model_init_op"


def get_enum_key_from_value(enum: Any, value: int) -> Optional[str]:
    """
    Get a key of an enum by its value. Used to turn a protobuf enum number
    into its name, e.g. 1 -> 'DT_FLOAT'.

    Accepts protobuf enum wrappers or plain mappings.
    """
    pairs = enum.items() if hasattr(enum, "items") else vars(enum).items()
    for key, candidate in pairs:
        if candidate == value:
            return key
    return None


def _convert_tensor_info(tensor_info) -> TensorInfo:
    tf_dtype = get_enum_key_from_value(types_pb2.DataType, tensor_info.dtype)
    dtype = map_tf_dtype_to_dtype(tf_dtype)

    tensor_shape = tensor_info.tensor_shape
    if tensor_shape.unknown_rank:
        shape = None
    else:
        shape = tuple(int(dim.size) for dim in tensor_shape.dim)

    return TensorInfo(
        name=tensor_info.name,
        dtype=dtype,
        tf_dtype=tf_dtype,
        shape=shape,
    )


def _convert_tensor_map(tensor_map) -> Dict[str, TensorInfo]:
    # protobuf map iteration order is unspecified; sort for a stable declared order
    return {key: _convert_tensor_info(tensor_map[key]) for key in sorted(tensor_map)}


def inspect_meta_graphs(saved_model) -> List[MetaGraph]:
    """Convert a deserialized SavedModel message into MetaGraph records."""
    result: List[MetaGraph] = []

    for meta_graph_def in saved_model.meta_graphs:
        tag_list = tuple(meta_graph_def.meta_info_def.tags)

        signature_defs: Dict[str, SignatureDefEntry] = {}
        for key in sorted(meta_graph_def.signature_def):
            if key == SAVED_MODEL_INIT_OP_KEY:
                continue
            signature_def = meta_graph_def.signature_def[key]
            signature_defs[key] = SignatureDefEntry(
                inputs=_convert_tensor_map(signature_def.inputs),
                outputs=_convert_tensor_map(signature_def.outputs),
                method_name=signature_def.method_name,
            )

        result.append(
            MetaGraph(
                tags=frozenset(tag_list),
                signature_defs=signature_defs,
                tag_list=tag_list,
            )
        )

    logger.debug("Inspected %d MetaGraph(s)", len(result))
    return result


def get_meta_graphs_from_saved_model(path: str | Path) -> List[MetaGraph]:
    """
    Inspect the MetaGraphs of the SavedModel at `path`.

    Args:
        path: Path to the SavedModel folder.

    Returns:
        MetaGraph records in descriptor order.
    """
    return inspect_meta_graphs(read_saved_model_proto(path))


# Public alias
inspect_descriptor = get_meta_graphs_from_saved_model


def get_signature_def_entry(
    meta_graphs: List[MetaGraph],
    tags: Iterable[str],
    signature: str,
) -> SignatureDefEntry:
    """
    Get the SignatureDefEntry of `signature` in the first MetaGraph whose
    tag set equals `tags`.

    Raises:
        TagsNotFoundError: No MetaGraph carries exactly these tags.
        SignatureNotFoundError: The matched MetaGraph lacks the signature.
    """
    tags = list(tags)
    for meta_graph in meta_graphs:
        if meta_graph.has_tags(tags):
            entry = meta_graph.signature_defs.get(signature)
            if entry is None:
                raise SignatureNotFoundError(
                    signature, available=meta_graph.signature_defs.keys()
                )
            return entry
    raise TagsNotFoundError(tags)


__all__ = [
    "SAVED_MODEL_INIT_OP_KEY",
    "get_enum_key_from_value",
    "get_meta_graphs_from_saved_model",
    "get_signature_def_entry",
    "inspect_descriptor",
    "inspect_meta_graphs",
]
