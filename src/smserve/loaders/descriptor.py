"""
SavedModel descriptor reader.

Reads `<path>/saved_model.pb` and deserializes it into TensorFlow's
SavedModel protobuf message. No retries: a missing descriptor is a
configuration problem, not a transient one.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from google.protobuf.message import DecodeError
from tensorflow.core.protobuf import saved_model_pb2

from ..core.errors import (
    CorruptDescriptorError,
    DescriptorNotFoundError,
    DescriptorPermissionError,
)

logger = logging.getLogger(__name__)

SAVED_MODEL_FILE_NAME = "saved_model.pb"


def descriptor_path(path: str | Path) -> Path:
    return Path(path).expanduser() / SAVED_MODEL_FILE_NAME


def read_saved_model_proto(path: str | Path) -> saved_model_pb2.SavedModel:
    """
    Read the SavedModel proto message from a SavedModel directory.

    Args:
        path: Path to the SavedModel folder.

    Raises:
        DescriptorNotFoundError: No saved_model.pb in the directory.
        DescriptorPermissionError: The descriptor exists but is unreadable.
        CorruptDescriptorError: The bytes do not parse as a SavedModel.
    """
    pb_path = descriptor_path(path)

    if not pb_path.is_file():
        raise DescriptorNotFoundError(
            f"There is no {SAVED_MODEL_FILE_NAME} file in the directory: {path}",
            model_path=str(path),
        )

    if not os.access(pb_path, os.R_OK):
        raise DescriptorPermissionError(
            f"The {SAVED_MODEL_FILE_NAME} file is not readable in the directory: {path}",
            model_path=str(path),
        )

    try:
        data = pb_path.read_bytes()
    except PermissionError as e:
        raise DescriptorPermissionError(
            f"The {SAVED_MODEL_FILE_NAME} file is not readable in the directory: {path}",
            model_path=str(path),
        ) from e

    logger.debug("Read %d bytes from %s", len(data), pb_path)

    message = saved_model_pb2.SavedModel()
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise CorruptDescriptorError(
            f"Failed to parse {SAVED_MODEL_FILE_NAME} in the directory: {path}",
            model_path=str(path),
            details={"size_bytes": len(data)},
        ) from e

    return message


__all__ = ["SAVED_MODEL_FILE_NAME", "descriptor_path", "read_saved_model_proto"]
