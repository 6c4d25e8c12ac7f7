"""
smserve Error System

Design goals:
- Single canonical error code namespace (E#### format only)
- Explicit category per error (not prefix-derived)
- Immutable error_code per class
- Stable exit codes for the CLI
- Machine-safe formatting (no emoji, no decoration)
- Deterministic fingerprinting (not message-based)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional


# ---------------------------------------------------------------------
# Exit Codes (Process-Level Contract)
# ---------------------------------------------------------------------

class ExitCode(int, Enum):
    """
    Stable process exit codes.
    These values are part of the public CLI contract.
    """
    OK = 0

    DESCRIPTOR_ERROR = 11
    SIGNATURE_ERROR = 12
    INPUT_ERROR = 13
    LIFECYCLE_ERROR = 14
    BACKEND_ERROR = 15
    CONFIG_ERROR = 16

    INTERNAL_ERROR = 99


# ---------------------------------------------------------------------
# Error Categories (Explicit, Not Derived)
# ---------------------------------------------------------------------

class ErrorCategory(str, Enum):
    USER = "user_error"
    MODEL = "model_error"
    LIFECYCLE = "lifecycle_error"
    BACKEND = "backend_error"
    INTERNAL = "internal_error"


# ---------------------------------------------------------------------
# Canonical Error Codes (Single Namespace)
# ---------------------------------------------------------------------

class ErrorCode(str, Enum):
    # 1xxx – Descriptor
    DESCRIPTOR_NOT_FOUND = "E1001"
    DESCRIPTOR_PERMISSION_DENIED = "E1002"
    CORRUPT_DESCRIPTOR = "E1003"

    # 2xxx – MetaGraph / Signature
    TAGS_NOT_FOUND = "E2001"
    SIGNATURE_NOT_FOUND = "E2002"
    UNSUPPORTED_DTYPE = "E2003"

    # 3xxx – Predict I/O
    INPUT_MISMATCH = "E3001"
    OUTPUT_COUNT_MISMATCH = "E3002"

    # 4xxx – Handle lifecycle
    USE_AFTER_DISPOSE = "E4001"
    ALREADY_DISPOSED = "E4002"
    NOT_IMPLEMENTED = "E4003"
    REGISTRY_CLOSED = "E4004"

    # 5xxx – Native backend
    BACKEND_FAILED = "E5001"

    # 6xxx – Configuration
    INVALID_CONFIG = "E6001"


# ---------------------------------------------------------------------
# Deterministic Fingerprint
# ---------------------------------------------------------------------

def compute_fingerprint(
    *,
    error_code: ErrorCode,
    stage: Optional[str],
    signature: Optional[str],
) -> str:
    """
    Deterministic fingerprint derived from:
    - error_code
    - stage
    - optional structural signature (e.g., signature name or dtype key)

    Message text is NOT included.
    """
    import hashlib

    payload = f"{error_code.value}|{stage or ''}|{signature or ''}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def _names(values: Iterable[str]) -> str:
    return ",".join(sorted(values))


# ---------------------------------------------------------------------
# Base Error
# ---------------------------------------------------------------------

@dataclass(eq=False)
class SMServeError(Exception):
    """
    Base class for all smserve domain errors.

    Invariants:
    - error_code is immutable
    - category is explicit
    - exit_code is explicit
    - details dict for structured diagnostic info
    """

    message: str
    error_code: ErrorCode
    category: ErrorCategory
    exit_code: ExitCode
    stage: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    details: Optional[Dict[str, Any]] = None
    signature: Optional[str] = None  # used for fingerprint stability

    def __post_init__(self):
        if not isinstance(self.error_code, ErrorCode):
            raise TypeError("error_code must be an ErrorCode enum")

        if not isinstance(self.category, ErrorCategory):
            raise TypeError("category must be an ErrorCategory enum")

        if not isinstance(self.exit_code, ExitCode):
            raise TypeError("exit_code must be an ExitCode enum")

        self.context = self.context or {}
        self.details = self.details or {}

        self.fingerprint = compute_fingerprint(
            error_code=self.error_code,
            stage=self.stage,
            signature=self.signature,
        )

        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    # -----------------------------------------------------------------
    # Structured Output
    # -----------------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        """
        JSON-safe representation for CLI output.
        """
        return {
            "code": self.error_code.value,
            "category": self.category.value,
            "message": self.message,
            "stage": self.stage,
            "context": self.context,
            "details": self.details,
            "fingerprint": self.fingerprint,
        }

    # -----------------------------------------------------------------
    # Plain Text (Machine Safe)
    # -----------------------------------------------------------------

    def format(self) -> str:
        """
        Plain multi-line representation.
        No emoji, no decoration.
        """
        lines = [
            f"{self.__class__.__name__}: {self.message}",
            f"  code: {self.error_code.value}",
            f"  category: {self.category.value}",
            f"  fingerprint: {self.fingerprint}",
        ]

        if self.stage:
            lines.append(f"  stage: {self.stage}")

        if self.context:
            lines.append("  context:")
            for k, v in self.context.items():
                lines.append(f"    {k}: {v}")

        if self.details:
            lines.append("  details:")
            for k, v in self.details.items():
                lines.append(f"    {k}: {v}")

        return "\n".join(lines)


# ---------------------------------------------------------------------
# Descriptor Errors
# ---------------------------------------------------------------------

class DescriptorNotFoundError(SMServeError):
    def __init__(self, message: str, model_path: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.DESCRIPTOR_NOT_FOUND,
            category=ErrorCategory.USER,
            exit_code=ExitCode.DESCRIPTOR_ERROR,
            stage="read_descriptor",
            context={"model_path": model_path} if model_path else None,
            **kwargs,
        )


class DescriptorPermissionError(SMServeError):
    def __init__(self, message: str, model_path: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.DESCRIPTOR_PERMISSION_DENIED,
            category=ErrorCategory.USER,
            exit_code=ExitCode.DESCRIPTOR_ERROR,
            stage="read_descriptor",
            context={"model_path": model_path} if model_path else None,
            **kwargs,
        )


class CorruptDescriptorError(SMServeError):
    def __init__(self, message: str, model_path: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CORRUPT_DESCRIPTOR,
            category=ErrorCategory.MODEL,
            exit_code=ExitCode.DESCRIPTOR_ERROR,
            stage="read_descriptor",
            context={"model_path": model_path} if model_path else None,
            **kwargs,
        )


# ---------------------------------------------------------------------
# MetaGraph / Signature Errors
# ---------------------------------------------------------------------

class TagsNotFoundError(SMServeError):
    def __init__(self, tags: Iterable[str], **kwargs):
        tags = list(tags)
        super().__init__(
            message=f"The SavedModel does not have tags: {_names(tags)}",
            error_code=ErrorCode.TAGS_NOT_FOUND,
            category=ErrorCategory.USER,
            exit_code=ExitCode.SIGNATURE_ERROR,
            stage="signature_lookup",
            signature=_names(tags),
            context={"tags": sorted(tags)},
            **kwargs,
        )


class SignatureNotFoundError(SMServeError):
    def __init__(self, signature_name: str, available: Iterable[str] = (), **kwargs):
        super().__init__(
            message=f"The SavedModel does not have signature: {signature_name}",
            error_code=ErrorCode.SIGNATURE_NOT_FOUND,
            category=ErrorCategory.USER,
            exit_code=ExitCode.SIGNATURE_ERROR,
            stage="signature_lookup",
            signature=signature_name,
            context={"signature": signature_name},
            details={"available": sorted(available)},
            **kwargs,
        )


class UnsupportedDtypeError(SMServeError):
    def __init__(self, tf_dtype: Optional[str], **kwargs):
        super().__init__(
            message=(
                f"Unsupported tensor DataType {tf_dtype}, try to modify the "
                "model in python to convert the datatype"
            ),
            error_code=ErrorCode.UNSUPPORTED_DTYPE,
            category=ErrorCategory.MODEL,
            exit_code=ExitCode.SIGNATURE_ERROR,
            stage="inspect",
            signature=tf_dtype,
            context={"tf_dtype": tf_dtype},
            **kwargs,
        )


# ---------------------------------------------------------------------
# Predict Errors
# ---------------------------------------------------------------------

class InputMismatchError(SMServeError):
    def __init__(self, expected: Iterable[str], provided: Iterable[str], **kwargs):
        expected = sorted(expected)
        provided = sorted(provided)
        super().__init__(
            message=(
                f"The model signatureDef input names are {','.join(expected)}, "
                f"however the provided input names are {','.join(provided)}."
            ),
            error_code=ErrorCode.INPUT_MISMATCH,
            category=ErrorCategory.USER,
            exit_code=ExitCode.INPUT_ERROR,
            stage="predict",
            details={"expected": expected, "provided": provided},
            **kwargs,
        )


class OutputCountMismatchError(SMServeError):
    def __init__(self, received: int, expected: int, **kwargs):
        super().__init__(
            message=(
                "Output tensors do not match output node names, "
                f"received {received} output tensors but there are "
                f"{expected} output nodes."
            ),
            error_code=ErrorCode.OUTPUT_COUNT_MISMATCH,
            category=ErrorCategory.BACKEND,
            exit_code=ExitCode.BACKEND_ERROR,
            stage="predict",
            details={"received": received, "expected": expected},
            **kwargs,
        )


# ---------------------------------------------------------------------
# Lifecycle Errors
# ---------------------------------------------------------------------

class UseAfterDisposeError(SMServeError):
    def __init__(self, message: str = "The SavedModel has already been deleted.", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.USE_AFTER_DISPOSE,
            category=ErrorCategory.LIFECYCLE,
            exit_code=ExitCode.LIFECYCLE_ERROR,
            **kwargs,
        )


class AlreadyDisposedError(SMServeError):
    def __init__(self, message: str = "This SavedModel has already been deleted.", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.ALREADY_DISPOSED,
            category=ErrorCategory.LIFECYCLE,
            exit_code=ExitCode.LIFECYCLE_ERROR,
            stage="dispose",
            **kwargs,
        )


class ExecuteNotSupportedError(SMServeError, NotImplementedError):
    def __init__(self, message: str = "execute() of SavedModelHandle is not supported yet.", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.NOT_IMPLEMENTED,
            category=ErrorCategory.USER,
            exit_code=ExitCode.LIFECYCLE_ERROR,
            stage="execute",
            **kwargs,
        )


class RegistryClosedError(SMServeError):
    def __init__(self, message: str = "The session registry has been shut down.", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.REGISTRY_CLOSED,
            category=ErrorCategory.LIFECYCLE,
            exit_code=ExitCode.LIFECYCLE_ERROR,
            **kwargs,
        )


# ---------------------------------------------------------------------
# Backend / Config Errors
# ---------------------------------------------------------------------

class BackendError(SMServeError):
    def __init__(self, message: str, backend: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.BACKEND_FAILED,
            category=ErrorCategory.BACKEND,
            exit_code=ExitCode.BACKEND_ERROR,
            context={"backend": backend} if backend else None,
            **kwargs,
        )


class ConfigError(SMServeError):
    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_CONFIG,
            category=ErrorCategory.USER,
            exit_code=ExitCode.CONFIG_ERROR,
            context={"config_path": config_path} if config_path else None,
            **kwargs,
        )


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

__all__ = [
    "ExitCode",
    "ErrorCategory",
    "ErrorCode",
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
