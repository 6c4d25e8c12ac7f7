"""
Error system tests.
"""

import pytest

from smserve.core.errors import (
    AlreadyDisposedError,
    BackendError,
    CorruptDescriptorError,
    DescriptorNotFoundError,
    ErrorCategory,
    ErrorCode,
    ExecuteNotSupportedError,
    ExitCode,
    InputMismatchError,
    OutputCountMismatchError,
    SignatureNotFoundError,
    SMServeError,
    TagsNotFoundError,
    UseAfterDisposeError,
)


class TestErrorCodes:

    @pytest.mark.parametrize("error,code,exit_code", [
        (DescriptorNotFoundError("missing"), ErrorCode.DESCRIPTOR_NOT_FOUND, ExitCode.DESCRIPTOR_ERROR),
        (CorruptDescriptorError("bad"), ErrorCode.CORRUPT_DESCRIPTOR, ExitCode.DESCRIPTOR_ERROR),
        (TagsNotFoundError(["serve"]), ErrorCode.TAGS_NOT_FOUND, ExitCode.SIGNATURE_ERROR),
        (SignatureNotFoundError("predict"), ErrorCode.SIGNATURE_NOT_FOUND, ExitCode.SIGNATURE_ERROR),
        (InputMismatchError(["a"], ["b"]), ErrorCode.INPUT_MISMATCH, ExitCode.INPUT_ERROR),
        (OutputCountMismatchError(1, 2), ErrorCode.OUTPUT_COUNT_MISMATCH, ExitCode.BACKEND_ERROR),
        (UseAfterDisposeError(), ErrorCode.USE_AFTER_DISPOSE, ExitCode.LIFECYCLE_ERROR),
        (AlreadyDisposedError(), ErrorCode.ALREADY_DISPOSED, ExitCode.LIFECYCLE_ERROR),
        (ExecuteNotSupportedError(), ErrorCode.NOT_IMPLEMENTED, ExitCode.LIFECYCLE_ERROR),
        (BackendError("boom"), ErrorCode.BACKEND_FAILED, ExitCode.BACKEND_ERROR),
    ])
    def test_codes_are_fixed_per_class(self, error, code, exit_code):
        assert isinstance(error, SMServeError)
        assert error.error_code is code
        assert error.exit_code is exit_code

    def test_base_rejects_raw_strings(self):
        with pytest.raises(TypeError):
            SMServeError(
                message="x",
                error_code="E1001",
                category=ErrorCategory.USER,
                exit_code=ExitCode.DESCRIPTOR_ERROR,
            )


class TestFingerprint:

    def test_fingerprint_ignores_message(self):
        a = DescriptorNotFoundError("There is no saved_model.pb file in the directory: /a")
        b = DescriptorNotFoundError("There is no saved_model.pb file in the directory: /b")
        assert a.fingerprint == b.fingerprint

    def test_fingerprint_uses_signature(self):
        assert SignatureNotFoundError("a").fingerprint != SignatureNotFoundError("b").fingerprint


class TestFormatting:

    def test_tags_message_names_tags(self):
        error = TagsNotFoundError(["serve", "gpu"])
        assert str(error) == "The SavedModel does not have tags: gpu,serve"
        assert error.context == {"tags": ["gpu", "serve"]}

    def test_input_mismatch_names_both_sets(self):
        error = InputMismatchError(["x", "y"], ["x"])
        assert "x,y" in str(error)
        assert error.details == {"expected": ["x", "y"], "provided": ["x"]}

    def test_to_json(self):
        data = SignatureNotFoundError("predict", available=["serving_default"]).to_json()
        assert data["code"] == "E2002"
        assert data["category"] == "user_error"
        assert data["details"] == {"available": ["serving_default"]}
        assert len(data["fingerprint"]) == 16

    def test_format_is_plain_text(self):
        text = DescriptorNotFoundError("missing", model_path="/m").format()
        assert text.splitlines()[0] == "DescriptorNotFoundError: missing"
        assert "  code: E1001" in text
        assert "    model_path: /m" in text


class TestExecuteNotSupported:

    def test_is_builtin_not_implemented(self):
        with pytest.raises(NotImplementedError):
            raise ExecuteNotSupportedError()
