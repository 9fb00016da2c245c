# tests/core/test_error_handling.py

import logging

import pytest
from botocore.exceptions import (
    EndpointConnectionError,
    IncompleteReadError,
    NoCredentialsError,
)

from image_optimizer.core.exceptions import (
    AuthError,
    NotFoundError,
    QuotaExceededError,
    S3Error,
    StoreUnavailableError,
    TransferError,
)
from image_optimizer.core.error_handling import (
    BatchOperationContextManager,
    translate_store_errors,
)
from image_optimizer.testing.fakes import make_client_error


def _raising(exc, default=StoreUnavailableError):
    @translate_store_errors(default=default)
    def s3_operation():
        raise exc

    return s3_operation


# --- Tests for @translate_store_errors ---

@pytest.mark.parametrize(
    "code, expected",
    [
        ("NoSuchKey", NotFoundError),
        ("NoSuchBucket", NotFoundError),
        ("404", NotFoundError),
        ("AccessDenied", AuthError),
        ("InvalidAccessKeyId", AuthError),
        ("ExpiredToken", AuthError),
        ("QuotaExceeded", QuotaExceededError),
        ("EntityTooLarge", QuotaExceededError),
        ("SlowDown", StoreUnavailableError),
        ("ServiceUnavailable", StoreUnavailableError),
        ("InternalError", StoreUnavailableError),
    ],
)
def test_client_error_codes_are_classified(code, expected):
    with pytest.raises(expected) as exc_info:
        _raising(make_client_error(code, "GetObject"))()
    assert isinstance(exc_info.value.__cause__, Exception)
    assert "s3_operation" in str(exc_info.value)


def test_unknown_client_error_code_uses_default():
    with pytest.raises(TransferError):
        _raising(make_client_error("WeirdCode", "GetObject"), default=TransferError)()


def test_missing_credentials_are_auth_errors():
    with pytest.raises(AuthError):
        _raising(NoCredentialsError())()


def test_unreachable_endpoint_is_store_unavailable():
    error = EndpointConnectionError(endpoint_url="https://s3.example.invalid")
    with pytest.raises(StoreUnavailableError):
        _raising(error, default=TransferError)()


def test_other_botocore_errors_use_default():
    with pytest.raises(TransferError):
        _raising(IncompleteReadError(actual_bytes=10, expected_bytes=20), default=TransferError)()


def test_s3_errors_pass_through_unchanged():
    original = NotFoundError("already translated")
    with pytest.raises(NotFoundError) as exc_info:
        _raising(original)()
    assert exc_info.value is original


def test_non_store_errors_are_not_translated():
    with pytest.raises(KeyError):
        _raising(KeyError("Body"))()


def test_decorator_preserves_return_value_and_name():
    @translate_store_errors()
    def list_things():
        return ["a", "b"]

    assert list_things() == ["a", "b"]
    assert list_things.__name__ == "list_things"


def test_translated_errors_are_s3_errors():
    with pytest.raises(S3Error):
        _raising(make_client_error("AccessDenied", "PutObject"))()


# --- Tests for BatchOperationContextManager ---

@pytest.fixture
def batch_logger(monkeypatch):
    """Capture records from the batch logger (it does not propagate to root)."""
    records = []

    class _ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = _ListHandler(level=logging.DEBUG)
    target = logging.getLogger("image-optimizer.batch")
    target.addHandler(handler)
    yield records
    target.removeHandler(handler)


def test_batch_manager_collects_errors(batch_logger):
    with BatchOperationContextManager("Optimize") as batch:
        batch.add_error("download: timed out", "uuid/a.jpg")
        batch.add_error("transform: bad data", "uuid/b.jpg")

    assert batch.errors == [
        {"item": "uuid/a.jpg", "error": "download: timed out"},
        {"item": "uuid/b.jpg", "error": "transform: bad data"},
    ]
    messages = [record.getMessage() for record in batch_logger]
    assert any("completed with 2 error(s)" in m for m in messages)
    assert any("uuid/a.jpg" in m and "timed out" in m for m in messages)


def test_batch_manager_reports_success(batch_logger):
    with BatchOperationContextManager("Optimize"):
        pass

    messages = [record.getMessage() for record in batch_logger]
    assert "Optimize completed successfully." in messages


def test_batch_manager_does_not_suppress_exceptions(batch_logger):
    with pytest.raises(RuntimeError, match="boom"):
        with BatchOperationContextManager("Optimize"):
            raise RuntimeError("boom")

    assert any(record.levelno == logging.ERROR for record in batch_logger)
