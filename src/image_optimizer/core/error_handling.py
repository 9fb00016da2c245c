# src/image_optimizer/core/error_handling.py

import functools
from typing import Any, Callable, Dict, List, Type, TypeVar

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
)

from .exceptions import (
    AuthError,
    NotFoundError,
    QuotaExceededError,
    S3Error,
    StoreUnavailableError,
)
from .logging_config import get_logger

NOT_FOUND_CODES = ("NoSuchKey", "NoSuchBucket", "NotFound", "404")
AUTH_ERROR_CODES = (
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "403",
)
QUOTA_ERROR_CODES = ("QuotaExceeded", "ServiceQuotaExceededException", "EntityTooLarge")
UNAVAILABLE_ERROR_CODES = (
    "ServiceUnavailable",
    "SlowDown",
    "InternalError",
    "RequestTimeout",
    "500",
    "503",
)

F = TypeVar("F", bound=Callable[..., Any])


def classify_client_error(error: ClientError, default: Type[S3Error]) -> Type[S3Error]:
    """Pick the S3Error subclass matching a botocore ClientError code."""
    code = str(error.response.get("Error", {}).get("Code", ""))
    if code in NOT_FOUND_CODES:
        return NotFoundError
    if code in AUTH_ERROR_CODES:
        return AuthError
    if code in QUOTA_ERROR_CODES:
        return QuotaExceededError
    if code in UNAVAILABLE_ERROR_CODES:
        return StoreUnavailableError
    return default


def translate_store_errors(default: Type[S3Error] = StoreUnavailableError) -> Callable[[F], F]:
    """
    Decorator translating botocore failures into the S3Error family.

    Errors without a more specific mapping become ``default``. S3Error
    instances raised by the wrapped function pass through unchanged.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except S3Error:
                raise
            except ClientError as e:
                error_class = classify_client_error(e, default)
                raise error_class(f"S3 operation '{func.__name__}' failed: {e}") from e
            except (NoCredentialsError, PartialCredentialsError) as e:
                raise AuthError(
                    f"S3 operation '{func.__name__}' has no usable credentials: {e}"
                ) from e
            except (EndpointConnectionError, ConnectTimeoutError) as e:
                raise StoreUnavailableError(
                    f"S3 operation '{func.__name__}' could not reach the store: {e}"
                ) from e
            except BotoCoreError as e:
                raise default(f"S3 operation '{func.__name__}' failed: {e}") from e

        return wrapper  # type: ignore[return-value]

    return decorator


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """

    def __init__(self, operation_name: str = "Batch Operation"):
        self.operation_name = operation_name
        self.errors: List[Dict[str, str]] = []
        self.logger = get_logger("image-optimizer.batch")

    def __enter__(self) -> "BatchOperationContextManager":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.error(
                    f"  Error {i + 1}/{len(self.errors)} for item "
                    f"'{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Never suppress exceptions raised inside the block
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item") -> None:
        """
        Report an error for a specific item within the 'with' block.

        Args:
            error_message: The error message or exception string.
            item_identifier: The item that failed (e.g. an object key).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(
            f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}"
        )
