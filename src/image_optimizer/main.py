"""Entry points: AWS Lambda handler and console script.

Both perform exactly one optimization run configured from the environment.
"""

import signal
import sys
import threading
from typing import Any, Dict, Mapping, Optional

from .core import (
    ConfigurationError,
    EnumerationError,
    OptimizerConfig,
    RunResult,
    enable_debug_logging,
    get_logger,
)
from .core.factories import PipelineFactory
from .core.protocols import S3ClientProtocol


def run_once(
    environ: Optional[Mapping[str, str]] = None,
    cancel_event: Optional[threading.Event] = None,
    s3_client: Optional[S3ClientProtocol] = None,
) -> RunResult:
    """
    Load configuration, build the pipeline and perform one full run.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)
        cancel_event: Optional event that stops workers from taking new items
        s3_client: S3 client to use instead of a new boto3 client

    Returns:
        The finished RunResult

    Raises:
        ConfigurationError: If required settings are missing or invalid
        EnumerationError: If the source objects cannot be listed
    """
    config = OptimizerConfig.from_env(environ)
    if config.debug:
        enable_debug_logging()

    coordinator = PipelineFactory.create_coordinator(config, s3_client=s3_client)
    return coordinator.run(cancel_event)


def lambda_handler(event: Any, context: Any) -> Dict[str, Any]:
    """
    AWS Lambda entry point.

    The event payload is ignored; everything comes from the environment.
    Fatal errors propagate so the invocation is reported as failed.
    """
    logger = get_logger("image-optimizer.main")
    logger.info("Starting image optimization run")
    result = run_once()
    return result.summary()


def _install_signal_handlers(cancel_event: threading.Event) -> None:
    logger = get_logger("image-optimizer.main")

    def _request_cancel(signum: int, frame: Any) -> None:
        logger.warning(
            f"Received {signal.Signals(signum).name}, finishing in-flight images and stopping"
        )
        cancel_event.set()

    signal.signal(signal.SIGINT, _request_cancel)
    signal.signal(signal.SIGTERM, _request_cancel)


def main() -> None:
    """
    Console entry point (``image-optimizer``).

    Takes no arguments. Exits with status 1 on a configuration or
    enumeration failure; per-image failures are reported in the summary
    and do not change the exit status.
    """
    logger = get_logger("image-optimizer.main")
    cancel_event = threading.Event()
    _install_signal_handlers(cancel_event)

    try:
        logger.info("Starting image optimization run")
        result = run_once(cancel_event=cancel_event)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except EnumerationError as e:
        logger.error(f"Could not enumerate source images: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Processing failed: {e}", exc_info=True)
        sys.exit(1)

    summary = result.summary()
    logger.info(
        f"Run finished: {summary['processed_count']} optimized, "
        f"{summary['error_count']} failed, {summary['unprocessed_count']} not processed"
    )


if __name__ == "__main__":
    main()
