"""Tests for structured logging helpers."""

import logging
from unittest.mock import patch

from image_optimizer.core.observability import LogContext, StructuredLogger


class TestLogContext:
    """Tests for LogContext."""

    def test_with_metadata_keeps_correlation_id(self):
        context = LogContext(operation="process_image", component="item_processor")
        child = context.with_metadata(source_key="uuid/a.jpg")

        assert child.correlation_id == context.correlation_id
        assert child.metadata == {"source_key": "uuid/a.jpg"}
        assert context.metadata == {}

    def test_with_operation_replaces_operation_only(self):
        context = LogContext(operation="process_image").with_metadata(source_key="k")
        child = context.with_operation("upload")

        assert child.operation == "upload"
        assert child.metadata == {"source_key": "k"}


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_explicit_level_is_applied(self):
        structured = StructuredLogger("test-structured-level", level=logging.WARNING)
        assert structured.logger.level == logging.WARNING

    def test_context_and_metadata_rendered_into_message(self):
        structured = StructuredLogger("test-structured-render")
        context = LogContext(operation="download").with_metadata(source_key="uuid/a.jpg")

        with patch.object(structured.logger, "log") as mock_log:
            structured.error("Image processing failed", context, stage="download")

        level, message = mock_log.call_args.args
        assert level == logging.ERROR
        assert message == (
            f"[download] [{context.correlation_id}] Image processing failed "
            "(source_key=uuid/a.jpg, stage=download)"
        )

    def test_plain_message_without_context(self):
        structured = StructuredLogger("test-structured-plain", level=logging.INFO)

        with patch.object(structured.logger, "log") as mock_log:
            structured.info("Found 3 objects", page_count=2)

        assert mock_log.call_args.args == (logging.INFO, "Found 3 objects (page_count=2)")

    def test_disabled_level_is_not_rendered(self):
        structured = StructuredLogger("test-structured-disabled", level=logging.WARNING)

        with patch.object(structured.logger, "log") as mock_log:
            structured.debug("noisy")

        mock_log.assert_not_called()
