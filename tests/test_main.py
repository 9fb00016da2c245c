"""Tests for the Lambda handler and console entry point."""

import io
import threading
from unittest.mock import patch

import pytest
from PIL import Image

from image_optimizer.core.exceptions import ConfigurationError, EnumerationError
from image_optimizer.core.models import RunResult
from image_optimizer.main import lambda_handler, main, run_once
from image_optimizer.testing.fakes import setup_test_s3_environment

ENV = {"SOURCE_LOCATION": "test-source", "DESTINATION_LOCATION": "test-dest"}


class TestRunOnce:
    """Tests for run_once."""

    def test_run_once_with_fake_client(self):
        fake_s3 = setup_test_s3_environment()

        result = run_once(environ=ENV, s3_client=fake_s3)

        assert result.enumerated == 4
        assert result.succeeded_count == 4
        body = fake_s3.get_bucket("test-dest").get_object("optimized/uuid/wide.jpg").body
        assert Image.open(io.BytesIO(body)).width == 800

    def test_run_once_honours_worker_count(self):
        fake_s3 = setup_test_s3_environment()

        with patch("image_optimizer.coordinator.WorkerPool") as mock_pool:
            mock_pool.return_value.run.return_value = []
            run_once(environ={**ENV, "WORKER_COUNT": "5"}, s3_client=fake_s3)

        assert mock_pool.call_args.kwargs["worker_count"] == 5

    def test_run_once_missing_configuration(self):
        with pytest.raises(ConfigurationError):
            run_once(environ={"SOURCE_LOCATION": "only-source"})

    def test_run_once_passes_cancel_event(self):
        fake_s3 = setup_test_s3_environment()
        cancel_event = threading.Event()
        cancel_event.set()

        result = run_once(environ=ENV, cancel_event=cancel_event, s3_client=fake_s3)

        assert result.cancelled is True
        assert result.results == []


class TestLambdaHandler:
    """Tests for lambda_handler."""

    def test_lambda_handler_returns_summary(self):
        run_result = RunResult(enumerated=0)
        with patch("image_optimizer.main.run_once", return_value=run_result) as mock_run:
            response = lambda_handler({}, None)

        mock_run.assert_called_once_with()
        assert response["total_items"] == 0
        assert response["error_count"] == 0

    def test_lambda_handler_propagates_fatal_errors(self, monkeypatch):
        monkeypatch.delenv("SOURCE_LOCATION", raising=False)
        monkeypatch.delenv("DESTINATION_LOCATION", raising=False)

        with pytest.raises(ConfigurationError):
            lambda_handler({}, None)


class TestMainEntryPoint:
    """Tests for the console entry point."""

    def test_main_success_does_not_exit(self):
        with patch("image_optimizer.main.signal.signal"):
            with patch("image_optimizer.main.run_once", return_value=RunResult()) as mock_run:
                with patch("sys.exit") as mock_exit:
                    main()

        assert isinstance(mock_run.call_args.kwargs["cancel_event"], threading.Event)
        mock_exit.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("missing SOURCE_LOCATION"),
            EnumerationError("cannot list"),
            RuntimeError("unexpected"),
        ],
    )
    def test_main_fatal_errors_exit_with_status_1(self, error):
        with patch("image_optimizer.main.signal.signal"):
            with patch("image_optimizer.main.run_once", side_effect=error):
                with pytest.raises(SystemExit) as exc_info:
                    main()

        assert exc_info.value.code == 1

    def test_main_installs_signal_handlers_that_cancel(self):
        with patch("image_optimizer.main.signal.signal") as mock_signal:
            with patch("image_optimizer.main.run_once", return_value=RunResult()) as mock_run:
                main()

        cancel_event = mock_run.call_args.kwargs["cancel_event"]
        handler = mock_signal.call_args_list[0].args[1]
        handler(2, None)
        assert cancel_event.is_set()
