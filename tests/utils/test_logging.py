"""Tests for the logging utility module."""


import pytest
import structlog


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_default(self, mock_env_vars):
        """Test configure_logging with defaults."""
        from flowtrace.utils.logging import configure_logging

        # Should not raise
        configure_logging()

    def test_configure_logging_debug_level(self, mock_env_vars):
        """Test configure_logging with DEBUG level."""
        from flowtrace.utils.logging import configure_logging

        configure_logging(level="DEBUG")

    def test_configure_logging_json_format(self, mock_env_vars):
        """Test configure_logging with JSON output."""
        from flowtrace.utils.logging import configure_logging

        configure_logging(json_format=True)

    def test_configure_logging_no_timestamp(self, mock_env_vars):
        """Test configure_logging without timestamps."""
        from flowtrace.utils.logging import configure_logging

        configure_logging(include_timestamp=False)

    def test_configure_from_settings(self, mock_env_vars, monkeypatch):
        """Test configuration from FLOWTRACE_* settings."""
        from flowtrace.utils.logging import configure_from_settings

        monkeypatch.setenv("FLOWTRACE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("FLOWTRACE_LOG_JSON", "true")

        configure_from_settings()

    def test_configure_from_explicit_settings(self, mock_env_vars):
        """Test configuration from a given Settings instance."""
        from flowtrace.config import Settings
        from flowtrace.utils.logging import configure_from_settings

        configure_from_settings(Settings(_env_file=None, log_level="DEBUG"))



class TestLogContext:
    """Tests for LogContext class."""

    def test_log_context_creation(self, mock_env_vars):
        """Test LogContext creation."""
        from flowtrace.utils.logging import LogContext

        context = LogContext(session_id="replay_1", step=3)

        assert context.context == {"session_id": "replay_1", "step": 3}

    def test_log_context_binds_and_unbinds(self, mock_env_vars):
        """Test context variables are bound only inside the block."""
        from flowtrace.utils.logging import LogContext

        with LogContext(session_id="replay_2"):
            assert structlog.contextvars.get_contextvars()["session_id"] == "replay_2"

        assert "session_id" not in structlog.contextvars.get_contextvars()

    def test_log_context_nested(self, mock_env_vars):
        """Test nested LogContext."""
        from flowtrace.utils.logging import LogContext

        with LogContext(session_id="replay_3"):
            with LogContext(step=1):
                bound = structlog.contextvars.get_contextvars()
                assert bound["session_id"] == "replay_3"
                assert bound["step"] == 1
            assert "step" not in structlog.contextvars.get_contextvars()

    def test_log_context_empty(self, mock_env_vars):
        """Test LogContext with no context."""
        from flowtrace.utils.logging import LogContext

        with LogContext():
            pass


class TestLogOperation:
    """Tests for log_operation context manager."""

    def test_log_operation_success(self, mock_env_vars):
        """Test log_operation on success."""
        from flowtrace.utils.logging import configure_logging, log_operation

        configure_logging()

        with log_operation("segment_flows", step_count=4) as op:
            op["flow_count"] = 3

        assert op["success"] is True
        assert op["error"] is None

    def test_log_operation_with_logger(self, mock_env_vars):
        """Test log_operation with custom logger."""
        from flowtrace.utils.logging import configure_logging, log_operation

        configure_logging()
        logger = structlog.get_logger("custom").bind(component="batch_packer")

        with log_operation("pack_batches", logger=logger) as op:
            pass

        assert op["success"] is True

    def test_log_operation_failure(self, mock_env_vars):
        """Test log_operation on failure."""
        from flowtrace.utils.logging import configure_logging, log_operation

        configure_logging()

        with pytest.raises(ValueError):
            with log_operation("failing_op") as op:
                raise ValueError("Test error")

        assert op["error"] == "Test error"
        assert op["success"] is False
