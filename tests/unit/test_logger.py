"""
Unit tests for queue-based logging.
"""

import logging
from pathlib import Path

from pricedash.telemetry.logger import AsyncLogger, MillisecondFormatter


class TestAsyncLogger:
    """Tests for AsyncLogger."""

    def test_file_receives_debug(self, tmp_path: Path) -> None:
        """Test records pass through the queue to the log file."""
        log_file = tmp_path / "logs" / "dashboard.log"

        with AsyncLogger("pricedash.test", level=logging.WARNING, log_file=log_file) as async_logger:
            async_logger.logger.debug("fetch #1 applied")

        assert "fetch #1 applied" in log_file.read_text(encoding="utf-8")

    def test_stop_detaches_handler(self) -> None:
        """Test stop() removes the queue handler."""
        async_logger = AsyncLogger("pricedash.detach")
        async_logger.start()
        async_logger.start()
        assert len(async_logger.logger.handlers) == 1

        async_logger.stop()
        assert async_logger.logger.handlers == []

    def test_millisecond_formatter(self) -> None:
        """Test timestamps carry milliseconds."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.created = 1704067200.123
        record.msecs = 123

        stamp = MillisecondFormatter("%(asctime)s").formatTime(record, "%H:%M:%S")

        assert stamp.endswith(".123")
