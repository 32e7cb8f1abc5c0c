"""Tests for logging setup."""

import io
import logging

import pytest
from aiopreq import ConfigurationError
from aiopreq.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    """Put the aiopreq and aiohttp loggers back the way they were."""
    logger = logging.getLogger(LOGGER_NAME)
    client_logger = logging.getLogger("aiohttp.client")
    saved = (list(logger.handlers), logger.level, logger.propagate, client_logger.level)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
    client_logger.setLevel(saved[3])


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_records_reach_stream(self):
        """Test that warnings from submodules are written to the given stream."""
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)

        logging.getLogger("aiopreq.core.retry").warning("retrying in 0.1s")
        logging.getLogger("aiopreq.core.retry").debug("hidden")

        output = stream.getvalue()
        assert "retrying in 0.1s" in output
        assert "hidden" not in output

    def test_stops_propagation(self):
        """Test that configured records are not printed twice."""
        logger = setup_logging(stream=io.StringIO())
        assert logger.name == "aiopreq"
        assert logger.propagate is False

    def test_second_call_adjusts_level(self):
        """Test that calling twice keeps one handler and updates its level."""
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)
        logger = setup_logging("DEBUG", stream=io.StringIO())

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG
        logging.getLogger("aiopreq.core.client").debug("now visible")
        assert "now visible" in stream.getvalue()

    def test_force_replaces_own_handlers_only(self):
        """Test that force swaps our handlers and keeps the application's."""
        logger = logging.getLogger(LOGGER_NAME)
        app_handler = logging.NullHandler()
        logger.addHandler(app_handler)
        first = io.StringIO()
        second = io.StringIO()

        setup_logging(stream=first)
        setup_logging(stream=second, force=True)
        logger.warning("after force")

        assert app_handler in logger.handlers
        assert len(logger.handlers) == 2
        assert "after force" in second.getvalue()
        assert first.getvalue() == ""

    def test_log_file(self, tmp_path):
        """Test that a log file receives the same records."""
        path = tmp_path / "aiopreq.log"
        logger = setup_logging("INFO", str(path), stream=io.StringIO())

        logger.info("to file")
        for handler in logger.handlers:
            handler.flush()

        assert "to file" in path.read_text()

    def test_numeric_level(self):
        """Test that numeric levels are accepted."""
        logger = setup_logging(logging.ERROR, stream=io.StringIO())
        assert logger.level == logging.ERROR

    def test_unknown_level(self):
        """Test that a misspelled level is a ConfigurationError."""
        with pytest.raises(ConfigurationError):
            setup_logging("LOUD", stream=io.StringIO())

    @pytest.mark.parametrize("level,expected", [("DEBUG", logging.DEBUG), ("INFO", logging.WARNING)])
    def test_aiohttp_loggers_follow_debug(self, level, expected):
        """Test that aiohttp's client logger is only opened up at DEBUG."""
        setup_logging(level, stream=io.StringIO())
        assert logging.getLogger("aiohttp.client").level == expected
