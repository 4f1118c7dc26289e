"""Tests for the PprintLogger and setup_logging functionality.

This module verifies:
- PprintLogger wraps standard logging.Logger correctly
- pprint defaults to True and formats containers and pydantic models
- pprint=False uses simple string conversion
- Messages below the logger level are not formatted at all
- Delegation to underlying logger methods works
- setup_logging does not duplicate handlers
"""

import logging
from io import StringIO

from doccomposer.commands import DEFAULT_COMMANDS
from doccomposer.logging import PprintLogger, setup_logging
from doccomposer.session import MentionSession, SessionMode


def capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    logger.addHandler(handler)
    return logger, stream


class TestPprintLogger:
    """Tests for PprintLogger formatting and delegation."""

    def test_pprint_formats_dict(self) -> None:
        """Test that pprint=True formats dictionaries."""
        logger, stream = capture("test_dict")
        PprintLogger(logger).info({"query": "ahmet", "candidates": {"count": 1}})
        output = stream.getvalue()
        assert "query" in output
        assert "candidates" in output
        assert "{" in output

    def test_pprint_false_uses_str(self) -> None:
        """Test that pprint=False uses simple string conversion."""
        logger, stream = capture("test_str")
        data = {"key": "value"}
        PprintLogger(logger).info(data, pprint=False)
        assert str(data) in stream.getvalue()

    def test_session_is_dumped_as_json(self) -> None:
        """Test that a mention session is logged through model_dump_json()."""
        logger, stream = capture("test_session")
        session = MentionSession(mode=SessionMode.COMMAND_MENU, trigger_offset=3, span_end=4, menu_commands=DEFAULT_COMMANDS)
        PprintLogger(logger).debug(session)
        output = stream.getvalue()
        assert '"mode": "command_menu"' in output
        assert '"trigger": "uyetablo"' in output

    def test_all_log_levels(self) -> None:
        """Test that debug, info, warning, error and critical all log."""
        logger, stream = capture("test_all_levels")
        pprint_logger = PprintLogger(logger)
        data = {"level": "test"}

        pprint_logger.debug(data)
        pprint_logger.info(data)
        pprint_logger.warning(data)
        pprint_logger.error(data)
        pprint_logger.critical(data)

        output = stream.getvalue()
        for level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            assert level in output

    def test_disabled_level_is_not_formatted(self) -> None:
        """Test that a message below the logger level is skipped before formatting."""
        logger, stream = capture("test_disabled")
        logger.setLevel(logging.WARNING)

        class Exploding:
            def __repr__(self) -> str:
                raise AssertionError("formatted a disabled message")

        PprintLogger(logger).debug(Exploding())
        assert stream.getvalue() == ""

    def test_exception_logging(self) -> None:
        """Test that exception() includes the traceback."""
        logger, stream = capture("test_exception")
        try:
            raise ValueError("Test exception")
        except ValueError:
            PprintLogger(logger).exception({"error": "details"})
        output = stream.getvalue()
        assert "details" in output
        assert "Test exception" in output

    def test_delegates_to_underlying_logger(self) -> None:
        """Test that PprintLogger delegates other methods to underlying logger."""
        logger = logging.getLogger("test_delegate")
        pprint_logger = PprintLogger(logger)

        pprint_logger.setLevel(logging.WARNING)
        assert logger.level == logging.WARNING
        assert pprint_logger.handlers == logger.handlers
        assert pprint_logger.name == "test_delegate"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_returns_pprint_logger(self) -> None:
        assert isinstance(setup_logging("doccomposer.test_returns"), PprintLogger)

    def test_sets_level(self) -> None:
        logger = setup_logging("doccomposer.test_level", level=logging.DEBUG)
        assert logger.level == logging.DEBUG

    def test_default_name(self) -> None:
        assert setup_logging().name == "doccomposer"

    def test_does_not_duplicate_handlers(self) -> None:
        """Test that repeated calls return the same logger without new handlers."""
        logger1 = setup_logging("doccomposer.test_dupes")
        count = len(logger1.handlers)
        logger2 = setup_logging("doccomposer.test_dupes")
        assert logger1._logger is logger2._logger  # pylint: disable=protected-access
        assert len(logger2.handlers) == count
        assert count <= 1
