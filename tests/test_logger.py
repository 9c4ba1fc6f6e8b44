"""Tests for the logging setup module."""

import logging
import sys
from collections.abc import Iterator

import pytest

from ocrdoc.utils.logger import LOG_FORMAT, get_logger, setup_logging


@pytest.fixture
def bare_root() -> Iterator[logging.Logger]:
    """Root logger with no handlers; restores levels afterwards."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_noisy = {
        name: logging.getLogger(name).level for name in ("transformers", "fpdf")
    }
    root.handlers.clear()
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    for name, level in saved_noisy.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_stdout_handler(self, bare_root: logging.Logger) -> None:
        setup_logging("DEBUG")

        assert bare_root.level == logging.DEBUG
        (handler,) = bare_root.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stdout
        assert handler.formatter._fmt == LOG_FORMAT

    def test_second_call_is_noop(self, bare_root: logging.Logger) -> None:
        setup_logging("INFO")
        setup_logging("DEBUG")

        assert len(bare_root.handlers) == 1
        assert bare_root.level == logging.INFO

    def test_unknown_level_falls_back_to_info(self, bare_root: logging.Logger) -> None:
        setup_logging("verbose")
        assert bare_root.level == logging.INFO

    def test_model_and_pdf_loggers_quieted(self, bare_root: logging.Logger) -> None:
        setup_logging("DEBUG")
        assert logging.getLogger("transformers").level == logging.WARNING
        assert logging.getLogger("fpdf").level == logging.WARNING

    def test_stricter_level_applies_to_noisy_loggers(
        self, bare_root: logging.Logger
    ) -> None:
        setup_logging("ERROR")
        assert logging.getLogger("transformers").level == logging.ERROR


class TestGetLogger:
    """Tests for get_logger."""

    def test_module_logger_name(self) -> None:
        assert get_logger("ocrdoc.export.pdf_exporter").name == (
            "ocrdoc.export.pdf_exporter"
        )

    def test_cached_per_name(self) -> None:
        assert get_logger("ocrdoc.session") is get_logger("ocrdoc.session")
