"""Tests for CLI logger setup."""

import logging

import pytest

from doc_engine.logging_utils import LOGGER_NAME, setup_logger


@pytest.fixture
def restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class TestSetupLogger:
    def test_file_handler_written(self, tmp_path, restore_logger):
        logger = setup_logger(str(tmp_path / "logs"), "DEBUG")
        logging.getLogger("doc_engine.engine").debug("hello from engine")
        for handler in logger.handlers:
            handler.flush()

        files = list((tmp_path / "logs").iterdir())
        assert len(files) == 1
        assert "hello from engine" in files[0].read_text(encoding="utf-8")

    def test_no_file_without_log_dir(self, restore_logger):
        logger = setup_logger("", "INFO")
        assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert logger.level == logging.INFO

    def test_repeat_calls_do_not_stack_handlers(self, tmp_path, restore_logger):
        setup_logger(str(tmp_path), "INFO")
        logger = setup_logger(str(tmp_path), "WARNING")
        ours = [h for h in logger.handlers if getattr(h, "_doc_engine", False)]
        assert len(ours) == 2
        assert logger.level == logging.WARNING

    def test_unknown_level_defaults_to_info(self, restore_logger):
        assert setup_logger("", "chatty").level == logging.INFO
