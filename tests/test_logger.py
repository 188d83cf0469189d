"""Tests for the shared pipeline logger."""

import logging

import pytest

from hpv_expression.infrastructure.argument_parser import ArgumentParser
from hpv_expression.infrastructure.logger import LOGGER_NAME, Logger


@pytest.fixture
def shared_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield logger
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()


def _file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def test_log_file_receives_each_message_once(tmp_path, shared_logger):
    log_file = tmp_path / "run.log"

    first = Logger(str(log_file))
    Logger(str(log_file))
    first.log_success("pipeline finished")

    assert len(_file_handlers(shared_logger)) == 1
    for handler in _file_handlers(shared_logger):
        handler.flush()
    assert log_file.read_text().count("pipeline finished") == 1


def test_logger_without_file_keeps_one_console_handler(shared_logger):
    Logger()
    Logger()

    consoles = [h for h in shared_logger.handlers if type(h) is logging.StreamHandler]
    assert len(consoles) == 1
    assert _file_handlers(shared_logger) == []


def test_log_file_option(tmp_path, shared_logger):
    log_file = str(tmp_path / "cli.log")

    config = ArgumentParser().parse_arguments(
        ["-p", "billing", "-o", str(tmp_path), "--log-file", log_file]
    )
    Logger(config.log_file).log_step("Parsing", "done")

    assert config.log_file == log_file
    for handler in _file_handlers(shared_logger):
        handler.flush()
    assert "Parsing: done" in (tmp_path / "cli.log").read_text()
