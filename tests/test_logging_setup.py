import logging

import pytest

from bucks2bar import logging_setup


@pytest.fixture
def package_logger(monkeypatch):
    logger = logging.getLogger(logging_setup.PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    monkeypatch.setattr(logging_setup, '_stream_handler', None)
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_configure_logging_is_idempotent(package_logger):
    logging_setup.configure_logging('debug')
    logging_setup.configure_logging('warning')
    streams = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
    assert len(streams) == 1
    assert package_logger.level == logging.WARNING
    assert package_logger.propagate is False


def test_configure_logging_reads_env(package_logger, monkeypatch):
    monkeypatch.setenv('BUCKS2BAR_LOG_LEVEL', 'ERROR')
    assert logging_setup.configure_logging().level == logging.ERROR
    monkeypatch.setenv('BUCKS2BAR_LOG_LEVEL', 'chatty')
    assert logging_setup.configure_logging().level == logging.INFO


def test_get_logger_is_under_package():
    assert logging_setup.get_logger('bucks2bar.store').parent.name == 'bucks2bar'
