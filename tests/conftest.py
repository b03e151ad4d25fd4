import logging

import pytest


@pytest.fixture(autouse=True)
def restore_package_logger():
    """configure_logging() attaches a handler to captured streams; undo it after each test."""
    logger = logging.getLogger("textparser")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
