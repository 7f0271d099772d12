import logging

import pytest

from attention_heatmap.utils import create_logger, set_verbosity


def test_create_logger_attaches_single_handler() -> None:
    logger = create_logger("attention_heatmap.test_logging")
    again = create_logger("attention_heatmap.test_logging")
    assert logger is again
    assert len(logger.handlers) == 1


def test_create_logger_rejects_empty_name() -> None:
    with pytest.raises(ValueError):
        create_logger("")


def test_set_verbosity_updates_package_loggers() -> None:
    logger = create_logger("attention_heatmap.test_verbosity")
    set_verbosity(logging.DEBUG)
    assert logger.level == logging.DEBUG
    set_verbosity(logging.INFO)
    assert logger.level == logging.INFO
