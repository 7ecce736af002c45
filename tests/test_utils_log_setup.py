"""
Tests for src/utils/log_setup.py
"""

import logging
from unittest.mock import patch

from src.utils.log_setup import LOG_FORMAT, configure_logging


@patch("src.utils.log_setup.logging.basicConfig")
def test_configure_logging_explicit_level(mock_basic_config):
    configure_logging("debug")

    mock_basic_config.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT)


@patch("src.utils.log_setup.logging.basicConfig")
def test_configure_logging_reads_env(mock_basic_config, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")

    configure_logging()

    assert mock_basic_config.call_args.kwargs["level"] == logging.WARNING


@patch("src.utils.log_setup.logging.basicConfig")
def test_configure_logging_unknown_level_falls_back_to_info(mock_basic_config, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    configure_logging("chatty")

    assert mock_basic_config.call_args.kwargs["level"] == logging.INFO
