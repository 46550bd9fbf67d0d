import logging

from app.core.logging import setup_logging


def test_setup_logging_reads_level_and_quiets_http_client(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging()
        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("google.auth").level == logging.WARNING
    finally:
        root.setLevel(previous)


def test_setup_logging_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging()
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
