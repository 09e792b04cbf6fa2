import io
import logging

from saftools.log import setup_logging


def test_setup_logging_is_idempotent():
    logger = setup_logging()
    n = len(logger.handlers)
    assert setup_logging(verbose=True) is logger
    assert len(logger.handlers) == n
    assert logger.level == logging.DEBUG
    setup_logging()
    assert logger.level == logging.INFO


def test_setup_logging_survives_closed_stream(monkeypatch):
    closed = io.StringIO()
    monkeypatch.setattr("sys.stderr", closed)
    setup_logging()
    closed.close()

    fresh = io.StringIO()
    monkeypatch.setattr("sys.stderr", fresh)
    logger = setup_logging()
    logging.getLogger("saftools.test").info("hello")

    assert "[saftools] hello" in fresh.getvalue()
