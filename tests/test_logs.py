import logging

import pytest

from simplesheets.logs import *

@pytest.fixture
def pkg(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]

def ours(logger):
    return [h for h in logger.handlers if getattr(h, "_simplesheets", False)]

def test_resolve_level(pkg, monkeypatch):
    assert(resolve_level("dev") == logging.DEBUG)
    assert(resolve_level("test") == logging.DEBUG)
    assert(resolve_level("prod") == logging.INFO)
    assert(resolve_level("prod", "warning") == logging.WARNING)
    assert(resolve_level("dev", logging.ERROR) == logging.ERROR)
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert(resolve_level("dev") == logging.ERROR)
    with pytest.raises(ValueError):
        resolve_level("prod", "loud")

def test_dev_gets_one_handler(pkg):
    configure_logging("dev")
    configure_logging("dev")
    assert(len(ours(pkg)) == 1)
    assert(pkg.level == logging.DEBUG)
    assert(pkg.propagate)

def test_prod_leaves_output_to_app(pkg):
    configure_logging("dev")
    configure_logging("prod")
    assert(ours(pkg) == [])
    assert(pkg.level == logging.INFO)

def test_dev_format_shows_extras(pkg):
    configure_logging("dev")
    handler = ours(pkg)[0]
    record = logging.LogRecord("simplesheets.spreadsheet", logging.INFO, __file__, 1,
                               "Sheet cleared", None, None)
    record.spreadsheet_id = "abc"
    text = handler.format(record)
    assert("Sheet cleared" in text)
    assert("spreadsheet_id='abc'" in text)

def test_forward_to_caller_logger(pkg):
    seen = []

    class Collect(logging.Handler):
        def emit(self, record):
            seen.append(record.getMessage())

    target = logging.getLogger("caller-app")
    target.setLevel(logging.WARNING)
    handler = Collect()
    target.addHandler(handler)
    try:
        configure_logging("prod", "DEBUG", target)
        assert(not pkg.propagate)
        logging.getLogger("simplesheets.retry").warning("Retrying")
        logging.getLogger("simplesheets.retry").info("filtered by the caller")
        assert(seen == ["Retrying"])
        # switching back drops the forwarder
        configure_logging("prod")
        assert(pkg.propagate)
        logging.getLogger("simplesheets.retry").warning("again")
        assert(seen == ["Retrying"])
    finally:
        target.removeHandler(handler)
