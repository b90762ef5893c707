"""Unit tests for the JSON extras log formatter."""

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from brandscope.core.logging import JSONExtrasFormatter, setup_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="brandscope.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Stage %s",
        args=("done",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_extras_as_json() -> None:
    line = JSONExtrasFormatter().format(_record(step="brand-search", competitors=["Acme"]))

    head, _, extras = line.partition(" {")
    assert head.endswith("| INFO     | brandscope.test | Stage done")
    assert json.loads("{" + extras) == {"step": "brand-search", "competitors": ["Acme"]}


def test_formatter_without_extras_has_no_json_suffix() -> None:
    line = JSONExtrasFormatter().format(_record())

    assert line.endswith("Stage done")


def test_formatter_serializes_unknown_types_as_strings() -> None:
    class Opaque:
        def __str__(self) -> str:
            return "opaque"

    line = JSONExtrasFormatter().format(_record(value=Opaque()))

    assert line.endswith('{"value": "opaque"}')


def test_formatter_can_drop_extras() -> None:
    line = JSONExtrasFormatter(include_extras=False).format(_record(step="brand-search"))

    assert line.endswith("Stage done")


@pytest.fixture
def bare_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("brandscope")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    logger.handlers[:], logger.level, logger.propagate = saved


def test_setup_logging_reads_settings(monkeypatch: pytest.MonkeyPatch, bare_logger: logging.Logger) -> None:
    monkeypatch.setattr("brandscope.config.settings.log_level", "WARNING")
    monkeypatch.setattr("brandscope.config.settings.log_date_format", "%H:%M")
    monkeypatch.setattr("brandscope.config.settings.log_json_extras", False)
    monkeypatch.setattr("brandscope.config.settings.log_stream", "stderr")

    setup_logging()

    (handler,) = bare_logger.handlers
    assert bare_logger.level == logging.WARNING
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is sys.stderr
    assert isinstance(handler.formatter, JSONExtrasFormatter)
    assert handler.formatter.datefmt == "%H:%M"
    assert handler.formatter.include_extras is False
    assert bare_logger.propagate is False


def test_setup_logging_keeps_a_single_handler(bare_logger: logging.Logger) -> None:
    setup_logging(logging.INFO)
    setup_logging(logging.DEBUG)

    assert len(bare_logger.handlers) == 1
    assert bare_logger.level == logging.DEBUG
