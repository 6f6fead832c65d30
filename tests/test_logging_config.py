"""Tests for the JSON logging configuration."""

import json
import logging

from pythonjsonlogger.json import JsonFormatter

from wiki_responder.logging_config import SERVICE_NAME, build_logging_config, configure_logging


def test_level_is_upper_cased():
    config = build_logging_config("debug")
    assert config["root"]["level"] == "DEBUG"


def test_formatter_emits_gcp_field_names():
    formatter = JsonFormatter(
        build_logging_config()["formatters"]["json"]["format"],
        rename_fields={"asctime": "timestamp", "levelname": "severity", "name": "logger"},
        static_fields={"service": SERVICE_NAME},
    )
    record = logging.LogRecord("wiki_responder.test", logging.INFO, __file__, 1, "hello", None, None)
    record.event_id = "Ev1"

    payload = json.loads(formatter.format(record))

    assert payload["severity"] == "INFO"
    assert payload["logger"] == "wiki_responder.test"
    assert payload["service"] == SERVICE_NAME
    assert payload["message"] == "hello"
    assert payload["event_id"] == "Ev1"


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = root.handlers[:]
    try:
        configure_logging("WARNING")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[-1].formatter, JsonFormatter)
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)


def test_configure_logging_documented():
    assert configure_logging.__doc__
