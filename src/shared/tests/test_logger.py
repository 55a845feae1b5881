import json
import logging

from src.shared.logger import JSONFormatter, ServiceFilter, get_logger


def _record(msg="Project saved", **extra):
    record = logging.LogRecord("store", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_promotes_payload():
    record = _record(payload={"project_id": "p1", "revision": 4})
    ServiceFilter("store").filter(record)

    data = json.loads(JSONFormatter().format(record))

    assert data["service"] == "store"
    assert data["level"] == "INFO"
    assert data["message"] == "Project saved"
    assert data["project_id"] == "p1"
    assert data["revision"] == 4


def test_json_formatter_promotes_known_attributes_without_payload():
    data = json.loads(JSONFormatter().format(_record(task_id="t1", template_id="it-request")))

    assert data["task_id"] == "t1"
    assert data["template_id"] == "it-request"
    assert data["service"] == "unknown"


def test_service_filter_keeps_existing_service():
    record = _record(service="generator")
    ServiceFilter("store").filter(record)
    assert record.service == "generator"


def test_get_logger_switches_format(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "json")
    logger = get_logger("store", "planner.test.json")
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    monkeypatch.setenv("LOG_FORMAT", "text")
    logger = get_logger("store", "planner.test.json")
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
