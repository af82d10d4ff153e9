"""
Unit tests for the telemetry service.
"""

import json
import logging
from types import SimpleNamespace

import pytest

import telemetry.service as telemetry_service
from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    external_service_span,
    get_correlation_key,
    initialize_telemetry,
    record_metric,
    reset_correlation_key,
    set_correlation_key,
)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger changes TelemetryService makes."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, JSONFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    telemetry_service._telemetry_service = None


def make_record(message="hello", **attrs):
    record = logging.LogRecord("session.manager", logging.INFO, __file__, 10, message, None, None)
    for name, value in attrs.items():
        setattr(record, name, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_outputs_base_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "session.manager"
        assert entry["session_key"] == ""
        assert entry["timestamp"].endswith("Z")

    def test_includes_correlation_key(self):
        token = set_correlation_key("1:1")
        try:
            entry = json.loads(JSONFormatter().format(make_record()))
        finally:
            reset_correlation_key(token)

        assert entry["session_key"] == "1:1"
        assert get_correlation_key() == ""

    def test_merges_extra_data(self):
        record = make_record(extra_data={"operation": "get_session"})

        entry = json.loads(JSONFormatter().format(record))

        assert entry["operation"] == "get_session"


class TestTelemetryService:
    """Tests for TelemetryService setup and helpers."""

    def test_configures_root_logger(self):
        service = TelemetryService(SimpleNamespace(log_level="DEBUG", otel_endpoint=None))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, JSONFormatter) for h in root.handlers)
        assert service.tracer is None

    def test_span_is_noop_without_tracer(self):
        service = TelemetryService()

        with service.create_external_service_span("dynamodb", "get_item") as span:
            span.set_attribute("db.table", "t")

    def test_module_helpers_without_service(self):
        record_metric("session.errors", 1)

        with external_service_span("dynamodb", "put_item"):
            pass

    def test_record_metric_logs_through_service(self, caplog):
        initialize_telemetry(SimpleNamespace(log_level="DEBUG", otel_endpoint=None))
        logging.getLogger().addHandler(caplog.handler)

        with caplog.at_level(logging.DEBUG, logger="telemetry"):
            record_metric("session.errors", 1, tags={"operation": "get_session"})

        assert "Metric: session.errors=1" in caplog.text
