"""
Telemetry module for structured logging and observability.

This module provides:
- JSONFormatter for structured JSON log output
- TelemetryService for centralized logging and metrics
- Integration with OpenTelemetry for tracing store calls
"""

from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    external_service_span,
    get_correlation_key,
    get_telemetry_service,
    initialize_telemetry,
    record_metric,
    reset_correlation_key,
    set_correlation_key,
)

__all__ = [
    "JSONFormatter",
    "TelemetryService",
    "external_service_span",
    "get_correlation_key",
    "get_telemetry_service",
    "initialize_telemetry",
    "record_metric",
    "reset_correlation_key",
    "set_correlation_key",
]
