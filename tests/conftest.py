"""Shared test fixtures for sheet-webhook."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.models import AuditEvent, AuditEventType
from src.webhook.handler import WebhookHandler
from src.webhook.models import WebhookRequest

FIXED_NOW = datetime(2024, 6, 1, 12, 30, 45, 123000, tzinfo=UTC)
FIXED_NOW_ISO = "2024-06-01T12:30:45.123Z"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def mock_log() -> MagicMock:
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def webhook_handler(mock_log: MagicMock, fixed_clock) -> WebhookHandler:
    return WebhookHandler(log=mock_log, clock=fixed_clock)


# --- Factory functions for test data ---


def make_request(**kwargs) -> WebhookRequest:
    """Factory for WebhookRequest with sensible defaults."""
    defaults: dict[str, object] = {
        "method": "POST",
        "headers": {"content-type": "application/json"},
        "body": '{"type":"edit","sheet":"Sheet1","timestamp":"2024-01-01T00:00:00Z"}',
    }
    defaults.update(kwargs)
    return WebhookRequest(**defaults)  # type: ignore[arg-type]


def make_audit_event(**kwargs) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, object] = {
        "event_type": AuditEventType.WEBHOOK_RECEIVED,
        "method": "POST",
        "status_code": 200,
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)  # type: ignore[arg-type]
