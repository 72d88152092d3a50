"""Shared Pydantic data models for sheet-webhook."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return format_timestamp(datetime.now(UTC))


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# --- Payload ---


class WebhookPayload(BaseModel):
    """Decoded webhook body. Known fields pass through unvalidated."""

    model_config = ConfigDict(frozen=True)

    type: Any = None
    sheet: Any = None
    timestamp: Any = None
    user: Any = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, data: object) -> WebhookPayload:
        """Build a payload from any decoded JSON value.

        Non-object values carry no recognized fields.
        """
        if not isinstance(data, dict):
            return cls()
        return cls(
            type=data.get("type"),
            sheet=data.get("sheet"),
            timestamp=data.get("timestamp"),
            user=data.get("user"),
            raw=data,
        )

    def received_data(self) -> ReceivedData:
        return ReceivedData(type=self.type, sheet=self.sheet, timestamp=self.timestamp)


# --- Response bodies ---


class ReceivedData(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Any = None
    sheet: Any = None
    timestamp: Any = None


class Acknowledgment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool = True
    message: str = "Webhook received successfully"
    timestamp: str
    received_data: ReceivedData = Field(alias="receivedData")


class MethodNotAllowed(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: str = "Method not allowed"


class ProcessingFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: str = "Internal server error"
    message: str = Field(min_length=1)
    timestamp: str


# --- Audit Models ---


class AuditEventType(str, Enum):
    WEBHOOK_RECEIVED = "webhook_received"
    WEBHOOK_REJECTED = "webhook_rejected"
    WEBHOOK_FAILED = "webhook_failed"


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=now_iso)
    event_type: AuditEventType
    method: str
    status_code: int
    source_ip: str | None = None
    details: dict[str, object] | None = None
