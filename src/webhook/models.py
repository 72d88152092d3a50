"""Request and response containers for a single webhook invocation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class WebhookRequest:
    """Inbound webhook call as handed over by the hosting runtime."""

    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass
class WebhookResponse:
    """Response returned to the hosting runtime."""

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.body)

    def to_event_result(self) -> dict[str, Any]:
        """Serverless function result shape (statusCode / headers / body)."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }
