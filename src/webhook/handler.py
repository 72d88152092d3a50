"""Spreadsheet webhook handler.

Accepts change notifications from a spreadsheet data source, checks the
HTTP method, decodes the JSON body and acknowledges receipt.

Stages:
1. Method check (POST only, anything else is a 405)
2. JSON decode
3. Optional hooks: verify, store, notify
4. Acknowledgment (200) or processing failure (500)
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from src.audit.logger import AuditLogger
from src.models import (
    Acknowledgment,
    AuditEvent,
    AuditEventType,
    MethodNotAllowed,
    ProcessingFailure,
    WebhookPayload,
    format_timestamp,
)
from src.webhook.models import WebhookRequest, WebhookResponse

if TYPE_CHECKING:
    from pydantic import BaseModel

    from src.webhook.extensions import Notifier, Store, Verifier

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _render(body: BaseModel) -> str:
    return json.dumps(body.model_dump(mode="json", by_alias=True), separators=(",", ":"))


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _reject_constant(name: str) -> object:
    raise ValueError(f"Unexpected token {name} in JSON")


def decode_body(body: str | None) -> object:
    """Strict JSON decode: NaN, Infinity and -Infinity are rejected."""
    if body is None:
        raise ValueError("Request body is empty")
    return json.loads(body, parse_constant=_reject_constant)


def failure_response(exc: BaseException, timestamp: str) -> WebhookResponse:
    failure = ProcessingFailure(message=_error_text(exc), timestamp=timestamp)
    return WebhookResponse(
        status_code=500,
        headers=dict(JSON_HEADERS),
        body=_render(failure),
    )


class WebhookHandler:
    """Turns one webhook request into exactly one response.

    Holds no per-request state, so a single instance can serve concurrent
    invocations.
    """

    def __init__(
        self,
        verifier: Verifier | None = None,
        store: Store | None = None,
        notifier: Notifier | None = None,
        audit_logger: AuditLogger | None = None,
        log: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._verifier = verifier
        self._store = store
        self._notifier = notifier
        self._audit = audit_logger
        self._log = log or logger
        self._clock = clock

    async def handle(self, request: WebhookRequest) -> WebhookResponse:
        self._log.info("Webhook request: method=%s", request.method)
        self._log.debug("Webhook headers: %s", request.headers)

        if request.method != "POST":
            response = WebhookResponse(
                status_code=405,
                headers=dict(JSON_HEADERS),
                body=_render(MethodNotAllowed()),
            )
            self._record(request, response, AuditEventType.WEBHOOK_REJECTED)
            return response

        try:
            payload = WebhookPayload.from_json(decode_body(request.body))
            self._log.debug("Webhook payload: %s", payload.raw)

            if self._verifier:
                await self._verifier.verify(request, payload)
            if self._store:
                await self._store.save(payload)
            if self._notifier:
                await self._notifier.notify(payload)

            ack = Acknowledgment(
                timestamp=self.now(),
                received_data=payload.received_data(),
            )
            response = WebhookResponse(
                status_code=200,
                headers={**JSON_HEADERS, **CORS_HEADERS},
                body=_render(ack),
            )
        except Exception as exc:
            self._log.exception("Webhook error: %s", _error_text(exc))
            response = failure_response(exc, self.now())
            self._record(
                request, response, AuditEventType.WEBHOOK_FAILED,
                {"error": _error_text(exc)},
            )
            return response

        self._log.info("Webhook response: %s", response.body)
        self._record(
            request, response, AuditEventType.WEBHOOK_RECEIVED,
            {"type": payload.type, "sheet": payload.sheet},
        )
        return response

    def now(self) -> str:
        """Current time in the response timestamp format."""
        return format_timestamp(self._clock())

    def _record(
        self,
        request: WebhookRequest,
        response: WebhookResponse,
        event_type: AuditEventType,
        details: dict[str, object] | None = None,
    ) -> None:
        if not self._audit:
            return
        try:
            self._audit.log(AuditEvent(
                event_type=event_type,
                method=request.method,
                status_code=response.status_code,
                source_ip=_source_ip(request.headers),
                details=details,
            ))
        except Exception as exc:  # audit trail must not change the response
            self._log.warning("Failed to write audit event: %s", exc)


def _source_ip(headers: dict[str, str]) -> str | None:
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in ("x-nf-client-connection-ip", "x-forwarded-for"):
        value = lowered.get(name)
        if value:
            return value.split(",")[0].strip()
    return None


# --- Serverless entry point ---


def request_from_event(event: dict[str, Any]) -> WebhookRequest:
    """Translate a Netlify / API Gateway event into a WebhookRequest."""
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return WebhookRequest(
        method=event.get("httpMethod", ""),
        headers=dict(event.get("headers") or {}),
        body=body,
    )


_default_handler: WebhookHandler | None = None


def _get_default_handler() -> WebhookHandler:
    global _default_handler
    if _default_handler is None:
        audit_log = os.environ.get("WEBHOOK_AUDIT_LOG_PATH")
        _default_handler = WebhookHandler(
            audit_logger=AuditLogger.from_env(audit_log) if audit_log else None,
        )
    return _default_handler


def handler(event: dict[str, Any], context: object = None) -> dict[str, Any]:
    """Serverless function entry point (Netlify Functions / AWS Lambda)."""
    webhook_handler = _get_default_handler()
    try:
        request = request_from_event(event)
    except (ValueError, TypeError) as exc:
        logger.exception("Undecodable webhook event: %s", exc)
        return failure_response(exc, webhook_handler.now()).to_event_result()
    return asyncio.run(webhook_handler.handle(request)).to_event_result()
