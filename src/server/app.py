"""FastAPI application exposing the webhook handler over HTTP."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request, Response

from src.audit.logger import AuditLogger
from src.webhook.handler import WebhookHandler
from src.webhook.models import WebhookRequest

WEBHOOK_PATH = "/webhook"


def configure_logging() -> None:
    level = os.environ.get("WEBHOOK_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    configure_logging()
    audit_log = os.environ.get("WEBHOOK_AUDIT_LOG_PATH")
    audit_logger = AuditLogger.from_env(audit_log) if audit_log else None
    return create_app(WebhookHandler(audit_logger=audit_logger))


def create_app(webhook_handler: WebhookHandler) -> FastAPI:
    """Create the webhook FastAPI app around an existing handler."""
    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    async def webhook(request: Request) -> Response:
        body = await request.body()
        result = await webhook_handler.handle(WebhookRequest(
            method=request.method,
            headers=dict(request.headers),
            body=body.decode("utf-8", errors="replace"),
        ))
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=result.headers,
        )

    # No method filter: every verb reaches the handler, which owns the 405.
    app.add_route(WEBHOOK_PATH, webhook, methods=None)

    return app
