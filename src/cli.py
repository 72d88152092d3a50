"""Click CLI for running and exercising the spreadsheet webhook."""

from __future__ import annotations

import asyncio
import json
import sys

import click
import httpx

from src.models import now_iso
from src.server.app import configure_logging
from src.webhook.handler import WebhookHandler
from src.webhook.models import WebhookRequest


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME:VALUE, got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


@click.group()
def cli() -> None:
    """Spreadsheet webhook receiver."""
    configure_logging()


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8888, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Serve the webhook endpoint over HTTP."""
    import uvicorn

    uvicorn.run("src.server.app:create_app_from_env", host=host, port=port, factory=True)


@cli.command()
@click.argument("body", required=False)
@click.option("--method", default="POST", show_default=True, help="HTTP method to simulate.")
@click.option("--header", "headers", multiple=True, help="Request header as NAME:VALUE.")
def invoke(body: str | None, method: str, headers: tuple[str, ...]) -> None:
    """Run the handler locally on BODY and print the response."""
    request = WebhookRequest(method=method, headers=_parse_headers(headers), body=body)
    response = asyncio.run(WebhookHandler().handle(request))
    click.echo(json.dumps(response.to_event_result(), indent=2))
    if not 200 <= response.status_code < 300:
        sys.exit(1)


@cli.command()
@click.argument("url")
@click.option("--type", "event_type", default="edit", show_default=True)
@click.option("--sheet", default="Sheet1", show_default=True)
@click.option("--user", default=None)
@click.option("--timestamp", default=None, help="Defaults to the current time.")
def send(
    url: str, event_type: str, sheet: str, user: str | None, timestamp: str | None,
) -> None:
    """POST a sample spreadsheet change notification to URL."""
    payload: dict[str, str] = {
        "type": event_type,
        "sheet": sheet,
        "timestamp": timestamp or now_iso(),
    }
    if user:
        payload["user"] = user
    try:
        resp = httpx.post(url, json=payload, timeout=30.0)
    except (httpx.ConnectError, httpx.TimeoutException) as exc:
        raise click.ClickException(f"Webhook endpoint unavailable: {exc}") from exc
    click.echo(f"HTTP {resp.status_code}")
    click.echo(resp.text)
    if resp.status_code >= 400:
        sys.exit(1)


if __name__ == "__main__":
    cli()
