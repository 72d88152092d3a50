"""Optional collaborators invoked after a webhook body parses.

No implementations ship with this package. A deployment that needs
signature checks, persistence or fan-out plugs its own objects into
``WebhookHandler``. Raising from any hook turns the call into a 500.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.models import WebhookPayload
    from src.webhook.models import WebhookRequest


class Verifier(Protocol):
    async def verify(self, request: WebhookRequest, payload: WebhookPayload) -> None:
        """Raise if the request is not authentic."""
        ...


class Store(Protocol):
    async def save(self, payload: WebhookPayload) -> None: ...


class Notifier(Protocol):
    async def notify(self, payload: WebhookPayload) -> None: ...
