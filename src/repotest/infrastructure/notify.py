"""Chat webhook notifications (Discord-compatible JSON payload)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_ENV = "DISCORD_WEBHOOK_URL"
DEFAULT_USERNAME = "Test Bot"


class Notifier(Protocol):
    def send(self, message: str) -> NotifyResult:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class NotifyResult:
    delivered: bool
    status_code: int | None = None
    error_message: str | None = None


def webhook_url(env_var: str = DEFAULT_WEBHOOK_ENV) -> str:
    url = os.getenv(env_var)
    if not url:
        logger.warning("%s not set", env_var)
        return ""
    return url


class WebhookNotifier:
    """POSTs `{"username", "content"}` to a webhook, blocking until it answers.

    Delivery problems are reported through `NotifyResult`, never raised.

    Usage:
        notifier = WebhookNotifier(webhook_url())
        notifier.send("🎉 Test passed for todo")
    """

    def __init__(
        self,
        url: str,
        *,
        username: str = DEFAULT_USERNAME,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.url = url
        self.username = username
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, message: str) -> NotifyResult:
        payload = {"username": self.username, "content": message}
        try:
            response = self._client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("HTTP Error: %s", exc)
            return NotifyResult(delivered=False, error_message=str(exc))
        if response.status_code > 299:
            logger.error("Error sending message: %s %s", response.status_code, response.text)
            return NotifyResult(
                delivered=False,
                status_code=response.status_code,
                error_message=f"HTTP {response.status_code}",
            )
        return NotifyResult(delivered=True, status_code=response.status_code)

    def close(self) -> None:
        self._client.close()


class LogNotifier:
    """Writes messages to the log instead of a webhook (dry runs)."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def send(self, message: str) -> NotifyResult:
        self.messages.append(message)
        logger.info("[notify] %s", message)
        return NotifyResult(delivered=True)


__all__ = [
    "LogNotifier",
    "Notifier",
    "NotifyResult",
    "WebhookNotifier",
    "webhook_url",
]
