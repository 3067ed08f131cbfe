"""Resend mailer for the business notification and customer acknowledgement."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from .models import OutboundEmail

log = logging.getLogger("piano-quote.mailer")


class MailerError(Exception):
    """The provider refused the message or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResendMailer:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def send(self, message: OutboundEmail) -> str:
        """Send one message and return the provider's message id."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.base_url}/emails", headers=headers, json=_payload(message)
                )
        except httpx.HTTPError as exc:
            raise MailerError(f"Email provider unreachable: {exc}") from exc

        data = _json_or_empty(resp)
        if resp.is_error:
            detail = data.get("message") or resp.text or resp.reason_phrase
            raise MailerError(str(detail), status_code=resp.status_code)

        message_id = str(data.get("id") or "")
        if not message_id:
            raise MailerError("Email provider returned no message id", status_code=resp.status_code)
        log.info("Sent '%s' to %s (id %s)", message.subject, ", ".join(message.to), message_id)
        return message_id


def _payload(message: OutboundEmail) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "from": message.from_email,
        "to": message.to,
        "subject": message.subject,
        "html": message.html,
    }
    if message.cc:
        payload["cc"] = message.cc
    if message.reply_to:
        payload["reply_to"] = message.reply_to
    if message.headers:
        payload["headers"] = message.headers
    if message.attachments:
        payload["attachments"] = [
            {"filename": a.filename, "content": base64.b64encode(a.content).decode("ascii")}
            for a in message.attachments
        ]
    return payload


def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
