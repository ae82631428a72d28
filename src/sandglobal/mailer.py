"""HTTP mail API client."""

from __future__ import annotations

import logging

import httpx

from sandglobal.config import SandGlobalConfig
from sandglobal.exceptions import NotificationError
from sandglobal.notifications import EmailMessage

logger = logging.getLogger(__name__)


class HttpMailSender:
    """Send email through a Resend-style ``POST /emails`` JSON API."""

    def __init__(
        self,
        config: SandGlobalConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.config.mail_api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.mail_api_url,
            headers={
                "Authorization": f"Bearer {self.config.mail_api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.config.mail_timeout_seconds,
            transport=self.transport,
        )

    async def send(self, message: EmailMessage) -> None:
        if not self.configured:
            raise NotificationError("Mail API key is not configured")

        body: dict = {
            "from": self.config.mail_from,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        if message.bcc:
            body["bcc"] = message.bcc
        if message.reply_to:
            body["reply_to"] = message.reply_to

        try:
            async with self._client() as client:
                response = await client.post("/emails", json=body)
        except httpx.HTTPError as exc:
            raise NotificationError(f"Mail API unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise NotificationError(
                f"Mail API returned {response.status_code}: {response.text}"
            )
        logger.info(
            "Email '%s' sent to %s", message.subject, ", ".join(message.to)
        )
