"""Outbound chat delivery.

The bot only ever talks to the chat platform through a ``Messenger``: post a
message (optionally with attachments), add a reaction, remove a message.
``HttpMessenger`` implements this against the platform's bot REST API.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from imagine_bot.errors import DeliveryError
from imagine_bot.models import Attachment

logger = logging.getLogger(__name__)

DELIVERY_FAILED = "The chat platform did not accept the message."


class Messenger(ABC):
    """Outbound side of the chat platform. All failures raise DeliveryError."""

    @abstractmethod
    async def send_message(
        self,
        channel_id: str,
        text: str,
        attachments: list[Attachment] | None = None,
    ) -> str | None:
        """Post a message and return its id, if the platform gives one."""

    @abstractmethod
    async def send_reaction(self, channel_id: str, event_id: str, emoji: str) -> None:
        """React to an existing message."""

    @abstractmethod
    async def remove_message(self, channel_id: str, message_id: str) -> None:
        """Remove a message previously posted by the bot."""


class HttpMessenger(Messenger):
    """Messenger backed by a chat platform's bot REST API.

    Endpoints (relative to ``base_url``):
        POST   /channels/{channel}/messages              JSON or multipart
        POST   /channels/{channel}/messages/{id}/reactions
        DELETE /channels/{channel}/messages/{id}
    """

    def __init__(
        self,
        base_url: str,
        bot_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.bot_token = bot_token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict:
        if not self.bot_token:
            return {}
        return {"Authorization": f"Bearer {self.bot_token}"}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"{method} {path} failed ({e.response.status_code}): "
                f"{e.response.text[:200]}",
                user_message=DELIVERY_FAILED,
            ) from e
        except (httpx.RequestError, httpx.TimeoutException) as e:
            raise DeliveryError(
                f"{method} {path} failed: {e!r}", user_message=DELIVERY_FAILED
            ) from e

    async def send_message(
        self,
        channel_id: str,
        text: str,
        attachments: list[Attachment] | None = None,
    ) -> str | None:
        path = f"/channels/{channel_id}/messages"
        if attachments:
            files = [
                ("files", (a.filename, a.data, a.mime_type)) for a in attachments
            ]
            response = await self._request(
                "POST", path, data={"text": text}, files=files
            )
        else:
            response = await self._request("POST", path, json={"text": text})

        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict) and payload.get("id") is not None:
            return str(payload["id"])
        return None

    async def send_reaction(self, channel_id: str, event_id: str, emoji: str) -> None:
        await self._request(
            "POST",
            f"/channels/{channel_id}/messages/{event_id}/reactions",
            json={"emoji": emoji},
        )

    async def remove_message(self, channel_id: str, message_id: str) -> None:
        await self._request("DELETE", f"/channels/{channel_id}/messages/{message_id}")
