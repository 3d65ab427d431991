"""Shared fixtures: a recording messenger, a scripted backend, a fake sleep."""

import base64

import httpx
import pytest

from imagine_bot.backend_client import ImageBackendClient
from imagine_bot.config import BotConfig
from imagine_bot.errors import DeliveryError
from imagine_bot.messenger import Messenger
from imagine_bot.retry import RetryController

PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
PNG_BYTES = base64.b64decode(PNG_BASE64)


class FakeMessenger(Messenger):
    """Records every outbound call. Set ``fail_sends`` / ``fail_remove`` to break it."""

    def __init__(self):
        self.sent = []  # (channel_id, text, attachments)
        self.reactions = []  # (channel_id, event_id, emoji)
        self.removed = []  # (channel_id, message_id)
        self.fail_sends: set[int] = set()  # indexes of send_message calls to fail
        self.fail_remove = False
        self._send_count = 0

    async def send_message(self, channel_id, text, attachments=None):
        index = self._send_count
        self._send_count += 1
        if index in self.fail_sends:
            raise DeliveryError(f"send #{index} failed")
        self.sent.append((channel_id, text, attachments))
        return f"msg-{index}"

    async def send_reaction(self, channel_id, event_id, emoji):
        self.reactions.append((channel_id, event_id, emoji))

    async def remove_message(self, channel_id, message_id):
        self.removed.append((channel_id, message_id))
        if self.fail_remove:
            raise DeliveryError("remove failed")

    @property
    def texts(self) -> list[str]:
        return [text for _, text, _ in self.sent]


class FakeSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def png_response(content_type: str = "image/png") -> httpx.Response:
    return httpx.Response(200, content=PNG_BYTES, headers={"content-type": content_type})


def loading_response(status_code: int = 503) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": "Model is currently loading", "estimated_time": 20.0},
    )


class ScriptedBackend:
    """httpx transport that answers with a fixed sequence of responses."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def config():
    return BotConfig(api_token="hf_test_token")


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def scripted_backend():
    """Factory: ``scripted_backend(responses, config)`` -> (backend, controller)."""

    def make(responses, config, sleep=None):
        backend = ScriptedBackend(responses)
        client = ImageBackendClient(config, transport=backend.transport)
        controller = RetryController(client, sleep=sleep or FakeSleep())
        return backend, controller

    return make
