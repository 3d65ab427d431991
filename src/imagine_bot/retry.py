"""Retry/Backoff Controller

Wraps the backend client in an attempt-bounded retry loop. Cold-starting
models answer 500/503 until they are warm, and warm up in roughly even steps,
so the delay grows linearly: 5s, 10s, 15s, 20s.

    ATTEMPTING ──2xx + image──────────────▶ SUCCEEDED
        │  ▲
        │  └─wait attempt×5s── TRANSIENT_FAILURE  (500/503, attempt < max)
        ├──500/503 at max attempt──────────▶ EXHAUSTED_FAILURE
        └──anything else───────────────────▶ FATAL_FAILURE
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from imagine_bot.backend_client import ImageBackendClient
from imagine_bot.errors import (
    BackendHTTPError,
    ExhaustedRetriesError,
    FatalGenerationError,
    GenerationError,
    TransientBackendError,
)
from imagine_bot.models import GeneratedImage, RawResponse

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
BASE_DELAY_SECONDS = 5.0
TRANSIENT_STATUS_CODES = frozenset({500, 503})


class RetryPhase(Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    TRANSIENT_FAILURE = "transient_failure"
    EXHAUSTED_FAILURE = "exhausted_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass
class RetryState:
    """Progress of one retry sequence. Owned by a single controller run."""

    attempt: int = 1
    max_attempts: int = MAX_ATTEMPTS
    base_delay: float = BASE_DELAY_SECONDS
    phase: RetryPhase = RetryPhase.ATTEMPTING
    history: list[RetryPhase] = field(default_factory=lambda: [RetryPhase.ATTEMPTING])

    @property
    def delay(self) -> float:
        """Seconds to wait before retrying the current attempt."""
        return self.attempt * self.base_delay

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def transition(self, phase: RetryPhase) -> None:
        self.phase = phase
        self.history.append(phase)


def is_transient(raw: RawResponse) -> bool:
    return raw.status_code in TRANSIENT_STATUS_CODES


class RetryController:
    """Runs the client until it succeeds, fails fatally, or runs out of attempts.

    Args:
        client: Backend client; its response format decodes successful responses
        max_attempts: Attempt bound, including the first attempt
        base_delay: Backoff unit in seconds
        sleep: Awaitable sleep function, injectable for tests
    """

    def __init__(
        self,
        client: ImageBackendClient,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def new_state(self) -> RetryState:
        return RetryState(max_attempts=self.max_attempts, base_delay=self.base_delay)

    async def run(
        self, prompt: str, credentials: str | None, state: RetryState | None = None
    ) -> GeneratedImage:
        """Generate an image, retrying transient backend failures.

        Args:
            prompt: Text prompt
            credentials: Backend API token
            state: Optional state to record progress into (fresh if omitted)

        Returns:
            GeneratedImage on success

        Raises:
            ConfigurationError: If credentials are missing
            ExhaustedRetriesError: If every attempt was transient
            FatalGenerationError: On any non-retryable failure
        """
        state = state or self.new_state()

        while True:
            logger.info(
                f"[imagine] Attempt {state.attempt}/{state.max_attempts} "
                f"model={self.client.config.model}"
            )
            try:
                image = await self._attempt(prompt, credentials)
            except TransientBackendError as e:
                logger.warning(f"[imagine] {e}")
                if state.exhausted:
                    state.transition(RetryPhase.EXHAUSTED_FAILURE)
                    raise ExhaustedRetriesError(state.attempt) from e

                state.transition(RetryPhase.TRANSIENT_FAILURE)
                delay = state.delay
                logger.info(f"[imagine] Retrying in {delay:g}s...")
                await self._sleep(delay)
                state.attempt += 1
                state.transition(RetryPhase.ATTEMPTING)
                continue
            except GenerationError as e:
                state.transition(RetryPhase.FATAL_FAILURE)
                raise FatalGenerationError(e) from e

            state.transition(RetryPhase.SUCCEEDED)
            return image

    async def _attempt(self, prompt: str, credentials: str | None) -> GeneratedImage:
        raw = await self.client.send(prompt, credentials)

        if is_transient(raw):
            raise TransientBackendError(raw.status_code, raw.text())

        if not raw.is_success:
            raise BackendHTTPError(raw.status_code, raw.text())

        return self.client.response_format.decode(raw)
