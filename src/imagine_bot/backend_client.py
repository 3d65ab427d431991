"""Image Backend Client

Sends exactly one inference request per call. Retrying is the caller's job
(see ``imagine_bot.retry``); this module only builds the request, performs it
and hands back the unparsed response.
"""

import logging

import httpx

from imagine_bot.config import NOT_CONFIGURED, BotConfig
from imagine_bot.errors import BackendRequestError, ConfigurationError
from imagine_bot.models import RawResponse
from imagine_bot.response_format_plugin import ResponseFormatPlugin
from imagine_bot.response_format_registry import ResponseFormatRegistry

logger = logging.getLogger(__name__)


class ImageBackendClient:
    """Client for a single text-to-image inference endpoint.

    Args:
        config: Bot configuration (endpoint, model, timeout, response format)
        response_format: Format to use instead of the configured one
        transport: Optional httpx transport, used by tests to fake the backend
    """

    def __init__(
        self,
        config: BotConfig,
        response_format: ResponseFormatPlugin | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.response_format = response_format or ResponseFormatRegistry.create(
            config.response_format
        )
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.response_format.build_url(self.config.api_url, self.config.model)

    async def send(self, prompt: str, credentials: str | None) -> RawResponse:
        """POST one generation request.

        Args:
            prompt: Non-empty text prompt
            credentials: Backend API token

        Returns:
            RawResponse for whatever status the backend answered with

        Raises:
            ValueError: If the prompt is blank
            ConfigurationError: If no credentials are given (nothing is sent)
            BackendRequestError: If the request fails before a response arrives
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")
        if not credentials:
            raise ConfigurationError(
                "HF_API_TOKEN is not configured",
                user_message=NOT_CONFIGURED,
            )

        logger.info(f"[imagine] Requesting model={self.config.model}")

        try:
            async with httpx.AsyncClient(
                timeout=self.config.request_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    headers=self.response_format.build_headers(credentials),
                    json=self.response_format.build_payload(prompt),
                )
        except (httpx.RequestError, httpx.TimeoutException) as e:
            logger.warning(f"[imagine] Request to image backend failed: {e!r}")
            raise BackendRequestError(
                f"Could not reach the image backend: {e.__class__.__name__}",
                user_message="Could not reach the image backend.",
            ) from e

        return RawResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            body=response.content,
        )
