"""Generation Orchestrator: the /imagine command handler.

Posts a loading notice, runs the retry controller, posts the image or an
error, and always removes the loading notice afterwards. Nothing raised on the
generation path escapes ``handle()``; the dispatch loop never sees it.
"""

import logging
import mimetypes
import time
import traceback

from imagine_bot.config import NOT_CONFIGURED, BotConfig
from imagine_bot.errors import ImagineBotError
from imagine_bot.messenger import Messenger
from imagine_bot.models import (
    Attachment,
    CommandInvocation,
    GeneratedImage,
    GenerationRequest,
    LoadingNotice,
)
from imagine_bot.retry import RetryController

logger = logging.getLogger(__name__)

USAGE_HINT = "Please provide a prompt, e.g., `/imagine a sunset over the mountains`"

RETRY_TIP = "💡 Tip: If the model is loading, try again in 30-60 seconds!"


def loading_text(request: GenerationRequest) -> str:
    return (
        f"🎨 Generating an image for <@{request.requester_id}>...\n"
        f'Prompt: "{request.prompt}"\n\n'
        "_This may take 10-30 seconds if the model is cold-starting..._"
    )


def success_text(request: GenerationRequest) -> str:
    return f"✨ Here is your image, <@{request.requester_id}>:"


def failure_text(request: GenerationRequest, reason: str) -> str:
    return (
        f"❌ Sorry <@{request.requester_id}>, I could not generate the image: "
        f"{reason}\n\n{RETRY_TIP}"
    )


def attachment_filename(image: GeneratedImage) -> str:
    """``imagine-<epoch ms>.<ext>``, extension derived from the MIME type."""
    extension = mimetypes.guess_extension(image.mime_type) or ".png"
    return f"imagine-{int(time.time() * 1000)}{extension}"


class GenerationOrchestrator:
    """Handles /imagine invocations end to end.

    Args:
        config: Bot configuration; supplies the backend credentials
        controller: Retry controller wrapping the backend client
        messenger: Outbound chat delivery
    """

    def __init__(
        self, config: BotConfig, controller: RetryController, messenger: Messenger
    ):
        self.config = config
        self.controller = controller
        self.messenger = messenger

    async def handle(self, invocation: CommandInvocation) -> None:
        channel_id = invocation.channel_id
        prompt = " ".join(invocation.args).strip()

        if not prompt:
            await self._send_quietly(channel_id, USAGE_HINT)
            return

        if not self.config.generation_enabled:
            logger.error("[imagine] Missing HF_API_TOKEN environment variable")
            await self._send_quietly(channel_id, NOT_CONFIGURED)
            return

        request = GenerationRequest(prompt=prompt, requester_id=invocation.user_id)
        notice = await self._post_loading_notice(channel_id, request)

        try:
            image = await self.controller.run(request.prompt, self.config.api_token)
            attachment = Attachment(
                data=image.data,
                filename=attachment_filename(image),
                mime_type=image.mime_type,
            )
            await self.messenger.send_message(
                channel_id, success_text(request), attachments=[attachment]
            )
        except ImagineBotError as e:
            logger.error(f"[imagine] Failed to generate image: {e}")
            await self._send_quietly(channel_id, failure_text(request, e.user_message))
        except Exception as e:
            logger.error(f"[imagine] Unexpected error while generating image: {e}")
            logger.error(traceback.format_exc())
            await self._send_quietly(channel_id, failure_text(request, "Unknown error"))
        finally:
            if notice is not None:
                await self._remove_loading_notice(notice)

    async def _post_loading_notice(
        self, channel_id: str, request: GenerationRequest
    ) -> LoadingNotice | None:
        try:
            message_id = await self.messenger.send_message(
                channel_id, loading_text(request)
            )
        except Exception as e:
            logger.warning(f"[imagine] Failed to post loading message: {e}")
            return None
        if not message_id:
            return None
        return LoadingNotice(message_id=message_id, channel_id=channel_id)

    async def _remove_loading_notice(self, notice: LoadingNotice) -> None:
        try:
            await self.messenger.remove_message(notice.channel_id, notice.message_id)
        except Exception as e:
            logger.warning(f"[imagine] Failed to remove loading message: {e}")

    async def _send_quietly(self, channel_id: str, text: str) -> None:
        try:
            await self.messenger.send_message(channel_id, text)
        except Exception as e:
            logger.error(f"[imagine] Failed to deliver message to {channel_id}: {e}")
