"""Routes inbound commands, messages and reactions to their handlers."""

import logging
import traceback
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from imagine_bot.messenger import Messenger
from imagine_bot.models import CommandInvocation, MessageEvent, ReactionEvent
from imagine_bot.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

CommandHandler = Callable[[CommandInvocation], Awaitable[None]]

HELP_TEXT = (
    "**Available Commands:**\n\n"
    "• `/help` - Show this help message\n"
    "• `/time` - Get the current time\n"
    "• `/imagine <prompt>` - Generate an image "
    "(e.g., `/imagine a cozy cabin in the snow`)\n\n"
    "**Message Triggers:**\n\n"
    "• React with 👋 - I'll wave back\n"
    '• Say "hello" - I\'ll greet you back\n'
    '• Say "ping" - I\'ll show latency\n'
    '• Say "react" - I\'ll add a reaction\n'
)

# Slash commands registered for the bot, name -> description
COMMANDS = {
    "help": "Get help with bot commands",
    "time": "Get the current time",
    "imagine": "Generate an image from a text prompt",
}


class Dispatcher:
    """Dispatch layer. Handler failures are logged, never propagated."""

    def __init__(self, messenger: Messenger, orchestrator: GenerationOrchestrator):
        self.messenger = messenger
        self.orchestrator = orchestrator
        self._commands: dict[str, CommandHandler] = {
            "help": self.help,
            "time": self.time,
            "imagine": orchestrator.handle,
        }

    async def on_command(self, invocation: CommandInvocation) -> None:
        name = invocation.command.lstrip("/").lower()
        handler = self._commands.get(name)
        if handler is None:
            logger.info(f"Ignoring unknown command: /{name}")
            return
        await self._run(f"/{name}", handler(invocation))

    async def on_message(self, event: MessageEvent) -> None:
        text = event.message
        if "hello" in text:
            await self._run(
                "hello", self.messenger.send_message(event.channel_id, "Hello there! 👋")
            )
        elif "ping" in text:
            created_at = event.created_at
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            latency_ms = int(
                (datetime.now(timezone.utc) - created_at).total_seconds() * 1000
            )
            await self._run(
                "ping",
                self.messenger.send_message(
                    event.channel_id, f"Pong! 🏓 {latency_ms}ms"
                ),
            )
        elif "react" in text:
            await self._run(
                "react",
                self.messenger.send_reaction(event.channel_id, event.event_id, "👍"),
            )

    async def on_reaction(self, event: ReactionEvent) -> None:
        if event.reaction == "👋":
            await self._run(
                "wave",
                self.messenger.send_message(event.channel_id, "I saw your wave! 👋"),
            )

    async def help(self, invocation: CommandInvocation) -> None:
        await self.messenger.send_message(invocation.channel_id, HELP_TEXT)

    async def time(self, invocation: CommandInvocation) -> None:
        now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        await self.messenger.send_message(
            invocation.channel_id, f"Current time: {now} ⏰"
        )

    async def _run(self, name: str, call: Awaitable) -> None:
        try:
            await call
        except Exception as e:
            logger.error(f"Handler {name} failed: {e}")
            logger.debug(traceback.format_exc())
