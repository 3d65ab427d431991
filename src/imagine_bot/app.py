"""
Imagine Bot - a chat bot with slash commands, keyword triggers and
AI image generation.

The chat platform delivers events to the webhook endpoints below. Each event
is acknowledged immediately and handled in a background task, so a slow
/imagine (up to a minute of cold-start retries) never holds up other events.
"""

import hmac
import logging

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException

from imagine_bot.backend_client import ImageBackendClient
from imagine_bot.config import BotConfig
from imagine_bot.dispatch import COMMANDS, Dispatcher
from imagine_bot.messenger import HttpMessenger, Messenger
from imagine_bot.models import CommandInvocation, MessageEvent, ReactionEvent
from imagine_bot.orchestrator import GenerationOrchestrator
from imagine_bot.retry import RetryController

logger = logging.getLogger(__name__)

ACCEPTED = {"status": "accepted"}


def create_app(
    config: BotConfig | None = None,
    messenger: Messenger | None = None,
    backend_client: ImageBackendClient | None = None,
    controller: RetryController | None = None,
) -> FastAPI:
    """Build the webhook app with all collaborators wired in.

    Args:
        config: Bot configuration. Loaded from ./config.yaml and env if omitted
        messenger: Outbound chat delivery. HttpMessenger from config if omitted
        backend_client: Image backend client. Built from config if omitted
        controller: Retry controller. Wraps ``backend_client`` if omitted

    Returns:
        FastAPI application
    """
    if config is None:
        config = BotConfig.load()
    if messenger is None:
        messenger = HttpMessenger(config.chat_api_url, config.chat_bot_token)
    if controller is None:
        controller = RetryController(backend_client or ImageBackendClient(config))

    orchestrator = GenerationOrchestrator(config, controller, messenger)
    dispatcher = Dispatcher(messenger, orchestrator)

    app = FastAPI(title="Imagine Bot", version="0.1.0")
    app.state.config = config
    app.state.dispatcher = dispatcher

    def verify_secret(x_webhook_secret: str | None = Header(default=None)) -> None:
        if not config.webhook_secret:
            return
        if x_webhook_secret is None or not hmac.compare_digest(
            x_webhook_secret.encode(), config.webhook_secret.encode()
        ):
            raise HTTPException(status_code=401, detail="Invalid webhook secret")

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "generation_enabled": config.generation_enabled,
            "model": config.model,
        }

    @app.get("/commands")
    async def list_commands():
        """Slash commands the bot registers with the chat platform."""
        return [
            {"name": name, "description": description}
            for name, description in COMMANDS.items()
        ]

    @app.post("/events/command", status_code=202, dependencies=[Depends(verify_secret)])
    async def command_event(event: CommandInvocation, background_tasks: BackgroundTasks):
        logger.info(f"Command /{event.command} from {event.user_id} in {event.channel_id}")
        background_tasks.add_task(dispatcher.on_command, event)
        return ACCEPTED

    @app.post("/events/message", status_code=202, dependencies=[Depends(verify_secret)])
    async def message_event(event: MessageEvent, background_tasks: BackgroundTasks):
        background_tasks.add_task(dispatcher.on_message, event)
        return ACCEPTED

    @app.post("/events/reaction", status_code=202, dependencies=[Depends(verify_secret)])
    async def reaction_event(event: ReactionEvent, background_tasks: BackgroundTasks):
        background_tasks.add_task(dispatcher.on_reaction, event)
        return ACCEPTED

    return app
