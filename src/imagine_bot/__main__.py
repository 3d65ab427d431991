"""CLI entry point for imagine-bot."""

import argparse
import logging
from pathlib import Path

import uvicorn

from imagine_bot.app import create_app
from imagine_bot.config import BotConfig


def main() -> None:
    """Run the Imagine Bot webhook server."""
    parser = argparse.ArgumentParser(
        description="Imagine Bot - chat bot with AI image generation"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5123,
        help="Port to run the server on (default: 5123)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (must exist if given; ./config.yaml is optional)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    config = BotConfig.load(args.config)
    app = create_app(config)

    print(f"Starting Imagine Bot at http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
