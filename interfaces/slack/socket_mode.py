"""
Slack Socket Mode Runner

Runs the check-in bot over Socket Mode instead of the public webhook, for
workspaces without an inbound URL. Bolt verifies and acknowledges requests;
the listeners delegate to the same handlers as the HTTP router.

Usage:
    python -m interfaces.slack.socket_mode
"""

import re
import asyncio
import logging

from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler

from checkin_config import CheckinConfig
from models import MOOD_ACTION_PREFIX, MOOD_MODAL_CALLBACK_ID
from .core_slack_orchestration import SlackInterface

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_socket_mode_app(config: CheckinConfig) -> AsyncApp:
    """Create a Bolt app whose listeners share the webhook's handlers"""
    app = AsyncApp(
        token=config.slack_bot_token,
        signing_secret=config.slack_signing_secret
    )
    register_listeners(app, SlackInterface(config, slack_client=app.client))
    return app


def register_listeners(app: AsyncApp, slack_interface: SlackInterface) -> None:
    """Mood buttons, the context modal and both slash commands"""

    @app.action(re.compile(f"^{MOOD_ACTION_PREFIX}\\d+$"))
    async def handle_mood_button(ack, body):
        # Ack immediately to avoid Slack 3s timeout
        await ack()
        await _run(slack_interface.interaction_handler.route_interaction(body))

    @app.view(MOOD_MODAL_CALLBACK_ID)
    async def handle_mood_submission(ack, body):
        await ack()
        await _run(slack_interface.interaction_handler.route_interaction(body))

    @app.view_closed(MOOD_MODAL_CALLBACK_ID)
    async def handle_mood_skipped(ack, body):
        await ack()
        await _run(slack_interface.interaction_handler.route_interaction(body))

    @app.command("/mood")
    async def handle_mood_command(ack, command):
        await ack(await slack_interface.command_handler.handle_command(command))

    @app.command("/my-moods")
    async def handle_my_moods_command(ack, command):
        await ack(await slack_interface.command_handler.handle_command(command))


async def _run(task) -> None:
    if task is not None:
        await task()


async def main() -> None:
    config = CheckinConfig.from_env()
    if not config.slack_app_token:
        raise SystemExit("SLACK_APP_TOKEN is required for Socket Mode")

    app = create_socket_mode_app(config)
    handler = AsyncSocketModeHandler(app, config.slack_app_token)
    logger.info("⚡️ Mood check-in bot running in Socket Mode")
    await handler.start_async()


if __name__ == "__main__":
    asyncio.run(main())
