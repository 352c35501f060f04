import logging
from typing import Optional

import httpx
from fastapi import Request
from fastapi.responses import Response
from slack_sdk.web.async_client import AsyncWebClient

from checkin_config import CheckinConfig
from database import MoodDatabase

# Import modular Slack components
from .signature import SlackSignatureVerifier
from .webhook_router import SlackWebhookRouter
from .services.user_service import SlackUserService
from .services.checkin_service import SlackCheckinService
from .handlers.modal_handler import SlackModalHandler
from .handlers.command_handler import SlackCommandHandler
from .handlers.interaction_handler import SlackInteractionHandler
from .features.scheduled.daily_checkin import DailyCheckinSender

logger = logging.getLogger(__name__)


class SlackInterface:
    """
    Mood check-in bot - prompts out, check-ins in
    """

    def __init__(self, config: CheckinConfig, slack_client=None, mood_db=None,
                 http_client_factory=httpx.AsyncClient):
        self.config = config

        # Slack Web API client and persistence
        self.client = slack_client or AsyncWebClient(token=config.slack_bot_token)
        self.mood_db = mood_db or MoodDatabase.from_config(config)

        # Initialize modular services
        self.user_service = SlackUserService(self.client)
        self.checkin_service = SlackCheckinService(
            self.client,
            self.mood_db,
            self.user_service,
            announce_channel_id=config.mood_channel_id,
            announce_anonymously=config.announce_anonymously,
            http_client_factory=http_client_factory
        )
        self.modal_handler = SlackModalHandler(self.client)
        self.command_handler = SlackCommandHandler(self.mood_db, config)
        self.interaction_handler = SlackInteractionHandler(self.modal_handler, self.checkin_service)
        self.daily_sender = DailyCheckinSender(self.client, self.user_service, config)

        self.verifier = SlackSignatureVerifier(config.slack_signing_secret)
        self.router = SlackWebhookRouter(self.verifier, self.command_handler, self.interaction_handler)

    async def handle(self, request: Request) -> Response:
        """Handle one Slack webhook request"""
        return await self.router.handle(request)

    async def close(self):
        await self.mood_db.close()


# For FastAPI integration
def create_slack_app(config: Optional[CheckinConfig] = None, **kwargs) -> SlackInterface:
    """Create the check-in Slack interface for FastAPI"""
    config = config or CheckinConfig.from_env()
    if not config.slack_signing_secret:
        logger.warning("SLACK_SIGNING_SECRET not set - all Slack requests will be rejected")
    return SlackInterface(config, **kwargs)
