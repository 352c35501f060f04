"""
Slack Modal Handler

Opens the mood context modal when a mood button is pressed. The chosen mood,
the conversation to confirm in, the original message ts and any response_url
travel in the modal's private_metadata until the modal is submitted or closed.
"""

import json
import logging
from typing import Dict, Any, Optional

from models import PendingCheckIn, mood_for_action
from interfaces.slack.formatters.mood_blocks import build_mood_modal

logger = logging.getLogger(__name__)


class SlackModalHandler:
    """Handles the mood button -> context modal step"""

    def __init__(self, slack_client):
        self.slack_client = slack_client

    @staticmethod
    def build_pending_checkin(body: Dict[str, Any]) -> Optional[PendingCheckIn]:
        """Derive the check-in state from a block_actions payload, or None if it is not a mood button"""
        actions = body.get("actions") or []
        if not actions:
            return None
        action = actions[0]
        mood = mood_for_action(action.get("action_id"))
        if mood is None:
            return None

        try:
            button_value = json.loads(action.get("value") or "{}")
        except json.JSONDecodeError:
            button_value = {}
        if not isinstance(button_value, dict):
            button_value = {}

        container = body.get("container", {}) or {}
        channel_id = (
            button_value.get("source_channel_id")
            or (body.get("channel") or {}).get("id")
            or container.get("channel_id")
        )
        message_ts = (body.get("message") or {}).get("ts") or container.get("message_ts")

        return PendingCheckIn.for_mood(
            mood,
            channel_id=channel_id,
            message_ts=message_ts,
            response_url=button_value.get("response_url"),
        )

    async def open_mood_modal(self, body: Dict[str, Any]) -> bool:
        """Open the context modal for a mood button press. Failures are logged."""
        pending = self.build_pending_checkin(body)
        if pending is None:
            logger.warning("Ignoring block action without a mood button")
            return False

        trigger_id = body.get("trigger_id")
        user_id = body.get("user", {}).get("id")
        if not trigger_id:
            logger.error("No trigger_id found in body - cannot open modal")
            return False

        logger.info(f"Opening mood modal for user {user_id} (score {pending.score}, channel {pending.channel_id})")
        try:
            response = await self.slack_client.views_open(
                trigger_id=trigger_id,
                view=build_mood_modal(pending)
            )
        except Exception as e:
            logger.error(f"Error opening mood modal for user {user_id}: {e}")
            return False

        view_id = (response.get("view") or {}).get("id", "unknown")
        logger.info(f"✅ Mood modal opened, view_id: {view_id}")
        return True
