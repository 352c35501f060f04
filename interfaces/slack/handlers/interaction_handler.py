"""
Slack Interaction Handler

Classifies decoded interactivity payloads. Each recognised payload yields a
BackgroundTask holding the slow work, so the caller can acknowledge Slack
first and run the task afterwards.
"""

import logging
from typing import Dict, Any, Optional

from starlette.background import BackgroundTask

from models import (
    MOOD_ACTION_PREFIX, MOOD_MODAL_CALLBACK_ID,
    PendingCheckIn, InvalidCheckinTokenError
)
from interfaces.slack.formatters.mood_blocks import extract_context

logger = logging.getLogger(__name__)


class SlackInteractionHandler:
    """Dispatches block_actions, view_submission and view_closed payloads"""

    def __init__(self, modal_handler, checkin_service):
        self.modal_handler = modal_handler
        self.checkin_service = checkin_service

    def route_interaction(self, payload: Dict[str, Any]) -> Optional[BackgroundTask]:
        """Return the work to run after acknowledging, or None for payloads we ignore"""
        payload_type = payload.get("type")

        if payload_type == "block_actions":
            return self._route_block_actions(payload)
        if payload_type == "view_submission":
            return self._route_view_resolution(payload, submitted=True)
        if payload_type == "view_closed":
            return self._route_view_resolution(payload, submitted=False)

        logger.info(f"Ignoring interaction of type {payload_type}")
        return None

    def _route_block_actions(self, payload: Dict[str, Any]) -> Optional[BackgroundTask]:
        actions = payload.get("actions") or []
        action_id = actions[0].get("action_id", "") if actions else ""
        if not action_id.startswith(MOOD_ACTION_PREFIX):
            logger.info(f"Ignoring block action {action_id!r}")
            return None
        return BackgroundTask(self.modal_handler.open_mood_modal, payload)

    def _route_view_resolution(self, payload: Dict[str, Any], submitted: bool) -> Optional[BackgroundTask]:
        view = payload.get("view") or {}
        if view.get("callback_id") != MOOD_MODAL_CALLBACK_ID:
            logger.info(f"Ignoring view {view.get('callback_id')!r}")
            return None

        try:
            pending = PendingCheckIn.from_metadata(view.get("private_metadata"))
        except InvalidCheckinTokenError as e:
            logger.error(f"Could not decode mood modal metadata: {e}")
            return None

        user_id = (payload.get("user") or {}).get("id")
        if not user_id:
            logger.error("Mood modal payload without a user id")
            return None

        context = extract_context(view) if submitted else None
        team_id = (payload.get("team") or {}).get("id")
        logger.info(f"Mood modal {'submitted' if submitted else 'skipped'} by {user_id} (score {pending.score})")

        return BackgroundTask(
            self.checkin_service.record_checkin,
            pending,
            user_id,
            team_id=team_id,
            context=context,
            view_id=view.get("id"),
        )
