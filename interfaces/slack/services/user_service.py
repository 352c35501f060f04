"""
Slack User Service

Looks up Slack users for the check-in flow:
- display name resolution for confirmations and stored entries
- human member detection for the daily check-in DMs
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

FALLBACK_NAME = "Someone"


class SlackUserService:
    """Service for resolving Slack user information"""

    def __init__(self, slack_client=None):
        self.slack_client = slack_client

    def set_slack_client(self, slack_client):
        """Set or update the Slack client"""
        self.slack_client = slack_client

    async def get_user_names(self, user_id: str) -> Dict[str, Optional[str]]:
        """
        Resolve the names stored with a mood entry

        Returns:
            username: Slack handle (user.name), if known
            display_name: profile display name, else profile real name, if known
            resolved_name: display_name, else real name, else "Someone"
        """
        try:
            response = await self.slack_client.users_info(user=user_id)
            user = response.get("user") or {}
        except Exception as e:
            logger.error(f"Error getting user info for {user_id}: {e}")
            return {'username': None, 'display_name': None, 'resolved_name': FALLBACK_NAME}

        profile = user.get('profile', {}) or {}
        display_name = profile.get('display_name') or profile.get('real_name') or None
        resolved_name = display_name or user.get('real_name') or FALLBACK_NAME
        logger.info(f"Resolved user {user_id} to: {resolved_name}")
        return {
            'username': user.get('name') or None,
            'display_name': display_name,
            'resolved_name': resolved_name
        }

    async def is_active_human(self, user_id: str) -> bool:
        """True for members that are neither bots nor deactivated; lookup failures count as False"""
        try:
            response = await self.slack_client.users_info(user=user_id)
        except Exception as e:
            logger.warning(f"Could not fetch info for user {user_id}: {e}")
            return False

        user: Dict[str, Any] = response.get("user") or {}
        return bool(user) and not user.get("is_bot") and not user.get("deleted")
