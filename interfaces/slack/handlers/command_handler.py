"""
Slack Command Handler

Slash commands:
- /mood: ephemeral mood prompt bound to the invoking channel and response_url
- /my-moods: the caller's recent entries and average score
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Any

from interfaces.slack.formatters.mood_blocks import (
    build_mood_message, build_history_blocks, get_greeting, NO_ENTRIES_TEXT
)

logger = logging.getLogger(__name__)


class SlackCommandHandler:
    """Builds slash command replies"""

    def __init__(self, mood_db, config, now_fn: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.mood_db = mood_db
        self.config = config
        self.now_fn = now_fn

    async def handle_command(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """Return the JSON reply for a slash command payload"""
        name = command.get("command", "")
        user_id = command.get("user_id")
        logger.info(f"Slash command {name} from user {user_id} in channel {command.get('channel_id')}")

        if name == "/mood":
            return self.mood_prompt(command)
        if name == "/my-moods":
            return await self.my_moods(user_id)
        return {
            "response_type": "ephemeral",
            "text": f"Unknown command: {name}"
        }

    def mood_prompt(self, command: Dict[str, Any]) -> Dict[str, Any]:
        greeting = get_greeting(
            self.now_fn(),
            self.config.reference_timezone,
            self.config.morning_until,
            self.config.afternoon_until
        )
        return {
            "response_type": "ephemeral",
            "text": "How are you feeling today?",
            "blocks": build_mood_message(
                greeting,
                source_channel_id=command.get("channel_id"),
                response_url=command.get("response_url")
            )
        }

    async def my_moods(self, user_id: str) -> Dict[str, Any]:
        try:
            entries = await self.mood_db.get_recent_entries(user_id, self.config.recent_entries_limit)
        except Exception as e:
            logger.error(f"Error loading mood entries for {user_id}: {e}")
            entries = []

        if not entries:
            return {"response_type": "ephemeral", "text": NO_ENTRIES_TEXT}

        return {
            "response_type": "ephemeral",
            "text": f"Your recent moods (last {len(entries)} entries)",
            "blocks": build_history_blocks(entries, self.config.reference_timezone)
        }
