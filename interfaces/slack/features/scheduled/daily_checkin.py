"""
Daily Mood Check-in Sender

Sends the mood prompt on a schedule. Used by the cron endpoint (DMs every
human member of the mood channel) and by scripts/send_daily_checkins.py
(posts to the channel and DMs a fixed list of users). One recipient's
failure never stops the others.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Any, List, Optional
from zoneinfo import ZoneInfo

from interfaces.slack.formatters.mood_blocks import (
    build_mood_message, get_greeting, PROMPT_FALLBACK_TEXT
)

logger = logging.getLogger(__name__)

WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


class MemberListError(Exception):
    """Raised when the channel membership cannot be enumerated"""


class DailyCheckinSender:
    """Sends the daily mood prompt to channels and users"""

    def __init__(self, slack_client, user_service, config,
                 now_fn: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.slack_client = slack_client
        self.user_service = user_service
        self.config = config
        self.now_fn = now_fn

    def is_weekend(self, now: Optional[datetime] = None) -> bool:
        now = now or self.now_fn()
        return now.astimezone(ZoneInfo(self.config.reference_timezone)).weekday() in WEEKEND_DAYS

    def should_skip(self) -> bool:
        return self.config.skip_weekends and self.is_weekend()

    def build_blocks(self) -> List[Dict[str, Any]]:
        greeting = get_greeting(
            self.now_fn(),
            self.config.reference_timezone,
            self.config.morning_until,
            self.config.afternoon_until
        )
        return build_mood_message(greeting)

    async def send_prompt(self, channel: str, blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Post the prompt to one channel or user; returns a result record"""
        try:
            await self.slack_client.chat_postMessage(
                channel=channel,
                blocks=blocks,
                text=PROMPT_FALLBACK_TEXT
            )
            logger.info(f"✅ Sent mood check-in to {channel}")
            return {"userId": channel, "success": True}
        except Exception as e:
            logger.error(f"❌ Failed to send mood check-in to {channel}: {e}")
            return {"userId": channel, "success": False, "error": str(e)}

    async def send_to_users(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        blocks = self.build_blocks()
        results = []
        for user_id in user_ids:
            results.append(await self.send_prompt(user_id, blocks))
        return results

    async def list_channel_members(self, channel_id: str) -> List[str]:
        """All member ids of a channel, following pagination cursors"""
        members: List[str] = []
        cursor = None
        try:
            while True:
                kwargs = {"channel": channel_id, "limit": self.config.members_page_size}
                if cursor:
                    kwargs["cursor"] = cursor
                response = await self.slack_client.conversations_members(**kwargs)
                members.extend(response.get("members") or [])
                cursor = (response.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
        except Exception as e:
            raise MemberListError(str(e)) from e
        return members

    async def list_human_members(self, channel_id: str) -> List[str]:
        members = await self.list_channel_members(channel_id)
        humans = []
        for member_id in members:
            if await self.user_service.is_active_human(member_id):
                humans.append(member_id)
        logger.info(f"Channel {channel_id} has {len(humans)}/{len(members)} human members")
        return humans

    async def run_cron(self) -> Dict[str, Any]:
        """
        Cron entry point: DM every human member of the mood channel

        Returns a summary {message, results[, skipped]}; raises MemberListError when
        the membership cannot be fetched.
        """
        if self.should_skip():
            logger.info("Skipping daily check-in - it's the weekend")
            return {"message": "Skipped - weekend", "skipped": True, "results": []}

        channel_id = self.config.mood_channel_id
        if not channel_id:
            return {
                "message": "No channel configured. Set MOOD_CHANNEL_ID to specify which channel's members should receive DMs.",
                "results": []
            }

        humans = await self.list_human_members(channel_id)
        results = await self.send_to_users(humans)
        sent = sum(1 for result in results if result["success"])
        return {
            "message": f"Daily check-in sent to {sent}/{len(humans)} members",
            "results": results
        }

    async def run_once(self) -> Dict[str, Any]:
        """Script entry point: post to the mood channel and DM the configured users"""
        if self.should_skip():
            logger.info("Skipping - it's the weekend!")
            return {"message": "Skipped - weekend", "skipped": True, "results": []}

        if not self.config.mood_channel_id and not self.config.mood_user_ids:
            logger.warning("⚠️  No channel or users configured. Set MOOD_CHANNEL_ID or MOOD_USER_IDS in .env")
            return {"message": "No channel or users configured", "results": []}

        blocks = self.build_blocks()
        results = []
        if self.config.mood_channel_id:
            results.append(await self.send_prompt(self.config.mood_channel_id, blocks))
        for user_id in self.config.mood_user_ids:
            results.append(await self.send_prompt(user_id, blocks))

        sent = sum(1 for result in results if result["success"])
        return {
            "message": f"Daily check-in sent to {sent}/{len(results)} recipients",
            "results": results
        }
