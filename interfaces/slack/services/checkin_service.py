"""
Slack Check-in Service

Runs the persist-and-notify sequence once a mood modal is submitted or skipped:
1. resolve the submitter's display name
2. insert the mood entry (stop on failure or duplicate)
3. edit the original prompt in place when it can be addressed
4. otherwise confirm through response_url, a DM, or an ephemeral reply
5. DM the submitter and post to the announcement channel

Every Slack-side step is best-effort: failures are logged, never retried,
and never shown to the user.
"""

import logging
from typing import Callable, Optional

import httpx

from models import MoodEntry, PendingCheckIn, make_dedup_key
from interfaces.slack.formatters.mood_blocks import (
    build_completion_blocks, completion_fallback_text,
    confirmation_text, announcement_text
)

logger = logging.getLogger(__name__)

RESPONSE_URL_TIMEOUT = 10.0


class SlackCheckinService:
    """Records mood check-ins and sends the follow-up notifications"""

    def __init__(self, slack_client, mood_db, user_service,
                 announce_channel_id: Optional[str] = None,
                 announce_anonymously: bool = False,
                 http_client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient):
        self.slack_client = slack_client
        self.mood_db = mood_db
        self.user_service = user_service
        self.announce_channel_id = announce_channel_id
        self.announce_anonymously = announce_anonymously
        self.http_client_factory = http_client_factory

    async def record_checkin(self, pending: PendingCheckIn, user_id: str,
                             team_id: Optional[str] = None,
                             context: Optional[str] = None,
                             view_id: Optional[str] = None) -> bool:
        """Persist one check-in and notify. Returns True when a new row was written."""
        names = await self.user_service.get_user_names(user_id)
        display_name = names['resolved_name']

        entry = MoodEntry(
            slack_user_id=user_id,
            slack_username=names['username'],
            slack_display_name=names['display_name'],
            mood_score=pending.score,
            mood_emoji=pending.emoji,
            additional_context=context,
            slack_team_id=team_id,
            dedup_key=make_dedup_key(user_id, view_id=view_id, message_ts=pending.message_ts),
        )

        try:
            inserted = await self.mood_db.insert_mood_entry(entry)
        except Exception as e:
            logger.error(f"Error saving mood entry for user {user_id}: {e}")
            return False

        if not inserted:
            logger.warning(f"Duplicate check-in for user {user_id} (view {view_id}), skipping notifications")
            return False

        text = confirmation_text(display_name, pending.emoji, context)

        if not await self._update_original_message(pending, display_name):
            await self._send_fallback_confirmation(pending, user_id, text)

        await self._send_confirmation_dm(user_id, text)
        await self._announce(display_name, pending.emoji, context)
        return True

    async def _update_original_message(self, pending: PendingCheckIn, display_name: str) -> bool:
        if not (pending.channel_id and pending.message_ts):
            return False
        try:
            await self.slack_client.chat_update(
                channel=pending.channel_id,
                ts=pending.message_ts,
                blocks=build_completion_blocks(display_name, pending.emoji),
                text=completion_fallback_text(display_name, pending.emoji)
            )
            return True
        except Exception as e:
            logger.info(f"Could not update original message (likely ephemeral): {e}")
            return False

    async def _send_fallback_confirmation(self, pending: PendingCheckIn, user_id: str, text: str) -> None:
        """Confirm through the best channel still available when the prompt could not be edited"""
        if pending.response_url:
            try:
                async with self.http_client_factory() as http:
                    response = await http.post(
                        pending.response_url,
                        json={"text": text, "response_type": "ephemeral"},
                        timeout=RESPONSE_URL_TIMEOUT
                    )
                    response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.warning(f"Could not send response_url confirmation: {e}")
            return

        if not pending.channel_id:
            return

        try:
            if pending.is_direct_message:
                await self.slack_client.chat_postMessage(channel=pending.channel_id, text=text)
            else:
                await self.slack_client.chat_postEphemeral(
                    channel=pending.channel_id,
                    user=user_id,
                    text=text
                )
        except Exception as e:
            logger.warning(f"Could not send confirmation: {e}")

    async def _send_confirmation_dm(self, user_id: str, text: str) -> None:
        try:
            await self.slack_client.chat_postMessage(channel=user_id, text=text)
        except Exception as e:
            logger.warning(f"Could not send confirmation DM to {user_id}: {e}")

    async def _announce(self, display_name: str, emoji: str, context: Optional[str]) -> None:
        if not self.announce_channel_id:
            return
        try:
            await self.slack_client.chat_postMessage(
                channel=self.announce_channel_id,
                text=announcement_text(display_name, emoji, context, anonymous=self.announce_anonymously)
            )
        except Exception as e:
            logger.warning(f"Could not post to mood channel: {e}")
