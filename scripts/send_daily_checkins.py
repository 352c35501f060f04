"""
Daily Mood Check-in Trigger

Run this script from a cron job (or any scheduler) to send the daily mood
check-in to MOOD_CHANNEL_ID and as DMs to each id in MOOD_USER_IDS.

Usage:
    python scripts/send_daily_checkins.py
"""

import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from slack_sdk.web.async_client import AsyncWebClient

from checkin_config import CheckinConfig
from interfaces.slack.services.user_service import SlackUserService
from interfaces.slack.features.scheduled.daily_checkin import DailyCheckinSender


async def main() -> int:
    logging.basicConfig(level=logging.INFO)

    config = CheckinConfig.from_env()
    client = AsyncWebClient(token=config.slack_bot_token)
    sender = DailyCheckinSender(client, SlackUserService(client), config)

    summary = await sender.run_once()
    print(summary["message"])

    failures = [result for result in summary["results"] if not result["success"]]
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
