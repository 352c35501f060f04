"""
Scheduled Messages and Notifications

Handles time-based Slack interactions:
- Daily mood check-in prompts (cron endpoint and one-shot script)
"""

from .daily_checkin import DailyCheckinSender, MemberListError

__all__ = ['DailyCheckinSender', 'MemberListError']
