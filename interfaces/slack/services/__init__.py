"""
Slack Business Logic Services

Core services for the check-in flow:
- User name resolution and member filtering
- Check-in persistence and notifications
"""

from .user_service import SlackUserService
from .checkin_service import SlackCheckinService

__all__ = ['SlackUserService', 'SlackCheckinService']
