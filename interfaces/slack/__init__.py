"""
Slack Integration Module

Mood check-in bot for Slack with support for:
- Signed webhook routing (challenges, slash commands, interactivity)
- Mood prompt buttons and the follow-up context modal
- Persisting check-ins and confirming them back to the user
- Scheduled daily prompts
"""

from .core_slack_orchestration import SlackInterface, create_slack_app

__all__ = ['SlackInterface', 'create_slack_app']
