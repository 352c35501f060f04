"""
Slack Event and Interaction Handlers

Handles Slack requests for the check-in flow:
- Mood button presses and the context modal
- Modal submission and dismissal
- Slash commands
"""

from .modal_handler import SlackModalHandler
from .command_handler import SlackCommandHandler
from .interaction_handler import SlackInteractionHandler

__all__ = ['SlackModalHandler', 'SlackCommandHandler', 'SlackInteractionHandler']
