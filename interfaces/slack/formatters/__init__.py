"""
Slack Message Formatters

Block Kit builders for mood prompts, modals and confirmations.
"""

from .mood_blocks import build_mood_message, build_mood_modal, get_greeting

__all__ = ['build_mood_message', 'build_mood_modal', 'get_greeting']
