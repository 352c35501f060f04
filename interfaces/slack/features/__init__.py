"""
Advanced Slack App Features

Extended Slack app capabilities:
- Scheduled daily check-in prompts
"""

__all__ = []
