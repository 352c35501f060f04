"""
Mood Block Kit builders

Builds every message and view the check-in flow sends:
- the greeting + mood buttons prompt
- the follow-up context modal
- completion, confirmation and announcement texts
- the /my-moods history reply
"""

import json
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
from zoneinfo import ZoneInfo

from models import MOODS, MOOD_MODAL_CALLBACK_ID, PendingCheckIn

PROMPT_FALLBACK_TEXT = "How are you feeling today?"
CONTEXT_BLOCK_ID = "context_block"
CONTEXT_ACTION_ID = "context_input"
NO_ENTRIES_TEXT = "No mood entries found yet. Use `/mood` to log your first one!"


def get_greeting(now: Optional[datetime] = None, reference_timezone: str = "Europe/London",
                 morning_until: int = 12, afternoon_until: int = 18) -> str:
    """Time-of-day greeting in the reference timezone"""
    now = now or datetime.now(timezone.utc)
    hour = now.astimezone(ZoneInfo(reference_timezone)).hour
    if hour < morning_until:
        return "Good morning"
    if hour < afternoon_until:
        return "Good afternoon"
    return "Good evening"


def build_mood_message(greeting: str, source_channel_id: Optional[str] = None,
                       response_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """Prompt with one button per mood; slash-command flows carry their channel and response_url"""
    elements = []
    for mood in MOODS:
        value: Dict[str, Any] = {"score": mood.score, "emoji": mood.emoji}
        if source_channel_id:
            value["source_channel_id"] = source_channel_id
        if response_url:
            value["response_url"] = response_url
        elements.append({
            "type": "button",
            "text": {
                "type": "plain_text",
                "text": mood.emoji,
                "emoji": True
            },
            "value": json.dumps(value),
            "action_id": mood.action_id
        })

    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"👋 *{greeting}!* {PROMPT_FALLBACK_TEXT}"
            }
        },
        {
            "type": "actions",
            "elements": elements
        }
    ]


def build_mood_modal(pending: PendingCheckIn) -> Dict[str, Any]:
    """Follow-up modal asking for optional context; the check-in travels in private_metadata"""
    return {
        "type": "modal",
        "callback_id": MOOD_MODAL_CALLBACK_ID,
        "private_metadata": pending.to_metadata(),
        "notify_on_close": True,
        "title": {"type": "plain_text", "text": "Mood Check-in"},
        "submit": {"type": "plain_text", "text": "Submit"},
        "close": {"type": "plain_text", "text": "Skip"},
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"You selected *{pending.emoji}* - thanks for sharing!"
                }
            },
            {
                "type": "input",
                "block_id": CONTEXT_BLOCK_ID,
                "optional": True,
                "element": {
                    "type": "plain_text_input",
                    "action_id": CONTEXT_ACTION_ID,
                    "multiline": True,
                    "placeholder": {
                        "type": "plain_text",
                        "text": "Anything you'd like to add? (optional)"
                    }
                },
                "label": {"type": "plain_text", "text": "Additional context"}
            }
        ]
    }


def extract_context(view: Dict[str, Any]) -> Optional[str]:
    """Comment typed into the modal, or None when blank"""
    values = view.get("state", {}).get("values", {})
    value = values.get(CONTEXT_BLOCK_ID, {}).get(CONTEXT_ACTION_ID, {}).get("value")
    if not value or not value.strip():
        return None
    return value


def _context_suffix(context: Optional[str]) -> str:
    return f' - "{context}"' if context else ""


def build_completion_blocks(display_name: str, emoji: str) -> List[Dict[str, Any]]:
    """Replacement for the original prompt once the check-in is recorded"""
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"✅ *{display_name}* is feeling {emoji} today."
            }
        }
    ]


def completion_fallback_text(display_name: str, emoji: str) -> str:
    return f"Mood recorded: {display_name} - {emoji}"


def confirmation_text(display_name: str, emoji: str, context: Optional[str] = None) -> str:
    return f"✅ *{display_name}*, your mood has been logged: {emoji}{_context_suffix(context)}"


def announcement_text(display_name: str, emoji: str, context: Optional[str] = None,
                      anonymous: bool = False) -> str:
    if anonymous:
        return f"Someone is feeling {emoji} today"
    return f"*{display_name}* is feeling {emoji} today{_context_suffix(context)}"


def build_history_blocks(entries: List[Dict[str, Any]], reference_timezone: str = "Europe/London") -> List[Dict[str, Any]]:
    """/my-moods reply: recent entries plus their average score"""
    tz = ZoneInfo(reference_timezone)
    lines = []
    for entry in entries:
        recorded_at = entry.get("recorded_at")
        if isinstance(recorded_at, str):
            recorded_at = datetime.fromisoformat(recorded_at)
        if recorded_at.tzinfo is None:
            recorded_at = recorded_at.replace(tzinfo=timezone.utc)
        local = recorded_at.astimezone(tz)
        date = f"{local:%a} {local.day} {local:%b}"
        context = entry.get("additional_context")
        context_text = f' - _"{context}"_' if context else ""
        lines.append(f"• {date}: {entry['mood_emoji']}{context_text}")

    average = sum(entry["mood_score"] for entry in entries) / len(entries)
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*Your recent moods* (last {len(entries)} entries)\nAverage: {average:.1f}/5\n\n" + "\n".join(lines)
            }
        }
    ]
