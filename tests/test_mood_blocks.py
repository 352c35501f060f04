import json
from datetime import datetime, timezone

import pytest

from interfaces.slack.formatters.mood_blocks import (
    get_greeting, build_mood_message, build_mood_modal, extract_context,
    build_history_blocks, confirmation_text, announcement_text
)
from models import MOODS, PendingCheckIn


@pytest.mark.parametrize("utc_hour,expected", [
    (6, "Good morning"),      # 07:00 BST
    (10, "Good morning"),     # 11:00 BST
    (11, "Good afternoon"),   # 12:00 BST
    (16, "Good afternoon"),   # 17:00 BST
    (17, "Good evening"),     # 18:00 BST
    (22, "Good evening"),
])
def test_greeting_follows_london_time(utc_hour, expected):
    now = datetime(2026, 10, 19, utc_hour, 0, tzinfo=timezone.utc)
    assert get_greeting(now, "Europe/London") == expected


def test_greeting_after_clocks_go_back():
    # 11:30 UTC is 11:30 GMT in November
    assert get_greeting(datetime(2026, 11, 2, 11, 30, tzinfo=timezone.utc)) == "Good morning"


def test_prompt_has_one_button_per_mood():
    blocks = build_mood_message("Good morning")
    assert blocks[0]["text"]["text"] == "👋 *Good morning!* How are you feeling today?"

    buttons = blocks[1]["elements"]
    assert len(buttons) == 5
    for button, mood in zip(buttons, MOODS):
        assert button["action_id"] == f"mood_{mood.score}"
        assert button["text"]["text"] == mood.emoji
        assert json.loads(button["value"]) == {"score": mood.score, "emoji": mood.emoji}


def test_modal_carries_pending_checkin():
    pending = PendingCheckIn(score=2, emoji="☹️", channel_id="C1", message_ts="T1")
    view = build_mood_modal(pending)

    assert view["notify_on_close"] is True
    assert view["close"]["text"] == "Skip"
    assert view["blocks"][1]["optional"] is True
    assert view["blocks"][1]["element"]["multiline"] is True
    assert PendingCheckIn.from_metadata(view["private_metadata"]) == pending


@pytest.mark.parametrize("value,expected", [
    ("  tired\n", "  tired\n"),
    ("tired", "tired"),
    ("   ", None),
    ("", None),
    (None, None),
])
def test_extract_context(value, expected):
    view = {"state": {"values": {"context_block": {"context_input": {"value": value}}}}}
    assert extract_context(view) == expected


def test_extract_context_without_state():
    assert extract_context({}) is None


def test_confirmation_and_announcement_texts():
    assert confirmation_text("Sam", "🙂") == "✅ *Sam*, your mood has been logged: 🙂"
    assert confirmation_text("Sam", "🙂", "coffee") == '✅ *Sam*, your mood has been logged: 🙂 - "coffee"'
    assert announcement_text("Sam", "🙂", "coffee") == '*Sam* is feeling 🙂 today - "coffee"'
    assert announcement_text("Sam", "🙂", "coffee", anonymous=True) == "Someone is feeling 🙂 today"


def test_history_blocks():
    entries = [
        {"mood_score": 5, "mood_emoji": "😄", "additional_context": "shipped",
         "recorded_at": "2026-10-19T09:00:00+00:00"},
        {"mood_score": 2, "mood_emoji": "☹️", "additional_context": None,
         "recorded_at": datetime(2026, 10, 16, 23, 30)},
    ]
    text = build_history_blocks(entries)[0]["text"]["text"]

    assert text.startswith("*Your recent moods* (last 2 entries)\nAverage: 3.5/5\n\n")
    assert '• Mon 19 Oct: 😄 - _"shipped"_' in text
    assert "• Sat 17 Oct: ☹️" in text


def test_history_dates_are_not_zero_padded():
    entries = [{"mood_score": 4, "mood_emoji": "🙂", "additional_context": None,
                "recorded_at": "2026-11-02T10:00:00+00:00"}]
    text = build_history_blocks(entries)[0]["text"]["text"]
    assert "• Mon 2 Nov: 🙂" in text
