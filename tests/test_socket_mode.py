import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from slack_bolt.async_app import AsyncApp

from interfaces.slack.socket_mode import create_socket_mode_app, register_listeners
from models import MOODS, PendingCheckIn
from conftest import USER_ID


class RecordingApp:
    """Collects listeners the way AsyncApp's decorators register them"""

    def __init__(self):
        self.listeners = []

    def _register(self, kind, key):
        def decorator(func):
            self.listeners.append((kind, key, func))
            return func
        return decorator

    def action(self, constraints):
        return self._register("action", constraints)

    def view(self, constraints):
        return self._register("view", constraints)

    def view_closed(self, constraints):
        return self._register("view_closed", constraints)

    def command(self, command):
        return self._register("command", command)

    def listener(self, kind, key=None):
        matches = [func for k, c, func in self.listeners if k == kind and (key is None or c == key)]
        assert len(matches) == 1
        return matches[0]


@pytest.fixture
def recording_app(slack_interface):
    app = RecordingApp()
    register_listeners(app, slack_interface)
    return app


def test_registers_every_listener(recording_app):
    registered = sorted((kind, key) for kind, key, _ in recording_app.listeners if kind != "action")
    assert registered == [
        ("command", "/mood"),
        ("command", "/my-moods"),
        ("view", "mood_context_modal"),
        ("view_closed", "mood_context_modal"),
    ]

    (pattern,) = [key for kind, key, _ in recording_app.listeners if kind == "action"]
    for mood in MOODS:
        assert pattern.match(mood.action_id)
    assert not pattern.match("mood_")
    assert not pattern.match("home_refresh")


def test_mood_button_opens_modal(recording_app, mock_client):
    ack = AsyncMock()
    body = {
        "type": "block_actions",
        "trigger_id": "trigger-1",
        "user": {"id": USER_ID},
        "channel": {"id": "C1"},
        "message": {"ts": "T1"},
        "actions": [{"action_id": "mood_4", "value": json.dumps({"score": 4, "emoji": "🙂"})}],
    }
    asyncio.run(recording_app.listener("action")(ack=ack, body=body))

    ack.assert_awaited_once_with()
    view = mock_client.views_open.call_args.kwargs["view"]
    assert PendingCheckIn.from_metadata(view["private_metadata"]).score == 4


def test_modal_submission_records_entry(recording_app, mock_client, mood_db):
    ack = AsyncMock()
    pending = PendingCheckIn(score=2, emoji="☹️", channel_id="C1", message_ts="T1")
    body = {
        "type": "view_submission",
        "user": {"id": USER_ID},
        "team": {"id": "TEAM1"},
        "view": {
            "id": "V1",
            "callback_id": "mood_context_modal",
            "private_metadata": pending.to_metadata(),
            "state": {"values": {}},
        },
    }
    asyncio.run(recording_app.listener("view", "mood_context_modal")(ack=ack, body=body))

    ack.assert_awaited_once_with()
    entries = asyncio.run(mood_db.get_recent_entries(USER_ID))
    assert [(e["mood_score"], e["additional_context"]) for e in entries] == [(2, None)]
    mock_client.chat_update.assert_awaited_once()


def test_mood_command_acks_with_prompt(recording_app):
    ack = AsyncMock()
    command = {"command": "/mood", "user_id": USER_ID, "channel_id": "C1"}
    asyncio.run(recording_app.listener("command", "/mood")(ack=ack, command=command))

    reply = ack.call_args.args[0]
    assert reply["response_type"] == "ephemeral"
    assert len(reply["blocks"][1]["elements"]) == len(MOODS)


def test_create_socket_mode_app(config):
    async def build():
        return create_socket_mode_app(config)

    assert isinstance(asyncio.run(build()), AsyncApp)
