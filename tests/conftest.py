import sys
import json
import time
from pathlib import Path
from unittest.mock import AsyncMock
from urllib.parse import urlencode

import httpx
import pytest
from slack_sdk.signature import SignatureVerifier

# Ensure the repository root is on the import path so tests can `import database`,
# `import interfaces...` regardless of the working directory.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from checkin_config import CheckinConfig  # noqa: E402
from database import MoodDatabase  # noqa: E402
from interfaces.slack.core_slack_orchestration import SlackInterface  # noqa: E402

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
CRON_SECRET = "cron-secret"
USER_ID = "U0TESTUSER"


def sign(body: str, timestamp: int = None, secret: str = SIGNING_SECRET) -> dict:
    """Headers Slack would send for this body"""
    timestamp = str(int(time.time()) if timestamp is None else timestamp)
    signature = SignatureVerifier(secret).generate_signature(timestamp=timestamp, body=body)
    return {
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": signature,
    }


def form_body(fields: dict) -> str:
    return urlencode(fields)


def interaction_body(payload: dict) -> str:
    return urlencode({"payload": json.dumps(payload)})


def post_signed(client, body: str, content_type: str = "application/x-www-form-urlencoded", **sign_kwargs):
    headers = {"Content-Type": content_type, **sign(body, **sign_kwargs)}
    return client.post("/slack/events", content=body.encode(), headers=headers)


@pytest.fixture
def config():
    return CheckinConfig(
        slack_bot_token="xoxb-test",
        slack_signing_secret=SIGNING_SECRET,
        cron_secret=CRON_SECRET,
    )


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.users_info.return_value = {
        "ok": True,
        "user": {
            "id": USER_ID,
            "name": "testuser",
            "real_name": "Test User",
            "is_bot": False,
            "deleted": False,
            "profile": {"display_name": "Tester", "real_name": "Test User"}
        }
    }
    client.views_open.return_value = {"ok": True, "view": {"id": "V0MODAL"}}
    client.chat_update.return_value = {"ok": True}
    client.chat_postMessage.return_value = {"ok": True, "ts": "1700000000.000100"}
    client.chat_postEphemeral.return_value = {"ok": True}
    return client


@pytest.fixture
def mood_db(tmp_path):
    return MoodDatabase(db_path=str(tmp_path / "moods.db"))


@pytest.fixture
def response_url_calls():
    return []


@pytest.fixture
def http_client_factory(response_url_calls):
    def handler(request: httpx.Request) -> httpx.Response:
        response_url_calls.append((str(request.url), json.loads(request.content)))
        return httpx.Response(200, text="ok")

    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def slack_interface(config, mock_client, mood_db, http_client_factory):
    return SlackInterface(
        config,
        slack_client=mock_client,
        mood_db=mood_db,
        http_client_factory=http_client_factory
    )


@pytest.fixture
def client(slack_interface):
    from fastapi.testclient import TestClient
    from slack_webhook_server import create_app

    return TestClient(create_app(slack_interface))
