"""
Mood check-in data model

- Mood: the fixed score/emoji/button set
- PendingCheckIn: state carried through a modal's private_metadata
- MoodEntry: one persisted row of the mood_entries table
"""

import json
import uuid
import hashlib
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Tuple

MOOD_ACTION_PREFIX = "mood_"
MOOD_MODAL_CALLBACK_ID = "mood_context_modal"

# Submissions of the same message by the same user inside this window share a dedup key
DEDUP_BUCKET_SECONDS = 300


@dataclass(frozen=True)
class Mood:
    score: int
    emoji: str
    label: str

    @property
    def action_id(self) -> str:
        return f"{MOOD_ACTION_PREFIX}{self.score}"


MOODS: Tuple[Mood, ...] = (
    Mood(1, "😭", "Awful"),
    Mood(2, "☹️", "Not great"),
    Mood(3, "😐", "Okay"),
    Mood(4, "🙂", "Good"),
    Mood(5, "😄", "Great"),
)

MIN_SCORE = MOODS[0].score
MAX_SCORE = MOODS[-1].score

_MOODS_BY_SCORE = {mood.score: mood for mood in MOODS}
_MOODS_BY_ACTION = {mood.action_id: mood for mood in MOODS}


def mood_for_score(score: Any) -> Optional[Mood]:
    try:
        return _MOODS_BY_SCORE.get(int(score))
    except (TypeError, ValueError):
        return None


def mood_for_action(action_id: Optional[str]) -> Optional[Mood]:
    return _MOODS_BY_ACTION.get(action_id or "")


class InvalidCheckinTokenError(ValueError):
    """Raised when a modal's private_metadata cannot be turned into a PendingCheckIn"""


@dataclass
class PendingCheckIn:
    """Check-in state threaded from the button click to the modal resolution"""
    score: int
    emoji: str
    channel_id: Optional[str] = None
    message_ts: Optional[str] = None
    response_url: Optional[str] = None

    @classmethod
    def for_mood(cls, mood: Mood, channel_id: Optional[str] = None,
                 message_ts: Optional[str] = None, response_url: Optional[str] = None) -> "PendingCheckIn":
        return cls(
            score=mood.score,
            emoji=mood.emoji,
            channel_id=channel_id,
            message_ts=message_ts,
            response_url=response_url,
        )

    def to_metadata(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_metadata(cls, metadata: Optional[str]) -> "PendingCheckIn":
        """Decode private_metadata, re-deriving the emoji from the score"""
        try:
            data = json.loads(metadata or "")
        except json.JSONDecodeError as e:
            raise InvalidCheckinTokenError(f"private_metadata is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidCheckinTokenError("private_metadata is not an object")

        mood = mood_for_score(data.get("score"))
        if mood is None:
            raise InvalidCheckinTokenError(f"Unknown mood score: {data.get('score')!r}")

        return cls.for_mood(
            mood,
            channel_id=data.get("channel_id") or None,
            message_ts=data.get("message_ts") or None,
            response_url=data.get("response_url") or None,
        )

    @property
    def is_direct_message(self) -> bool:
        return bool(self.channel_id and self.channel_id.startswith("D"))


def make_dedup_key(user_id: str, view_id: Optional[str] = None,
                   message_ts: Optional[str] = None,
                   submitted_at: Optional[datetime] = None) -> str:
    """Key shared by redeliveries of the same modal resolution"""
    if view_id:
        raw = f"{user_id}:view:{view_id}"
    else:
        submitted_at = submitted_at or datetime.now(timezone.utc)
        bucket = int(submitted_at.timestamp()) // DEDUP_BUCKET_SECONDS
        raw = f"{user_id}:msg:{message_ts or '-'}:{bucket}"
    return hashlib.sha256(raw.encode()).hexdigest()


@dataclass
class MoodEntry:
    """One row of mood_entries"""
    slack_user_id: str
    mood_score: int
    mood_emoji: str
    slack_username: Optional[str] = None
    slack_display_name: Optional[str] = None
    additional_context: Optional[str] = None
    slack_team_id: Optional[str] = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    dedup_key: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        mood = mood_for_score(self.mood_score)
        if mood is None:
            raise ValueError(f"mood_score must be between {MIN_SCORE} and {MAX_SCORE}, got {self.mood_score!r}")
        if mood.emoji != self.mood_emoji:
            raise ValueError(f"mood_emoji {self.mood_emoji!r} does not match score {self.mood_score}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
