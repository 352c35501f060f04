"""
Check-in Configuration

Loads deployment settings for the mood check-in bot:
- Secrets and channel ids from environment variables (.env.local supported)
- Tunables (timezone, greeting hours, page sizes) from config/checkin.yaml
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv('.env.local', override=True)

logger = logging.getLogger(__name__)

CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'config', 'checkin.yaml')


def _env_flag(name: str) -> bool:
    return os.getenv(name, '').strip().lower() == 'true'


@dataclass
class CheckinConfig:
    """Configuration for the check-in bot"""
    slack_bot_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    slack_app_token: Optional[str] = None
    cron_secret: Optional[str] = None

    # Channel whose members get the daily DM, also used for announcements
    mood_channel_id: Optional[str] = None
    mood_user_ids: List[str] = field(default_factory=list)
    skip_weekends: bool = False
    announce_anonymously: bool = False

    database_url: Optional[str] = None
    sqlite_path: str = "mood_entries.db"

    # Tunables (config/checkin.yaml)
    reference_timezone: str = "Europe/London"
    morning_until: int = 12
    afternoon_until: int = 18
    members_page_size: int = 200
    recent_entries_limit: int = 7

    @classmethod
    def from_env(cls, config_path: Optional[str] = None) -> "CheckinConfig":
        """Build configuration from environment variables and the YAML tunables"""
        user_ids = os.getenv('MOOD_USER_IDS', '')
        config = cls(
            slack_bot_token=os.getenv('SLACK_BOT_TOKEN'),
            slack_signing_secret=os.getenv('SLACK_SIGNING_SECRET'),
            slack_app_token=os.getenv('SLACK_APP_TOKEN'),
            cron_secret=os.getenv('CRON_SECRET'),
            mood_channel_id=os.getenv('MOOD_CHANNEL_ID') or None,
            mood_user_ids=[u.strip() for u in user_ids.split(',') if u.strip()],
            skip_weekends=_env_flag('SKIP_WEEKENDS'),
            announce_anonymously=_env_flag('ANNOUNCE_ANONYMOUSLY'),
            database_url=os.getenv('DATABASE_URL') or None,
            sqlite_path=os.getenv('MOOD_DB_PATH', 'mood_entries.db'),
        )
        config.apply_yaml(config_path or CONFIG_PATH)
        return config

    def apply_yaml(self, config_path: str) -> None:
        """Override tunables with values from a YAML file, keeping defaults on failure"""
        try:
            with open(config_path, 'r') as f:
                yaml_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load check-in config from YAML: {e}. Using defaults.")
            return

        greeting = yaml_config.get('greeting', {}) or {}
        self.reference_timezone = yaml_config.get('reference_timezone', self.reference_timezone)
        self.morning_until = int(greeting.get('morning_until', self.morning_until))
        self.afternoon_until = int(greeting.get('afternoon_until', self.afternoon_until))
        self.members_page_size = int(yaml_config.get('members_page_size', self.members_page_size))
        self.recent_entries_limit = int(yaml_config.get('recent_entries_limit', self.recent_entries_limit))
