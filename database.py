"""
Database module for storing mood check-in entries
Supports both SQLite (development) and PostgreSQL (production)
"""
import sqlite3
import asyncio
import logging
import uuid
from typing import Optional, Dict, Any, List

import asyncpg

from models import MoodEntry

logger = logging.getLogger(__name__)

SQLITE_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS mood_entries (
        id TEXT PRIMARY KEY,
        slack_user_id TEXT NOT NULL,
        slack_username TEXT,
        slack_display_name TEXT,
        mood_score INTEGER NOT NULL CHECK (mood_score >= 1 AND mood_score <= 5),
        mood_emoji TEXT NOT NULL,
        additional_context TEXT,
        recorded_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        slack_team_id TEXT,
        dedup_key TEXT UNIQUE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_mood_entries_user_date
    ON mood_entries (slack_user_id, recorded_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_mood_entries_team_date
    ON mood_entries (slack_team_id, recorded_at DESC)
    """,
    """
    CREATE VIEW IF NOT EXISTS mood_daily_summary AS
    SELECT
        DATE(recorded_at) AS date,
        slack_team_id,
        COUNT(*) AS total_responses,
        ROUND(AVG(mood_score), 2) AS avg_mood,
        SUM(CASE WHEN mood_score >= 4 THEN 1 ELSE 0 END) AS positive_count,
        SUM(CASE WHEN mood_score <= 2 THEN 1 ELSE 0 END) AS negative_count
    FROM mood_entries
    GROUP BY DATE(recorded_at), slack_team_id
    """,
]

POSTGRES_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS mood_entries (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        slack_user_id TEXT NOT NULL,
        slack_username TEXT,
        slack_display_name TEXT,
        mood_score INTEGER NOT NULL CHECK (mood_score >= 1 AND mood_score <= 5),
        mood_emoji TEXT NOT NULL,
        additional_context TEXT,
        recorded_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        slack_team_id TEXT,
        dedup_key TEXT UNIQUE
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_mood_entries_user_date
    ON mood_entries (slack_user_id, recorded_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_mood_entries_team_date
    ON mood_entries (slack_team_id, recorded_at DESC)
    """,
    """
    CREATE OR REPLACE VIEW mood_daily_summary AS
    SELECT
        DATE(recorded_at) AS date,
        slack_team_id,
        COUNT(*) AS total_responses,
        ROUND(AVG(mood_score)::numeric, 2) AS avg_mood,
        COUNT(*) FILTER (WHERE mood_score >= 4) AS positive_count,
        COUNT(*) FILTER (WHERE mood_score <= 2) AS negative_count
    FROM mood_entries
    GROUP BY DATE(recorded_at), slack_team_id
    """,
]

ENTRY_COLUMNS = "id, slack_user_id, slack_username, slack_display_name, mood_score, mood_emoji, additional_context, recorded_at, created_at, slack_team_id"


class MoodDatabase:
    def __init__(self, db_path: str = "mood_entries.db", db_url: Optional[str] = None):
        self.db_path = db_path
        self.db_url = db_url
        self.use_postgres = bool(db_url)
        self.pool = None
        self._initialized = False

    @classmethod
    def from_config(cls, config) -> "MoodDatabase":
        return cls(db_path=config.sqlite_path, db_url=config.database_url)

    async def initialize(self):
        """Create the schema on first use"""
        if self._initialized:
            return
        if self.use_postgres:
            await self._init_postgres()
        else:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, self._init_sqlite)
        self._initialized = True

    def _connect_sqlite(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_sqlite(self):
        """Initialize SQLite database and create tables if they don't exist"""
        conn = self._connect_sqlite()
        try:
            for statement in SQLITE_SCHEMA:
                conn.execute(statement)
            conn.commit()
        finally:
            conn.close()
        logger.info(f"SQLite database initialized at {self.db_path}")

    async def _init_postgres(self):
        """Initialize PostgreSQL pool and create tables if they don't exist"""
        # Convert DATABASE_URL to asyncpg format if needed (for Heroku)
        db_url = self.db_url
        if db_url.startswith('postgres://'):
            db_url = db_url.replace('postgres://', 'postgresql://', 1)

        self.pool = await asyncpg.create_pool(db_url, min_size=1, max_size=10)

        async with self.pool.acquire() as conn:
            for statement in POSTGRES_SCHEMA:
                await conn.execute(statement)

        logger.info("PostgreSQL database initialized")

    # ========================= MOOD ENTRIES =========================

    async def insert_mood_entry(self, entry: MoodEntry) -> bool:
        """Insert one entry. Returns False when an entry with the same dedup key already exists."""
        await self.initialize()
        if self.use_postgres:
            return await self._insert_postgres(entry)
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._insert_sqlite, entry)

    def _insert_sqlite(self, entry: MoodEntry) -> bool:
        conn = self._connect_sqlite()
        try:
            cursor = conn.execute("""
                INSERT INTO mood_entries (id, slack_user_id, slack_username, slack_display_name,
                                          mood_score, mood_emoji, additional_context, recorded_at,
                                          slack_team_id, dedup_key)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(dedup_key) DO NOTHING
            """, (entry.id, entry.slack_user_id, entry.slack_username, entry.slack_display_name,
                  entry.mood_score, entry.mood_emoji, entry.additional_context,
                  entry.recorded_at.isoformat(), entry.slack_team_id, entry.dedup_key))
            conn.commit()
            inserted = cursor.rowcount > 0
        finally:
            conn.close()

        if inserted:
            logger.info(f"Saved mood entry {entry.id} for user {entry.slack_user_id} to SQLite database")
        return inserted

    async def _insert_postgres(self, entry: MoodEntry) -> bool:
        async with self.pool.acquire() as conn:
            inserted_id = await conn.fetchval("""
                INSERT INTO mood_entries (id, slack_user_id, slack_username, slack_display_name,
                                          mood_score, mood_emoji, additional_context, recorded_at,
                                          slack_team_id, dedup_key)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                ON CONFLICT (dedup_key) DO NOTHING
                RETURNING id
            """, uuid.UUID(entry.id), entry.slack_user_id, entry.slack_username, entry.slack_display_name,
                entry.mood_score, entry.mood_emoji, entry.additional_context,
                entry.recorded_at, entry.slack_team_id, entry.dedup_key)

        if inserted_id is not None:
            logger.info(f"Saved mood entry {entry.id} for user {entry.slack_user_id} to PostgreSQL database")
        return inserted_id is not None

    async def get_recent_entries(self, user_id: str, limit: int = 7) -> List[Dict[str, Any]]:
        """Latest entries for one user, newest first"""
        await self.initialize()
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(f"""
                    SELECT {ENTRY_COLUMNS} FROM mood_entries
                    WHERE slack_user_id = $1
                    ORDER BY recorded_at DESC
                    LIMIT $2
                """, user_id, limit)
            return [self._normalize_row(dict(row)) for row in rows]

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._get_recent_sqlite, user_id, limit)

    def _get_recent_sqlite(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        conn = self._connect_sqlite()
        try:
            rows = conn.execute(f"""
                SELECT {ENTRY_COLUMNS} FROM mood_entries
                WHERE slack_user_id = ?
                ORDER BY recorded_at DESC
                LIMIT ?
            """, (user_id, limit)).fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]

    async def get_daily_summary(self, team_id: Optional[str] = None, limit: int = 14) -> List[Dict[str, Any]]:
        """Rows of the mood_daily_summary view, newest day first"""
        await self.initialize()
        if self.use_postgres:
            query = "SELECT * FROM mood_daily_summary"
            args: List[Any] = []
            if team_id:
                query += " WHERE slack_team_id = $1"
                args.append(team_id)
            query += f" ORDER BY date DESC LIMIT ${len(args) + 1}"
            args.append(limit)
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
            return [self._normalize_row(dict(row)) for row in rows]

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._get_daily_summary_sqlite, team_id, limit)

    def _get_daily_summary_sqlite(self, team_id: Optional[str], limit: int) -> List[Dict[str, Any]]:
        query = "SELECT * FROM mood_daily_summary"
        params: List[Any] = []
        if team_id:
            query += " WHERE slack_team_id = ?"
            params.append(team_id)
        query += " ORDER BY date DESC LIMIT ?"
        params.append(limit)

        conn = self._connect_sqlite()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
        return [dict(row) for row in rows]

    async def count_entries(self) -> int:
        await self.initialize()
        if self.use_postgres:
            async with self.pool.acquire() as conn:
                return await conn.fetchval("SELECT COUNT(*) FROM mood_entries")

        def _count() -> int:
            conn = self._connect_sqlite()
            try:
                return conn.execute("SELECT COUNT(*) FROM mood_entries").fetchone()[0]
            finally:
                conn.close()

        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, _count)

    @staticmethod
    def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert asyncpg types (UUID, Decimal) to plain values"""
        if isinstance(row.get('id'), uuid.UUID):
            row['id'] = str(row['id'])
        if row.get('avg_mood') is not None:
            row['avg_mood'] = float(row['avg_mood'])
        return row

    async def close(self):
        """Close database connections"""
        if self.use_postgres and self.pool:
            await self.pool.close()
            self.pool = None
            self._initialized = False

