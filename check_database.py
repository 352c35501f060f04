#!/usr/bin/env python3
"""
Quick script to check if the mood database is working and show its contents
"""
import asyncio

from checkin_config import CheckinConfig
from database import MoodDatabase


async def check_database():
    config = CheckinConfig.from_env()
    db = MoodDatabase.from_config(config)

    if db.use_postgres:
        print(f"✅ DATABASE_URL found")
        print(f"   URL prefix: {config.database_url[:30]}...")
    else:
        print(f"ℹ️  DATABASE_URL not set, using SQLite at {config.sqlite_path}")

    try:
        print("\n🔄 Connecting...")
        total = await db.count_entries()
        print("✅ Connected successfully!")
        print(f"\n📊 Total mood entries: {total}")

        if total == 0:
            print("\n   No check-ins stored yet. Entries are added when users answer the mood prompt.")
            return

        print("\n📅 Daily summary:")
        for row in await db.get_daily_summary():
            print(f"\n   Date: {row['date']} (team {row['slack_team_id'] or 'N/A'})")
            print(f"   Responses: {row['total_responses']}, average mood: {row['avg_mood']}")
            print(f"   Positive: {row['positive_count']}, negative: {row['negative_count']}")

        print("\n✅ Database check complete!")

    except Exception as e:
        print(f"\n❌ Error connecting to database: {e}")
        print("\n   This might mean:")
        print("   - The DATABASE_URL is incorrect")
        print("   - The database service is not running")
        print("   - There's a network issue")
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(check_database())
