"""Reset database to empty state.

Clears all marketplace tables (assignments, notifications, chat, favorites,
orders, products, users) and flushes Redis (sessions, locks, confirmation
tokens, rate limit windows).

Usage:
    uv run python -m scripts.reset_db
"""

import asyncio

from sqlalchemy import text

from yafoy.core.database import async_session_maker, engine
from yafoy.core.redis import close_redis, get_redis

# Delete in correct order due to foreign key constraints
TABLES = [
    "client_organizer_assignments",
    "notifications",
    "chat_messages",
    "chat_room_members",
    "chat_rooms",
    "favorites",
    "orders",
    "products",
    "users",
]


async def reset_database():
    """Clear all data from the database."""
    print("=" * 60)
    print("Resetting database to empty state...")
    print("=" * 60)

    async with async_session_maker() as session:
        for table in TABLES:
            result = await session.execute(text(f"DELETE FROM {table}"))
            print(f"  Deleted {result.rowcount} rows from {table}")

        await session.commit()
        print("\nDatabase cleared successfully!")


async def reset_redis():
    """Clear all Redis data."""
    print("\nResetting Redis...")

    try:
        redis = await get_redis()
        await redis.flushdb()
        print("  Redis flushed successfully!")
    except Exception as e:
        print(f"  Warning: Could not clear Redis: {e}")
        print("  (This is OK if Redis is not running locally)")
    finally:
        await close_redis()


async def main():
    await reset_database()
    await reset_redis()

    print("\n" + "=" * 60)
    print("Reset complete!")
    print("=" * 60)
    print("\nTo re-seed the database, run:")
    print("  uv run python -m scripts.seed_data")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
