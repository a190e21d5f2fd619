#!/usr/bin/env python3
"""
Script to verify that the goal tracker tables exist in the configured database
"""
import asyncio
import sys
import platform
from sqlalchemy import inspect, text
from goaltracker.core.database import engine

EXPECTED_TABLES = ("goals", "user_profiles")

async def verify_database():
    """Check tables and migration status"""

    try:
        async with engine.begin() as conn:
            print(f"Connected to {engine.url.get_backend_name()} database")

            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

            print("\nTables in your database:")
            for table in sorted(tables):
                print(f"   {table}")

            missing = [t for t in EXPECTED_TABLES if t not in tables]
            if missing:
                print(f"\nMissing tables: {', '.join(missing)} (run `alembic upgrade head`)")
                sys.exit(1)

            # Check alembic version
            print("\nMigration status:")
            if "alembic_version" in tables:
                result = await conn.execute(text("SELECT version_num FROM alembic_version;"))
                version = result.fetchone()
                print(f"   Current Alembic version: {version[0] if version else 'none'}")
            else:
                print("   Tables were created without Alembic")

            print("\nTable statistics:")
            for table in EXPECTED_TABLES:
                result = await conn.execute(text(f"SELECT COUNT(*) FROM {table};"))
                print(f"   {table}: {result.scalar_one()} rows")

        print("\nDatabase verification completed successfully!")

    finally:
        # Properly dispose of the engine
        await engine.dispose()

def main():
    """Main function with proper asyncio handling"""
    if platform.system() == 'Windows':
        # Set the event loop policy for Windows
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    try:
        asyncio.run(verify_database())
    except Exception as e:
        print(f"Error running verification: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
