#!/usr/bin/env python3
# scripts/check_db.py - Check database connection and status
import sys
import os

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from schooldesk.core.config import settings
from schooldesk.core.db import build_engine
from schooldesk.models import Base


def check_database_connection():
    """Check if database connection is working"""
    url = settings.DATABASE_URL

    print("Database Connection Check")
    print("=" * 40)
    print(f"Database: {url.split('@')[-1] if '@' in url else url}")
    print("-" * 40)

    engine = build_engine(url)
    try:
        with engine.connect() as conn:
            if engine.dialect.name == "postgresql":
                version = conn.execute(text("SELECT version()")).scalar_one()
            else:
                version = "SQLite " + conn.execute(text("SELECT sqlite_version()")).scalar_one()
        print("✅ Connection successful!")
        print(f"Server: {version[:50]}")

        existing = set(inspect(engine).get_table_names())
        expected = set(Base.metadata.tables)
        print(f"Tables in database: {len(existing)}")

        if not existing:
            print("📝 Database is empty - run `alembic upgrade head`")
        else:
            for table in sorted(existing):
                print(f"  - {table}")
            missing = expected - existing
            if missing:
                print(f"⚠️  Missing tables: {', '.join(sorted(missing))}")
                return False
        return True

    except SQLAlchemyError as e:
        print(f"❌ Connection failed: {e}")
        print("\nTroubleshooting:")
        print("1. Check DATABASE_URL in your .env file")
        print("2. For PostgreSQL, check the server is running: sudo systemctl status postgresql")
        print("3. Ensure the database and user exist")
        return False
    finally:
        engine.dispose()


if __name__ == "__main__":
    if check_database_connection():
        sys.exit(0)
    else:
        sys.exit(1)
