#!/usr/bin/env python3
"""
Database Setup Script

Creates the supplier and article tables in the database named by DATABASE_URL
(a local SQLite file when unset) and validates the connection.

Usage:
    python scripts/setup_database.py [--reset]
"""

import sys

from entity_resolution.database.connection import DATABASE_URL, check_connection, get_engine
from entity_resolution.database.models import create_all_tables, drop_all_tables


def setup_database(reset: bool = False) -> bool:
    print(f"🔌 Connecting to {DATABASE_URL.split('@')[-1]}...")
    engine = get_engine()
    if not check_connection(engine):
        print("❌ Database connection failed")
        return False

    if reset:
        print("🗑️  Dropping existing tables...")
        drop_all_tables(engine)

    print("📋 Creating tables...")
    create_all_tables(engine)
    print("✅ Database ready")
    return True


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create the record store tables")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    if not setup_database(reset=args.reset):
        sys.exit(1)
