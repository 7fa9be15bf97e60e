#!/usr/bin/env python3
"""
Database Setup Script

Creates all tables from tpo_portal/db/schema.sql against the configured
DATABASE_URL and reports whether the store is reachable.

Usage: python scripts/init_db.py
"""
from tpo_portal.core.config import get_settings
from tpo_portal.db.store import create_store


def main():
    settings = get_settings()
    print("=" * 50)
    print("TPO PORTAL - DATABASE SETUP")
    print("=" * 50)

    store = create_store(settings)

    print(f"\n[1] Connecting to {store.engine.url.render_as_string(hide_password=True)} ...")
    if not store.ping():
        print("    ❌ Store: FAILED")
        return 1
    print("    ✅ Store: CONNECTED")

    print("\n[2] Creating tables...")
    store.init_schema()
    print("    ✅ Schema created")

    store.dispose()
    print("\n" + "=" * 50)
    print("Setup complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
