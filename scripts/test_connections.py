#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the database, file storage and SMTP settings.
Usage: python scripts/test_connections.py
"""
import smtplib
import sys
sys.path.insert(0, '.')

from eduopps.core.config import get_settings
from eduopps.db.database import test_database_connection
from eduopps.db.mongodb import test_mongo_connection


def check_smtp(settings) -> bool:
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
            server.noop()
        return True
    except (smtplib.SMTPException, OSError) as e:
        print(f"    {e}")
        return False


def main():
    settings = get_settings()
    print("=" * 50)
    print("EDUCATIONAL OPPORTUNITIES - CONNECTION TEST")
    print("=" * 50)

    # Relational database
    print("\n[1] Testing database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_database_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    # File storage
    print(f"\n[2] Testing file storage ({settings.file_storage_backend})...")
    if settings.file_storage_backend == "gridfs":
        print(f"    URI: {settings.mongodb_uri}")
        print(f"    Database: {settings.mongodb_db}")
        if test_mongo_connection():
            print("    ✅ MongoDB GridFS: CONNECTED")
        else:
            print("    ❌ MongoDB GridFS: FAILED (uploads will be stored as metadata only)")
    else:
        print(f"    Upload dir: {settings.upload_dir}")

    # SMTP
    print("\n[3] Testing SMTP...")
    if settings.smtp_enabled:
        print(f"    Host: {settings.smtp_host}:{settings.smtp_port}")
        if check_smtp(settings):
            print("    ✅ SMTP: CONNECTED")
        else:
            print("    ❌ SMTP: FAILED")
    else:
        print("    ⚠️  SMTP: not configured (form e-mails will be skipped)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
