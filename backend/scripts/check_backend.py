#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from repo root or backend/:
  python backend/scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Copy from backend/.env.example and set DATABASE_URL, etc.")
    else:
        print("OK  .env exists")

    # 2) DB connection and reservations table
    try:
        from sqlalchemy import inspect, text

        from slotbook.db.session import engine
        from slotbook.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names())
        if missing:
            errors.append(f"Tables missing: {sorted(missing)}. Run: cd backend && alembic upgrade head")
            print("FAIL Tables missing:", sorted(missing))
        else:
            print("OK  Tables present")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 3) Settings that only matter in live mode
    try:
        from slotbook.config import settings
        from slotbook.core.slot_clock import resolve_timezone

        resolve_timezone(settings.timezone)
        print(f"OK  Timezone {settings.timezone}")
        if settings.notify_transport == "live":
            if not (settings.smtp_user and settings.smtp_password):
                errors.append("NOTIFY_TRANSPORT=live but SMTP_USER / SMTP_PASSWORD are not set")
            if not (settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_from_number):
                print("WARN Twilio not configured; SMS reminders will fail")
            if not (settings.apns_key_id and settings.apns_team_id and settings.apns_bundle_id):
                print("WARN APNs not configured; push reminders will fail")
        else:
            print("OK  NOTIFY_TRANSPORT=log (notifications are printed, not sent)")
    except Exception as e:
        errors.append(f"Settings: {e}")
        print("FAIL Settings:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from slotbook.main import app  # noqa: F401
        print("OK  App import (slotbook.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)
        print("\nFix the above, then run:")
        print("  cd backend && uvicorn slotbook.main:app --reload --host 0.0.0.0 --port 8000")
        return 1

    # 5) Port 8000
    try:
        import socket
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: cd backend && uvicorn slotbook.main:app --reload")
    return 0


if __name__ == "__main__":
    sys.exit(main())
