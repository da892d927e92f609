#!/usr/bin/env python3
"""
Run one reminder tick now (or at --at) without starting the API.

  cd backend && python scripts/run_reminder_tick.py
  cd backend && python scripts/run_reminder_tick.py --at 2025-03-01T13:05:00
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from dotenv import load_dotenv

load_dotenv(backend_dir / ".env")

from slotbook.deps import get_gateway, get_timezone
from slotbook.scheduler.reminder_job import run_reminder_dispatch_job


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--at", help="ISO datetime to treat as now (naive values use TIMEZONE)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    now = None
    if args.at:
        now = datetime.fromisoformat(args.at)
        if now.tzinfo is None:
            now = now.replace(tzinfo=get_timezone())

    summary = run_reminder_dispatch_job(now=now)
    # Let queued sends finish before exiting
    get_gateway().shutdown(wait=True)
    if summary is None:
        print("Tick skipped or failed; see log")
        return 1
    print(
        f"scanned={summary.scanned} completed={summary.completed} "
        f"dispatched={summary.dispatched} errors={summary.errors}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
