#!/usr/bin/env python
"""Run the data retention purge once from the command line.

Applies the same locked run as the scheduled Celery task and the admin
endpoint, records a ``retention.purge.executed`` audit entry and prints the
statistics.

Usage:
    python backend/scripts/purge_retention_data.py
    python backend/scripts/purge_retention_data.py --json

Exit codes:
    0: Run completed (rows may still have been skipped, see rowsFailed)
    1: Run failed
    2: Another run holds the lock
"""

import argparse
import json
import sys
from pathlib import Path

# Add backend/ to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from memberportal.audit.service import log_audit_event
from memberportal.config import get_settings
from memberportal.database import SessionLocal
from memberportal.errors import RetentionRunInProgressError
from memberportal.observability.logging_config import configure_logging
from memberportal.observability.request_id import generate_request_id, set_request_id
from memberportal.retention.service import run_retention_purge
from memberportal.retention.tasks import PURGE_EXECUTED_EVENT


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Run the member portal data retention purge once',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print statistics as JSON instead of a table'
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
    set_request_id(generate_request_id("retention-cli"))

    session = SessionLocal()
    try:
        stats = run_retention_purge(session)
        stats_payload = stats.model_dump(by_alias=True)

        log_audit_event(
            db=session,
            event=PURGE_EXECUTED_EVENT,
            details={"trigger": "cli", "stats": stats_payload},
        )

        if args.json:
            print(json.dumps(stats_payload, indent=2))
        else:
            print("Retention purge completed")
            for key, value in stats_payload.items():
                print(f"  {key:<28} {value}")

    except RetentionRunInProgressError as e:
        print(f"SKIPPED: {e.message}", file=sys.stderr)
        sys.exit(2)

    except Exception as e:
        print(f"ERROR: Retention purge failed: {e}", file=sys.stderr)
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
