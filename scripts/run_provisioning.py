#!/usr/bin/env python3
"""
Run one provisioning pass from the command line.

Reads the same settings as the API (environment variables / .env), processes every
eligible work item once and prints the run summary as JSON.

Usage:
    python scripts/run_provisioning.py
    python scripts/run_provisioning.py --log-level DEBUG
    python scripts/run_provisioning.py --script-path ./sql/CreateProject.sql

Exit codes:
    0  run completed (or skipped) with no failed work items
    1  at least one work item failed
    2  the work items could not be read
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
script_dir = Path(__file__).parent.absolute()
project_root = script_dir.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from loguru import logger  # noqa: E402

from tenantdb_api.monitoring.logger import configure_logger  # noqa: E402
from tenantdb_api.settings import Settings  # noqa: E402
from tenantdb_api.workflow.db.pool import ControlDBPool  # noqa: E402
from tenantdb_api.workflow.exceptions import WorkItemSourceError  # noqa: E402
from tenantdb_api.workflow.orchestrator.factory import create_orchestrator  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision databases for eligible work items")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--package-path", default=None, help="Override PACKAGE_PATH")
    parser.add_argument("--script-path", default=None, help="Override SCRIPT_PATH")
    return parser.parse_args(argv)


async def run_once(settings: Settings) -> int:
    if not settings.control_db_connection_string:
        logger.error("CONTROL_DB_CONNECTION_STRING is not set - nothing to read work items from")
        return 2

    pool = ControlDBPool(settings.control_db_connection_string)
    await pool.initialize()
    try:
        orchestrator = create_orchestrator(settings, pool)
        try:
            summary = await orchestrator.run()
        except WorkItemSourceError as e:
            logger.error(f"Provisioning run aborted: {e}")
            return 2
    finally:
        await pool.close()

    print(summary.model_dump_json(indent=2))
    return 1 if summary.failed else 0


def main(argv=None) -> int:
    args = parse_args(argv)
    overrides = {
        key: value
        for key, value in {
            "log_level": args.log_level,
            "package_path": args.package_path,
            "script_path": args.script_path,
        }.items()
        if value is not None
    }
    settings = Settings(**overrides)
    configure_logger(log_level=settings.log_level)
    return asyncio.run(run_once(settings))


if __name__ == "__main__":
    sys.exit(main())
