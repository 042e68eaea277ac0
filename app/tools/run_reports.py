"""Generate ledger reports from the command line.

Usage:
    python -m app.tools.run_reports
    python -m app.tools.run_reports --reports accounts,fs
    python -m app.tools.run_reports --input tmp --output out
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from app.adapters.filesystem.local_file_store import LocalFileStore
from app.application.use_cases.generate_report import REPORT_NAMES, ReportEngine
from app.config import settings
from app.domain.value_objects.enums import ReportStatus

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def run_reports(names: list[str], input_dir: str, output_dir: str) -> dict[str, dict]:
    """Run the named reports to completion. Returns final state per report."""
    engine = ReportEngine(
        file_store=LocalFileStore(encoding=settings.reports_encoding),
        input_dir=input_dir,
        output_dir=output_dir,
        yield_every=settings.reports_yield_every,
    )
    for name in names:
        engine.run(name)
    await engine.wait()
    return {name: engine.state(name).to_dict() for name in names}


def main():
    parser = argparse.ArgumentParser(description="Generate ledger reports")
    parser.add_argument(
        "--reports", type=str, default=",".join(REPORT_NAMES),
        help=f"Comma-separated report names (default: {','.join(REPORT_NAMES)})",
    )
    parser.add_argument(
        "--input", type=str, default=settings.reports_input_dir,
        help="Directory containing transaction CSV files",
    )
    parser.add_argument(
        "--output", type=str, default=settings.reports_output_dir,
        help="Directory the reports are written to",
    )
    args = parser.parse_args()

    names = [n.strip() for n in args.reports.split(",") if n.strip()]
    unknown = [n for n in names if n not in REPORT_NAMES]
    if unknown:
        logger.error("Unknown report(s): %s (valid: %s)", unknown, REPORT_NAMES)
        sys.exit(2)

    states = asyncio.run(run_reports(names, args.input, args.output))
    print(json.dumps(states, indent=2))

    if any(s["status"] == ReportStatus.ERROR.value for s in states.values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
