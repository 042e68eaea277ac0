"""Report endpoints — trigger background generation and poll its state."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from app.application.use_cases.generate_report import REPORT_NAMES, ReportEngine
from app.domain.errors import UnknownReportError
from app.infrastructure.api.dependencies import get_report_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

STATUS_PATH = "/api/v1/reports/status"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("")
async def report_overview(engine: ReportEngine = Depends(get_report_engine)):
    """State of every report keyed by its output file name."""
    return {f"{name}.csv": engine.state(name).to_dict() for name in REPORT_NAMES}


@router.get("/status")
async def report_status(engine: ReportEngine = Depends(get_report_engine)):
    return engine.all_states()


@router.get("/status/{name}")
async def report_status_detail(name: str, engine: ReportEngine = Depends(get_report_engine)):
    metrics = engine.metrics(name)
    return {
        "state": engine.state(name).to_dict(),
        "metrics": metrics.to_dict() if metrics else None,
    }


@router.post("", status_code=202)
async def generate_reports(
    reports: str | None = Query(default=None, description="Comma-separated report names"),
    engine: ReportEngine = Depends(get_report_engine),
):
    """Start the requested reports (default: all) and return immediately."""
    requested = [r.strip() for r in reports.split(",")] if reports else list(REPORT_NAMES)

    for name in requested:
        if name in REPORT_NAMES:
            engine.run(name)
        else:
            logger.warning("Ignoring unknown report %r", name)

    return {
        "message": "Report generation started",
        "status": "processing",
        "reportsRequested": requested,
        "timestamp": _now_iso(),
        "checkStatusAt": STATUS_PATH,
    }


@router.post("/{name}", status_code=202)
async def generate_report(name: str, engine: ReportEngine = Depends(get_report_engine)):
    try:
        engine.run(name)
    except UnknownReportError as e:
        return {"error": "Invalid report type", "validTypes": e.details["validTypes"]}

    return {
        "message": f"{name} report generation started",
        "status": "processing",
        "timestamp": _now_iso(),
        "checkStatusAt": f"{STATUS_PATH}/{name}",
    }
