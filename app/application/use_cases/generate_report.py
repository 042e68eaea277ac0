"""ReportEngine — background report generation with poll-able state.

Each report name owns a small state machine:

    idle ──run()──▶ processing ──▶ completed
                        │
                        └────────▶ error

``completed`` and ``error`` go back to ``processing`` on the next ``run()``.
Work runs as an asyncio task on the caller's event loop and yields at file
boundaries (and every ``yield_every`` lines) so status reads stay responsive.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path

from app.application.ports.file_store import FileStore
from app.domain.entities.report_state import ReportMetrics, ReportState
from app.domain.errors import UnknownReportError
from app.domain.reports.aggregators import ReportAggregator, build_aggregator
from app.domain.reports.transaction import parse_line
from app.domain.value_objects.enums import ReportName, ReportStatus

try:
    import resource
except ImportError:  # Windows
    resource = None

logger = logging.getLogger(__name__)

REPORT_NAMES: list[str] = [name.value for name in ReportName]


def _max_rss() -> dict[str, int]:
    if resource is None:
        return {}
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports KiB, macOS bytes
    if sys.platform != "darwin":
        rss *= 1024
    return {"maxRss": rss}


class ReportEngine:
    """Runs the named reports in the background and tracks their state."""

    def __init__(
        self,
        file_store: FileStore,
        input_dir: str = "tmp",
        output_dir: str = "out",
        yield_every: int = 5000,
        aggregator_factory: Callable[[ReportName], ReportAggregator] = build_aggregator,
    ):
        self._files = file_store
        self._input_dir = input_dir
        self._output_dir = output_dir
        self._yield_every = max(1, yield_every)
        self._build = aggregator_factory

        self._states: dict[str, ReportState] = {name: ReportState() for name in REPORT_NAMES}
        self._metrics: dict[str, ReportMetrics] = {}
        # One writer per output file; overlapping runs queue up
        self._locks: dict[ReportName, asyncio.Lock] = {name: asyncio.Lock() for name in ReportName}
        self._tasks: set[asyncio.Task] = set()

    # ─── Queries ─────────────────────────────────────────────────────

    def state(self, name: str) -> ReportState:
        return self._states.get(name) or ReportState()

    def metrics(self, name: str) -> ReportMetrics | None:
        return self._metrics.get(name)

    def all_states(self) -> dict:
        return {
            "states": {name: s.to_dict() for name, s in self._states.items()},
            "metrics": {name: m.to_dict() for name, m in self._metrics.items()},
        }

    # ─── Commands ────────────────────────────────────────────────────

    def run(self, name: str) -> asyncio.Task:
        """Schedule the named report and return immediately.

        Must be called from inside a running event loop.

        Raises:
            UnknownReportError: name is not one of REPORT_NAMES.
        """
        try:
            report = ReportName(name)
        except ValueError:
            raise UnknownReportError(name, REPORT_NAMES) from None

        # A run already in flight keeps its progress; the new one resets on start
        if self.state(report.value).status != ReportStatus.PROCESSING:
            self._begin(report)

        task = asyncio.create_task(self._execute(report), name=f"report:{report.value}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Report %s scheduled", report.value)
        return task

    async def wait(self, name: str | None = None) -> None:
        """Wait for scheduled runs (of one report, or all) to finish."""
        tasks = [
            t for t in self._tasks
            if name is None or t.get_name() == f"report:{name}"
        ]
        if tasks:
            await asyncio.gather(*tasks)

    async def shutdown(self) -> None:
        """Cancel every outstanding run."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ─── Background body ─────────────────────────────────────────────

    def _begin(self, report: ReportName) -> ReportState:
        state = ReportState(
            status=ReportStatus.PROCESSING,
            progress=0,
            start_time=time.time(),
            records_processed=0,
        )
        self._states[report.value] = state
        return state

    async def _execute(self, report: ReportName) -> None:
        async with self._locks[report]:
            state = self._begin(report)
            started = time.perf_counter()
            logger.info("Report %s started", report.value)

            try:
                records, files = await self._aggregate(report)
            except Exception as e:
                logger.exception("Report %s failed", report.value)
                self._states[report.value] = ReportState(
                    status=ReportStatus.ERROR,
                    progress=0,
                    error=str(e),
                    end_time=time.time(),
                )
                return

            elapsed = round(time.perf_counter() - started, 2)
            self._states[report.value] = ReportState(
                status=ReportStatus.COMPLETED,
                progress=100,
                start_time=state.start_time,
                end_time=time.time(),
                duration=f"{elapsed:.2f}s",
                records_processed=records,
                total_records=records,
            )
            self._metrics[report.value] = ReportMetrics(
                total_execution_time=elapsed,
                records_processed=records,
                files_processed=files,
                memory_usage=_max_rss(),
                average_records_per_second=round(records / elapsed) if elapsed else 0,
            )
            logger.info(
                "Report %s completed: %d records from %d file(s) in %.2fs",
                report.value, records, files, elapsed,
            )

    async def _aggregate(self, report: ReportName) -> tuple[int, int]:
        aggregator = self._build(report)
        filenames = [
            f for f in await self._files.list_files(self._input_dir)
            if aggregator.accepts_file(f)
        ]
        total_files = len(filenames)
        records = 0

        for index, filename in enumerate(filenames, start=1):
            path = str(Path(self._input_dir) / filename)
            line_no = 0
            async for line in self._files.iter_lines(path):
                line_no += 1
                if line.strip() and aggregator.handle(parse_line(line)):
                    records += 1
                if line_no % self._yield_every == 0:
                    await asyncio.sleep(0)

            self._update_progress(report, int(index * 100 / total_files + 0.5), records)
            await asyncio.sleep(0)

        if aggregator.unparsed:
            logger.warning(
                "Report %s: %d row(s) with an unparsable date or amount",
                report.value, aggregator.unparsed,
            )

        output_path = str(Path(self._output_dir) / report.output_file)
        await self._files.write_atomic(output_path, aggregator.render())
        return records, total_files

    def _update_progress(self, report: ReportName, progress: int, records: int) -> None:
        state = self._states[report.value]
        state.progress = max(state.progress, progress)
        state.records_processed = records
