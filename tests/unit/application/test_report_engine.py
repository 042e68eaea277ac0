"""Tests for ReportEngine: background runs, state tracking, output files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from app.adapters.filesystem.local_file_store import LocalFileStore
from app.application.ports.file_store import FileStore
from app.application.use_cases.generate_report import REPORT_NAMES, ReportEngine
from app.domain.errors import UnknownReportError
from app.domain.value_objects.enums import ReportStatus

# ─── In-memory fake ─────────────────────────────────────────────────


class FakeFileStore(FileStore):
    """Files live in a dict; records what the engine observes while reading."""

    def __init__(self, files: dict[str, list[str]], engine_ref: list | None = None):
        self.files = files
        self.written: dict[str, str] = {}
        self.progress_seen: list[int] = []
        self.active_readers = 0
        self.max_active_readers = 0
        self._engine_ref = engine_ref if engine_ref is not None else []

    async def list_files(self, directory, suffix=".csv"):
        return sorted(name for name in self.files if name.endswith(suffix))

    async def iter_lines(self, path):
        if self._engine_ref:
            self.progress_seen.append(self._engine_ref[0].state("accounts").progress)
        self.active_readers += 1
        self.max_active_readers = max(self.max_active_readers, self.active_readers)
        try:
            for line in self.files[Path(path).name]:
                yield line
                await asyncio.sleep(0)
        finally:
            self.active_readers -= 1

    async def write_atomic(self, path, content):
        self.written[path] = content


# ─── Helpers ────────────────────────────────────────────────────────

LEDGER = [
    "2023-01-15,Cash,Opening,100,0",
    "2023-02-01,Rent Expense,Feb rent,40,0",
    "2023-02-01,Cash,Feb rent,0,40",
]


def _engine(tmp_path: Path, files: dict[str, str] | None = None) -> tuple[ReportEngine, Path, Path]:
    input_dir = tmp_path / "tmp"
    output_dir = tmp_path / "out"
    input_dir.mkdir()
    for name, content in (files or {}).items():
        (input_dir / name).write_text(content, encoding="utf-8")
    engine = ReportEngine(
        file_store=LocalFileStore(),
        input_dir=str(input_dir),
        output_dir=str(output_dir),
        yield_every=2,
    )
    return engine, input_dir, output_dir


# ─── Output ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_accounts_report_written(tmp_path):
    engine, _, out = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER) + "\n"})

    engine.run("accounts")
    await engine.wait()

    assert (out / "accounts.csv").read_text() == "Account,Balance\nCash,60.00\nRent Expense,40.00"
    state = engine.state("accounts")
    assert state.status == ReportStatus.COMPLETED
    assert state.progress == 100
    assert state.records_processed == 3
    assert state.total_records == 3
    assert state.duration.endswith("s")


@pytest.mark.asyncio
async def test_yearly_report_across_files(tmp_path):
    engine, _, out = _engine(tmp_path, {
        "a.csv": "2022-05-01,Cash,x,10,0\n2023-01-01,Cash,x,5,0\n",
        "b.csv": "2023-06-01,Cash,x,0,2\r\n\r\n2023-06-01,Inventory,x,7,0\r\n",
    })

    engine.run("yearly")
    await engine.wait("yearly")

    assert (out / "yearly.csv").read_text() == "Financial Year,Cash Balance\n2022,10.00\n2023,3.00"
    assert engine.state("yearly").records_processed == 3


@pytest.mark.asyncio
async def test_fs_report_balances(tmp_path):
    engine, _, out = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER)})

    engine.run("fs")
    await engine.wait()

    lines = (out / "fs.csv").read_text().split("\n")
    assert lines[0] == "Basic Financial Statement"
    assert "Cash,60.00" in lines
    assert "Rent Expense,40.00" in lines
    assert "Net Income,-40.00" in lines


@pytest.mark.asyncio
async def test_empty_input_dir_yields_header_only(tmp_path):
    engine, _, out = _engine(tmp_path)

    engine.run("accounts")
    await engine.wait()

    assert (out / "accounts.csv").read_text() == "Account,Balance"
    state = engine.state("accounts")
    assert state.status == ReportStatus.COMPLETED
    assert state.records_processed == 0
    assert engine.metrics("accounts").files_processed == 0


@pytest.mark.asyncio
async def test_rerun_produces_identical_output(tmp_path):
    engine, _, out = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER)})

    engine.run("accounts")
    await engine.wait()
    first = (out / "accounts.csv").read_bytes()

    engine.run("accounts")
    await engine.wait()
    assert (out / "accounts.csv").read_bytes() == first


@pytest.mark.asyncio
async def test_own_output_not_reingested(tmp_path):
    engine, input_dir, _ = _engine(tmp_path, {"ledger.csv": "2023-01-01,Cash,x,10,0"})
    # output written next to the input
    engine = ReportEngine(LocalFileStore(), input_dir=str(input_dir), output_dir=str(input_dir))

    for _ in range(2):
        engine.run("yearly")
        await engine.wait()

    assert (input_dir / "yearly.csv").read_text() == "Financial Year,Cash Balance\n2023,10.00"


@pytest.mark.asyncio
async def test_accounts_with_blank_amounts(tmp_path):
    engine, _, out = _engine(tmp_path, {"ledger.csv": "2020-01-01,Cash,x,100,\n2020-01-02,Cash,y,,40\n"})

    engine.run("accounts")
    await engine.wait()

    assert (out / "accounts.csv").read_text() == "Account,Balance\nCash,60.00"
    assert engine.state("accounts").progress == 100


@pytest.mark.asyncio
async def test_yearly_split_across_files(tmp_path):
    engine, _, out = _engine(tmp_path, {
        "2020.csv": "2020-03-01,Cash,x,50,0\n2020-03-01,Sales Revenue,x,0,50\n",
        "2019.csv": "2019-12-31,Cash,x,20,0\n2019-06-30,Cash,x,0,5\n",
    })

    engine.run("yearly")
    await engine.wait()

    assert (out / "yearly.csv").read_text() == "Financial Year,Cash Balance\n2019,15.00\n2020,50.00"


# ─── State machine ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_state_is_idle_before_first_run(tmp_path):
    engine, _, _ = _engine(tmp_path)
    assert engine.state("accounts").status == ReportStatus.IDLE
    assert engine.state("accounts").to_dict() == {"status": "idle", "progress": 0}
    assert engine.metrics("accounts") is None


@pytest.mark.asyncio
async def test_run_marks_processing_immediately(tmp_path):
    engine, _, _ = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER)})

    engine.run("accounts")
    state = engine.state("accounts")
    assert state.status == ReportStatus.PROCESSING
    assert state.progress == 0
    assert state.start_time is not None

    await engine.wait()
    assert engine.state("accounts").status == ReportStatus.COMPLETED


@pytest.mark.asyncio
async def test_missing_input_dir_sets_error(tmp_path):
    engine = ReportEngine(
        LocalFileStore(), input_dir=str(tmp_path / "missing"), output_dir=str(tmp_path / "out"),
    )

    engine.run("accounts")
    await engine.wait()

    state = engine.state("accounts")
    assert state.status == ReportStatus.ERROR
    assert state.progress == 0
    assert state.error
    assert state.end_time is not None
    assert not (tmp_path / "out" / "accounts.csv").exists()


@pytest.mark.asyncio
async def test_error_then_successful_rerun(tmp_path):
    engine, input_dir, _ = _engine(tmp_path)
    input_dir.rmdir()

    engine.run("accounts")
    await engine.wait()
    assert engine.state("accounts").status == ReportStatus.ERROR

    input_dir.mkdir()
    engine.run("accounts")
    await engine.wait()
    state = engine.state("accounts")
    assert state.status == ReportStatus.COMPLETED
    assert state.error is None


@pytest.mark.asyncio
async def test_unknown_report_rejected(tmp_path):
    engine, _, _ = _engine(tmp_path)
    with pytest.raises(UnknownReportError) as exc:
        engine.run("balance")
    assert exc.value.details == {"validTypes": REPORT_NAMES}


@pytest.mark.asyncio
async def test_all_states_shape(tmp_path):
    engine, _, _ = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER)})
    engine.run("accounts")
    await engine.wait()

    snapshot = engine.all_states()
    assert set(snapshot["states"]) == {"accounts", "yearly", "fs"}
    assert snapshot["states"]["yearly"] == {"status": "idle", "progress": 0}
    assert snapshot["states"]["accounts"]["status"] == "completed"
    assert set(snapshot["metrics"]) == {"accounts"}
    assert snapshot["metrics"]["accounts"]["recordsProcessed"] == 3
    assert snapshot["metrics"]["accounts"]["filesProcessed"] == 1


# ─── Scheduling ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_progress_is_monotonic():
    ref: list = []
    store = FakeFileStore({f"{i}.csv": LEDGER for i in range(4)}, engine_ref=ref)
    engine = ReportEngine(store, input_dir="in", output_dir="out", yield_every=1)
    ref.append(engine)

    engine.run("accounts")
    await engine.wait()

    assert store.progress_seen == [0, 25, 50, 75]
    assert engine.state("accounts").progress == 100
    assert store.written[str(Path("out") / "accounts.csv")].startswith("Account,Balance\n")


@pytest.mark.asyncio
async def test_overlapping_runs_are_serialized():
    store = FakeFileStore({"a.csv": LEDGER, "b.csv": LEDGER})
    engine = ReportEngine(store, input_dir="in", output_dir="out", yield_every=1)

    engine.run("accounts")
    engine.run("accounts")
    await engine.wait()

    assert store.max_active_readers == 1
    assert engine.state("accounts").status == ReportStatus.COMPLETED
    assert engine.state("accounts").records_processed == 6


@pytest.mark.asyncio
async def test_different_reports_run_concurrently():
    store = FakeFileStore({"a.csv": LEDGER * 10})
    engine = ReportEngine(store, input_dir="in", output_dir="out", yield_every=1)

    engine.run("accounts")
    engine.run("fs")
    await engine.wait()

    assert store.max_active_readers == 2
    assert engine.state("accounts").status == ReportStatus.COMPLETED
    assert engine.state("fs").status == ReportStatus.COMPLETED


@pytest.mark.asyncio
async def test_shutdown_cancels_runs():
    store = FakeFileStore({"a.csv": LEDGER * 50})
    engine = ReportEngine(store, input_dir="in", output_dir="out", yield_every=1)

    engine.run("accounts")
    await asyncio.sleep(0)
    await engine.shutdown()

    assert store.written == {}
    assert engine.state("accounts").status == ReportStatus.PROCESSING


@pytest.mark.asyncio
async def test_unparsable_rows_logged_once_per_run(tmp_path, caplog):
    engine, _, _ = _engine(tmp_path, {
        "ledger.csv": "2023-01-01,Cash,x,abc,0\n2023-01-02,Cash,y,10,0\n2023-01-03,Cash,z, ,0\n",
    })

    with caplog.at_level(logging.WARNING, logger="app.application.use_cases.generate_report"):
        engine.run("accounts")
        await engine.wait()

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "2 row(s)" in warnings[0].getMessage()
    assert engine.state("accounts").status == ReportStatus.COMPLETED


@pytest.mark.asyncio
async def test_clean_input_logs_no_warning(tmp_path, caplog):
    engine, _, _ = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER)})

    with caplog.at_level(logging.WARNING, logger="app.application.use_cases.generate_report"):
        engine.run("accounts")
        await engine.wait()

    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


@pytest.mark.asyncio
async def test_yields_to_loop_every_batch_of_lines(tmp_path, monkeypatch):
    # 12 lines with a batch of 2: six batch yields plus one at the file boundary
    engine, _, _ = _engine(tmp_path, {"ledger.csv": "\n".join(LEDGER * 4)})
    zero_sleeps = []
    real_sleep = asyncio.sleep

    async def counting_sleep(delay, *args, **kwargs):
        if delay == 0:
            zero_sleeps.append(delay)
        return await real_sleep(delay, *args, **kwargs)

    monkeypatch.setattr(asyncio, "sleep", counting_sleep)
    engine.run("accounts")
    await engine.wait()

    assert len(zero_sleeps) == 7
    assert engine.state("accounts").records_processed == 12
