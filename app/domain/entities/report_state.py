"""Report state and metrics — the observable side of a background report run."""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.value_objects.enums import ReportStatus


@dataclass
class ReportState:
    status: ReportStatus = ReportStatus.IDLE
    progress: int = 0
    start_time: float | None = None
    end_time: float | None = None
    duration: str | None = None
    error: str | None = None
    records_processed: int | None = None
    total_records: int | None = None

    def to_dict(self) -> dict:
        """camelCase projection; unset optional fields are left out."""
        data: dict = {"status": self.status.value, "progress": self.progress}
        optional = {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "error": self.error,
            "recordsProcessed": self.records_processed,
            "totalRecords": self.total_records,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass
class ReportMetrics:
    total_execution_time: float
    records_processed: int
    files_processed: int
    memory_usage: dict[str, int] = field(default_factory=dict)
    average_records_per_second: int = 0

    def to_dict(self) -> dict:
        return {
            "totalExecutionTime": self.total_execution_time,
            "recordsProcessed": self.records_processed,
            "filesProcessed": self.files_processed,
            "memoryUsage": self.memory_usage,
            "averageRecordsPerSecond": self.average_records_per_second,
        }
