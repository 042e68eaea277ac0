"""Tests for domain entities."""

from datetime import datetime

from app.domain.entities.company import Company
from app.domain.entities.report_state import ReportMetrics, ReportState
from app.domain.entities.ticket import Ticket
from app.domain.entities.user import User
from app.domain.value_objects.enums import (
    ReportStatus,
    TicketCategory,
    TicketStatus,
    TicketType,
    UserRole,
)


def _ticket(status=TicketStatus.OPEN) -> Ticket:
    return Ticket(
        id=7, type=TicketType.STRIKE_OFF, category=TicketCategory.MANAGEMENT,
        company_id=1, assignee_id=3, status=status,
    )


def test_ticket_defaults_to_open():
    t = Ticket(
        id=None, type=TicketType.MANAGEMENT_REPORT, category=TicketCategory.ACCOUNTING,
        company_id=1, assignee_id=2,
    )
    assert t.status == TicketStatus.OPEN
    assert t.is_open() is True


def test_resolved_ticket_is_not_open():
    assert _ticket(TicketStatus.RESOLVED).is_open() is False


def test_ticket_dto_projection():
    t = _ticket()
    t.company = Company(id=1, name="Acme")
    assert t.to_dto() == {
        "id": 7,
        "type": "strikeOff",
        "companyId": 1,
        "assigneeId": 3,
        "status": "open",
        "category": "management",
    }


def test_user_has_role():
    u = User(id=1, name="D", role=UserRole.DIRECTOR, company_id=1, created_at=datetime(2024, 1, 1))
    assert u.has_role(UserRole.DIRECTOR) is True
    assert u.has_role(UserRole.ACCOUNTANT) is False
    assert u.has_role(None) is False


def test_idle_state_dict_is_minimal():
    assert ReportState().to_dict() == {"status": "idle", "progress": 0}


def test_state_dict_uses_camel_case():
    s = ReportState(
        status=ReportStatus.COMPLETED, progress=100, start_time=1.0, end_time=2.5,
        duration="1.50s", records_processed=10, total_records=10,
    )
    assert s.to_dict() == {
        "status": "completed",
        "progress": 100,
        "startTime": 1.0,
        "endTime": 2.5,
        "duration": "1.50s",
        "recordsProcessed": 10,
        "totalRecords": 10,
    }


def test_processing_state_keeps_zero_records():
    s = ReportState(status=ReportStatus.PROCESSING, start_time=1.0, records_processed=0)
    assert s.to_dict()["recordsProcessed"] == 0
    assert "error" not in s.to_dict()


def test_metrics_dict():
    m = ReportMetrics(
        total_execution_time=0.5, records_processed=100, files_processed=2,
        memory_usage={"maxRss": 1024}, average_records_per_second=200,
    )
    assert m.to_dict() == {
        "totalExecutionTime": 0.5,
        "recordsProcessed": 100,
        "filesProcessed": 2,
        "memoryUsage": {"maxRss": 1024},
        "averageRecordsPerSecond": 200,
    }
