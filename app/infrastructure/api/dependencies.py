"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.filesystem.local_file_store import LocalFileStore
from app.adapters.persistence.database import get_read_session, get_session
from app.adapters.persistence.repositories import (
    SqlCompanyRepository,
    SqlTicketRepository,
    SqlTransactionManager,
    SqlUserRepository,
)
from app.application.use_cases.create_ticket import CreateTicketUseCase
from app.application.use_cases.generate_report import ReportEngine
from app.application.use_cases.list_tickets import ListTicketsUseCase
from app.config import settings

# Re-export session dependency
get_db_session = get_session

# Process-wide singleton: report state lives for the life of the process
_report_engine = ReportEngine(
    file_store=LocalFileStore(encoding=settings.reports_encoding),
    input_dir=settings.reports_input_dir,
    output_dir=settings.reports_output_dir,
    yield_every=settings.reports_yield_every,
)


def get_report_engine() -> ReportEngine:
    return _report_engine


def get_ticket_repo(session: AsyncSession = Depends(get_session)) -> SqlTicketRepository:
    return SqlTicketRepository(session)


def get_create_ticket_uc(
    session: AsyncSession = Depends(get_session),
    read_session: AsyncSession = Depends(get_read_session),
) -> CreateTicketUseCase:
    return CreateTicketUseCase(
        company_repo=SqlCompanyRepository(session),
        # Separate session: users and open tickets are fetched concurrently
        user_repo=SqlUserRepository(read_session),
        ticket_repo=SqlTicketRepository(session),
        tx=SqlTransactionManager(session),
    )


def get_list_tickets_uc(
    ticket_repo: SqlTicketRepository = Depends(get_ticket_repo),
) -> ListTicketsUseCase:
    return ListTicketsUseCase(ticket_repo=ticket_repo)
