"""Ticket endpoints — list, detail, create."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.persistence.database import get_session
from app.adapters.persistence.repositories import SqlTicketRepository, commit
from app.application.use_cases.create_ticket import CreateTicketUseCase
from app.application.use_cases.list_tickets import ListTicketsUseCase
from app.domain.entities.ticket import Ticket
from app.domain.value_objects.enums import TicketType
from app.infrastructure.api.dependencies import (
    get_create_ticket_uc,
    get_list_tickets_uc,
    get_ticket_repo,
)

router = APIRouter(prefix="/tickets", tags=["tickets"])

# ── Request schemas ─────────────────────────────────────────────────


class NewTicketRequest(BaseModel):
    type: TicketType
    companyId: int


# ── Endpoints ───────────────────────────────────────────────────────


@router.get("")
async def list_tickets(uc: ListTicketsUseCase = Depends(get_list_tickets_uc)):
    """List all tickets with their company and assignee."""
    tickets = await uc.execute()
    return [_serialize_ticket(t) for t in tickets]


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: int,
    ticket_repo: SqlTicketRepository = Depends(get_ticket_repo),
):
    ticket = await ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return _serialize_ticket(ticket)


@router.post("", status_code=201)
async def create_ticket(
    req: NewTicketRequest,
    uc: CreateTicketUseCase = Depends(get_create_ticket_uc),
    session: AsyncSession = Depends(get_session),
):
    """Create a ticket and assign it; conflicts surface as 409."""
    ticket = await uc.execute(req.companyId, req.type)
    await commit(session)
    return ticket.to_dto()


def _serialize_ticket(t: Ticket) -> dict:
    """TicketDto plus the embedded company and assignee."""
    data = t.to_dto()
    data["company"] = {"id": t.company.id, "name": t.company.name} if t.company else None
    if t.assignee:
        data["assignee"] = {
            "id": t.assignee.id,
            "name": t.assignee.name,
            "role": t.assignee.role.value,
            "companyId": t.assignee.company_id,
            "createdAt": t.assignee.created_at.isoformat() if t.assignee.created_at else None,
        }
    else:
        data["assignee"] = None
    return data
