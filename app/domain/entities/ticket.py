"""Ticket entity — a unit of work assigned to a company officer."""

from dataclasses import dataclass

from app.domain.entities.company import Company
from app.domain.entities.user import User
from app.domain.value_objects.enums import TicketCategory, TicketStatus, TicketType


@dataclass
class Ticket:
    id: int | None
    type: TicketType
    category: TicketCategory
    company_id: int
    assignee_id: int
    status: TicketStatus = TicketStatus.OPEN
    company: Company | None = None
    assignee: User | None = None

    def is_open(self) -> bool:
        return self.status == TicketStatus.OPEN

    def to_dto(self) -> dict:
        """Public projection returned by the ticket endpoints."""
        return {
            "id": self.id,
            "type": self.type.value,
            "companyId": self.company_id,
            "assigneeId": self.assignee_id,
            "status": self.status.value,
            "category": self.category.value,
        }
