"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.ticket import Ticket
from app.domain.value_objects.enums import TicketStatus, TicketType


class TicketRepository(ABC):
    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        """Insert a new ticket.

        Raises DuplicateTicketError when the store's uniqueness guard
        rejects a second open registrationAddressChange for the company.
        """
        ...

    @abstractmethod
    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        ...

    @abstractmethod
    async def get_open_by_company(
        self, company_id: int, ticket_type: TicketType | None = None
    ) -> list[Ticket]:
        ...

    @abstractmethod
    async def set_status(self, ticket_ids: list[int], status: TicketStatus) -> int:
        """Bulk status update. Returns the number of rows changed."""
        ...

    @abstractmethod
    async def get_all_detailed(self) -> list[Ticket]:
        """All tickets with company and assignee attached."""
        ...
