"""CreateTicketUseCase — validate, route to an officer, persist."""

from __future__ import annotations

import asyncio
import logging

from app.application.ports.company_repo import CompanyRepository
from app.application.ports.ticket_repo import TicketRepository
from app.application.ports.transaction_manager import TransactionManager
from app.application.ports.user_repo import UserRepository
from app.domain.entities.ticket import Ticket
from app.domain.errors import CompanyNotFoundError, DomainError, DuplicateTicketError
from app.domain.policies.role_policy import determine_role_requirement, select_assignee
from app.domain.value_objects.enums import TicketStatus, TicketType

logger = logging.getLogger(__name__)

# Types whose creation depends on the company's currently open tickets.
_NEEDS_OPEN_TICKETS = frozenset(
    {TicketType.REGISTRATION_ADDRESS_CHANGE, TicketType.STRIKE_OFF}
)


class CreateTicketUseCase:
    """Orchestrates ticket creation for a company."""

    def __init__(
        self,
        company_repo: CompanyRepository,
        user_repo: UserRepository,
        ticket_repo: TicketRepository,
        tx: TransactionManager,
    ):
        self._companies = company_repo
        self._users = user_repo
        self._tickets = ticket_repo
        self._tx = tx

    async def execute(self, company_id: int, ticket_type: TicketType) -> Ticket:
        """Create a ticket of the given type.

        Pipeline:
        1. Resolve category and roles from the ticket type
        2. Fetch candidate users and open tickets concurrently
        3. Reject duplicate open address changes
        4. Pick the assignee (fallback role, exclusivity checks)
        5. Persist; strike-off resolves every other open ticket in the
           same transaction

        Raises:
            CompanyNotFoundError, DuplicateTicketError, NoAssigneeError,
            AmbiguousAssigneeError, StoreUnavailableError.
        """
        if await self._companies.get_by_id(company_id) is None:
            raise CompanyNotFoundError(company_id)

        # Step 1: role routing
        requirement = determine_role_requirement(ticket_type)

        # Step 2: both reads are observed before any decision is made
        users, open_tickets = await asyncio.gather(
            self._users.get_by_company_and_roles(company_id, requirement.roles),
            self._fetch_open_tickets(company_id, ticket_type),
        )

        try:
            # Step 3: at most one open address change per company
            if ticket_type == TicketType.REGISTRATION_ADDRESS_CHANGE and any(
                t.type == TicketType.REGISTRATION_ADDRESS_CHANGE for t in open_tickets
            ):
                raise DuplicateTicketError(TicketType.REGISTRATION_ADDRESS_CHANGE.value)

            # Step 4: assignee
            assignee = select_assignee(users, requirement)
        except DomainError as e:
            logger.warning(
                "Rejected %s ticket for company %s: %s",
                ticket_type.value, company_id, e.message,
            )
            raise

        ticket = Ticket(
            id=None,
            type=ticket_type,
            category=requirement.category,
            company_id=company_id,
            assignee_id=assignee.id,
            status=TicketStatus.OPEN,
        )

        # Step 5: persist
        if ticket_type == TicketType.STRIKE_OFF:
            async with self._tx.transaction():
                resolved = 0
                if open_tickets:
                    resolved = await self._tickets.set_status(
                        [t.id for t in open_tickets], TicketStatus.RESOLVED
                    )
                ticket = await self._tickets.save(ticket)
            logger.info(
                "Company %s struck off: ticket %s opened, %d ticket(s) resolved",
                company_id, ticket.id, resolved,
            )
        else:
            ticket = await self._tickets.save(ticket)

        logger.info(
            "Ticket %s (%s) → user %s (%s)",
            ticket.id, ticket_type.value, assignee.id, assignee.role.value,
        )
        return ticket

    async def _fetch_open_tickets(
        self, company_id: int, ticket_type: TicketType
    ) -> list[Ticket]:
        if ticket_type not in _NEEDS_OPEN_TICKETS:
            return []
        type_filter = (
            TicketType.REGISTRATION_ADDRESS_CHANGE
            if ticket_type == TicketType.REGISTRATION_ADDRESS_CHANGE
            else None
        )
        return await self._tickets.get_open_by_company(company_id, type_filter)
