"""SQLAlchemy repository implementations."""

from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.adapters.persistence.models import CompanyModel, TicketModel, UserModel
from app.application.ports.company_repo import CompanyRepository
from app.application.ports.ticket_repo import TicketRepository
from app.application.ports.transaction_manager import TransactionManager
from app.application.ports.user_repo import UserRepository
from app.domain.entities.company import Company
from app.domain.entities.ticket import Ticket
from app.domain.entities.user import User
from app.domain.errors import DuplicateTicketError, StoreUnavailableError
from app.domain.value_objects.enums import (
    TicketCategory,
    TicketStatus,
    TicketType,
    UserRole,
)

logger = logging.getLogger(__name__)


def _store_errors(fn):
    """Surface connection-level driver failures as StoreUnavailableError."""

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error("Record store failure in %s: %s", fn.__qualname__, e)
            raise StoreUnavailableError() from e

    return wrapper


# ─── Mappers ─────────────────────────────────────────────────────────


def _company_to_domain(m: CompanyModel) -> Company:
    return Company(id=m.id, name=m.name)


def _user_to_domain(m: UserModel) -> User:
    return User(
        id=m.id,
        name=m.name,
        role=UserRole(m.role),
        company_id=m.company_id,
        created_at=m.created_at,
    )


def _ticket_to_domain(m: TicketModel, detailed: bool = False) -> Ticket:
    # Relationships are only touched when eagerly loaded (no lazy IO in async)
    return Ticket(
        id=m.id,
        type=TicketType(m.type),
        category=TicketCategory(m.category),
        company_id=m.company_id,
        assignee_id=m.assignee_id,
        status=TicketStatus(m.status),
        company=_company_to_domain(m.company) if detailed and m.company else None,
        assignee=_user_to_domain(m.assignee) if detailed and m.assignee else None,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlCompanyRepository(CompanyRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    @_store_errors
    async def save(self, company: Company) -> Company:
        m = CompanyModel(name=company.name)
        self._s.add(m)
        await self._s.flush()
        company.id = m.id
        return company

    @_store_errors
    async def get_by_id(self, company_id: int) -> Company | None:
        m = await self._s.get(CompanyModel, company_id)
        return _company_to_domain(m) if m else None

    @_store_errors
    async def get_all(self) -> list[Company]:
        result = await self._s.execute(select(CompanyModel).order_by(CompanyModel.id))
        return [_company_to_domain(m) for m in result.scalars()]


class SqlUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    @_store_errors
    async def save(self, user: User) -> User:
        m = UserModel(name=user.name, role=user.role.value, company_id=user.company_id)
        if user.created_at is not None:
            m.created_at = user.created_at
        self._s.add(m)
        await self._s.flush()
        user.id = m.id
        user.created_at = m.created_at
        return user

    @_store_errors
    async def get_by_id(self, user_id: int) -> User | None:
        m = await self._s.get(UserModel, user_id)
        return _user_to_domain(m) if m else None

    @_store_errors
    async def get_by_company_and_roles(
        self, company_id: int, roles: tuple[UserRole, ...]
    ) -> list[User]:
        result = await self._s.execute(
            select(UserModel)
            .where(
                UserModel.company_id == company_id,
                UserModel.role.in_([r.value for r in roles]),
            )
            .order_by(UserModel.created_at.desc(), UserModel.id.desc())
        )
        return [_user_to_domain(m) for m in result.scalars()]

    @_store_errors
    async def get_all(self) -> list[User]:
        result = await self._s.execute(select(UserModel).order_by(UserModel.id))
        return [_user_to_domain(m) for m in result.scalars()]


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    @_store_errors
    async def save(self, ticket: Ticket) -> Ticket:
        m = TicketModel(
            type=ticket.type.value,
            category=ticket.category.value,
            status=ticket.status.value,
            company_id=ticket.company_id,
            assignee_id=ticket.assignee_id,
        )
        self._s.add(m)
        try:
            await self._s.flush()
        except IntegrityError as e:
            if ticket.type == TicketType.REGISTRATION_ADDRESS_CHANGE and ticket.is_open():
                # Lost the race against a concurrent request for the same company
                raise DuplicateTicketError(ticket.type.value) from e
            raise
        ticket.id = m.id
        return ticket

    @_store_errors
    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        result = await self._s.execute(
            select(TicketModel)
            .options(joinedload(TicketModel.company), joinedload(TicketModel.assignee))
            .where(TicketModel.id == ticket_id)
        )
        m = result.unique().scalar_one_or_none()
        return _ticket_to_domain(m, detailed=True) if m else None

    @_store_errors
    async def get_open_by_company(
        self, company_id: int, ticket_type: TicketType | None = None
    ) -> list[Ticket]:
        stmt = select(TicketModel).where(
            TicketModel.company_id == company_id,
            TicketModel.status == TicketStatus.OPEN.value,
        )
        if ticket_type is not None:
            stmt = stmt.where(TicketModel.type == ticket_type.value)
        result = await self._s.execute(stmt.order_by(TicketModel.id))
        return [_ticket_to_domain(m) for m in result.scalars()]

    @_store_errors
    async def set_status(self, ticket_ids: list[int], status: TicketStatus) -> int:
        if not ticket_ids:
            return 0
        result = await self._s.execute(
            update(TicketModel)
            .where(TicketModel.id.in_(ticket_ids))
            .values(status=status.value)
        )
        await self._s.flush()
        return result.rowcount

    @_store_errors
    async def get_all_detailed(self) -> list[Ticket]:
        result = await self._s.execute(
            select(TicketModel)
            .options(joinedload(TicketModel.company), joinedload(TicketModel.assignee))
            .order_by(TicketModel.id)
        )
        return [_ticket_to_domain(m, detailed=True) for m in result.unique().scalars()]


@_store_errors
async def commit(session: AsyncSession) -> None:
    """Commit the request session under the same failure mapping as the repositories."""
    await session.commit()


class SqlTransactionManager(TransactionManager):
    """Savepoint on the request session; the route's commit makes it durable."""

    def __init__(self, session: AsyncSession):
        self._s = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._s.begin_nested():
            yield
