"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.adapters.persistence.database import Base

# Predicate of the "one open address change per company" guard.
OPEN_ADDRESS_CHANGE_PREDICATE = "status = 'open' AND type = 'registrationAddressChange'"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompanyModel(Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    users: Mapped[list["UserModel"]] = relationship(back_populates="company")
    tickets: Mapped[list["TicketModel"]] = relationship(back_populates="company")


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(40), nullable=False)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    # Set by the application (microsecond precision): drives "most recent wins"
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    company: Mapped["CompanyModel"] = relationship(back_populates="users")
    tickets: Mapped[list["TicketModel"]] = relationship(back_populates="assignee")

    __table_args__ = (
        Index("idx_users_company_role", "company_id", "role"),
        Index("idx_users_company_created", "company_id", "created_at"),
    )


class TicketModel(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id"), nullable=False
    )
    assignee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=_utcnow
    )

    company: Mapped["CompanyModel"] = relationship(back_populates="tickets")
    assignee: Mapped["UserModel"] = relationship(back_populates="tickets")

    __table_args__ = (
        Index("idx_tickets_company_status", "company_id", "status"),
        Index("idx_tickets_company_type_status", "company_id", "type", "status"),
        Index(
            "uq_tickets_open_address_change",
            "company_id",
            "type",
            unique=True,
            postgresql_where=text(OPEN_ADDRESS_CHANGE_PREDICATE),
            sqlite_where=text(OPEN_ADDRESS_CHANGE_PREDICATE),
        ),
    )
