"""Initial schema — companies, users, tickets.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_ADDRESS_CHANGE_PREDICATE = "status = 'open' AND type = 'registrationAddressChange'"


def upgrade() -> None:
    # Companies
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(40), nullable=False),
        sa.Column(
            "company_id", sa.Integer, sa.ForeignKey("companies.id"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_users_company_role", "users", ["company_id", "role"])
    op.create_index("idx_users_company_created", "users", ["company_id", "created_at"])

    # Tickets
    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column(
            "company_id", sa.Integer, sa.ForeignKey("companies.id"), nullable=False
        ),
        sa.Column(
            "assignee_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_tickets_company_status", "tickets", ["company_id", "status"])
    op.create_index(
        "idx_tickets_company_type_status", "tickets", ["company_id", "type", "status"]
    )
    # At most one open address change per company, enforced by the database
    op.create_index(
        "uq_tickets_open_address_change",
        "tickets",
        ["company_id", "type"],
        unique=True,
        postgresql_where=sa.text(OPEN_ADDRESS_CHANGE_PREDICATE),
        sqlite_where=sa.text(OPEN_ADDRESS_CHANGE_PREDICATE),
    )


def downgrade() -> None:
    op.drop_table("tickets")
    op.drop_table("users")
    op.drop_table("companies")
