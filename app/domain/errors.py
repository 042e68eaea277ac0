"""Domain-level exceptions with stable machine-readable codes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NoAssigneeError(DomainError):
    def __init__(self, role_label: str):
        super().__init__(
            code="NO_ASSIGNEE",
            http_status=409,
            message=f"Cannot find user with role {role_label} to create a ticket",
        )


class AmbiguousAssigneeError(DomainError):
    def __init__(self, role: str):
        super().__init__(
            code="AMBIGUOUS_ASSIGNEE",
            http_status=409,
            message=f"Multiple users with role {role}. Cannot create a ticket",
        )


class DuplicateTicketError(DomainError):
    def __init__(self, ticket_type: str = "registrationAddressChange"):
        super().__init__(
            code="DUPLICATE_TICKET",
            http_status=409,
            message=f"A {ticket_type} ticket already exists for this company",
        )


class CompanyNotFoundError(DomainError):
    def __init__(self, company_id: int):
        super().__init__(
            code="COMPANY_NOT_FOUND",
            http_status=404,
            message=f"Company {company_id} not found",
            details={"companyId": company_id},
        )


class StoreUnavailableError(DomainError):
    def __init__(self, reason: str = "Record store is unavailable"):
        super().__init__(code="STORE_UNAVAILABLE", http_status=503, message=reason)


class UnknownReportError(DomainError):
    def __init__(self, name: str, valid: list[str]):
        super().__init__(
            code="UNKNOWN_REPORT",
            http_status=202,
            message=f"Unknown report: {name}",
            details={"validTypes": valid},
        )
