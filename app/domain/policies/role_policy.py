"""RolePolicy — which officer role a ticket type is routed to."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.entities.user import User
from app.domain.errors import AmbiguousAssigneeError, NoAssigneeError
from app.domain.value_objects.enums import TicketCategory, TicketType, UserRole

# Roles where more than one candidate makes the assignment ambiguous.
# Accountants are deliberately absent: the most recent one wins.
EXCLUSIVE_ROLES = frozenset({UserRole.CORPORATE_SECRETARY, UserRole.DIRECTOR})


@dataclass(frozen=True)
class RoleRequirement:
    """Result of the policy evaluation."""

    category: TicketCategory
    primary_role: UserRole
    fallback_role: UserRole | None = None  # None = no fallback

    @property
    def roles(self) -> tuple[UserRole, ...]:
        if self.fallback_role is None:
            return (self.primary_role,)
        return (self.primary_role, self.fallback_role)

    def role_label(self) -> str:
        """Human-readable role list used in the "no assignee" message."""
        return " or ".join(role.value for role in self.roles)


_REQUIREMENTS: dict[TicketType, RoleRequirement] = {
    TicketType.MANAGEMENT_REPORT: RoleRequirement(
        category=TicketCategory.ACCOUNTING,
        primary_role=UserRole.ACCOUNTANT,
    ),
    TicketType.STRIKE_OFF: RoleRequirement(
        category=TicketCategory.MANAGEMENT,
        primary_role=UserRole.DIRECTOR,
    ),
    TicketType.REGISTRATION_ADDRESS_CHANGE: RoleRequirement(
        category=TicketCategory.CORPORATE,
        primary_role=UserRole.CORPORATE_SECRETARY,
        fallback_role=UserRole.DIRECTOR,
    ),
}


def determine_role_requirement(ticket_type: TicketType) -> RoleRequirement:
    """Pure function: given a ticket type, return category and role routing.

    Business rules:
      1. managementReport           →  accounting, accountant.
      2. strikeOff                  →  management, director.
      3. registrationAddressChange  →  corporate, corporateSecretary,
                                       falling back to director.
    """
    return _REQUIREMENTS[ticket_type]


def select_assignee(users: list[User], requirement: RoleRequirement) -> User:
    """Pick the assignee from candidates ordered newest first.

    Raises:
        NoAssigneeError: nobody holds the primary (or fallback) role.
        AmbiguousAssigneeError: the selected role is exclusive and held by
            more than one user.
    """
    assignees = [u for u in users if u.has_role(requirement.primary_role)]
    selected_role = requirement.primary_role

    if not assignees and requirement.fallback_role is not None:
        assignees = [u for u in users if u.has_role(requirement.fallback_role)]
        selected_role = requirement.fallback_role

    if not assignees:
        raise NoAssigneeError(requirement.role_label())

    if selected_role in EXCLUSIVE_ROLES and len(assignees) > 1:
        raise AmbiguousAssigneeError(selected_role.value)

    return assignees[0]
