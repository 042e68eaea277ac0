"""User entity — a company officer who can be assigned tickets."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.value_objects.enums import UserRole


@dataclass
class User:
    id: int | None
    name: str
    role: UserRole
    company_id: int
    created_at: datetime | None = None

    def has_role(self, role: UserRole | None) -> bool:
        return role is not None and self.role == role
