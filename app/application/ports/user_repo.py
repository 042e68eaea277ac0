"""Port interface for user persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.user import User
from app.domain.value_objects.enums import UserRole


class UserRepository(ABC):
    @abstractmethod
    async def save(self, user: User) -> User:
        ...

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:
        ...

    @abstractmethod
    async def get_by_company_and_roles(
        self, company_id: int, roles: tuple[UserRole, ...]
    ) -> list[User]:
        """Users of the company holding any of the roles, newest first."""
        ...

    @abstractmethod
    async def get_all(self) -> list[User]:
        ...
