"""Port interface for company persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.company import Company


class CompanyRepository(ABC):
    @abstractmethod
    async def save(self, company: Company) -> Company:
        ...

    @abstractmethod
    async def get_by_id(self, company_id: int) -> Company | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[Company]:
        ...
