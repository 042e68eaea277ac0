"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class TicketType(str, Enum):
    MANAGEMENT_REPORT = "managementReport"
    REGISTRATION_ADDRESS_CHANGE = "registrationAddressChange"
    STRIKE_OFF = "strikeOff"


class TicketCategory(str, Enum):
    ACCOUNTING = "accounting"
    CORPORATE = "corporate"
    MANAGEMENT = "management"


class TicketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class UserRole(str, Enum):
    ACCOUNTANT = "accountant"
    CORPORATE_SECRETARY = "corporateSecretary"
    DIRECTOR = "director"


class ReportStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class ReportName(str, Enum):
    ACCOUNTS = "accounts"
    YEARLY = "yearly"
    FINANCIAL_STATEMENT = "fs"

    @property
    def output_file(self) -> str:
        return f"{self.value}.csv"
