"""Company entity — the scope every user and ticket belongs to."""

from dataclasses import dataclass


@dataclass
class Company:
    id: int | None
    name: str
