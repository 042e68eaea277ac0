"""Port interface for the report input/output file store."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class FileStore(ABC):
    @abstractmethod
    async def list_files(self, directory: str, suffix: str = ".csv") -> list[str]:
        """File names (not paths) under directory ending with suffix, sorted.

        Raises FileNotFoundError if the directory does not exist.
        """
        ...

    @abstractmethod
    def iter_lines(self, path: str) -> AsyncIterator[str]:
        """Stream a file line by line, line terminators stripped."""
        ...

    @abstractmethod
    async def write_atomic(self, path: str, content: str) -> None:
        """Replace path with content; readers never see a partial file."""
        ...
