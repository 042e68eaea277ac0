"""Port interface for the record store's transaction primitive."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionManager(ABC):
    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Scope in which every write commits together or not at all.

        Any exception raised inside the block rolls the whole scope back
        and propagates to the caller.
        """
        ...
