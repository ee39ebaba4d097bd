from abc import ABC, abstractmethod
from typing import Sequence

from src.portfolio.models import NewPosition, Snapshot


class LedgerClient(ABC):
    """The five remote operations of the Ledger Service.

    Mutations return nothing usable: price, name and change% are only ever
    computed remotely, so callers must ``read()`` afterwards to see the result.
    Implementations raise ``RemoteError`` for error payloads and
    ``ConnectivityError`` when no response arrives.
    """

    @abstractmethod
    async def read(self) -> Snapshot: ...

    @abstractmethod
    async def add(self, ticker: str, quantity: float, cost_basis: float) -> None: ...

    @abstractmethod
    async def update(self, row_index: int | str, quantity: float, cost_basis: float) -> None: ...

    @abstractmethod
    async def delete(self, row_index: int | str) -> None: ...

    @abstractmethod
    async def bulk_add(self, positions: Sequence[NewPosition]) -> None: ...
