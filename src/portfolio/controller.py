"""Single owner of the portfolio state shown to the user.

The snapshot is only ever replaced by a successful ledger read. Mutations go
to the ledger first and are followed by a full read; nothing is patched
locally, so a failed call can never leave the snapshot half-updated.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable

from src.errors import LedgerError, NotConfiguredError
from src.importer.parser import parse_positions_csv
from src.ledger.base import LedgerClient
from src.ledger.http import HttpLedgerClient
from src.ledger.schemas import Position
from src.metrics import positions_imported_total
from src.portfolio.engine import summarize
from src.portfolio.models import NewPosition, PortfolioMetrics, Snapshot
from src.store.config import Config, ConfigStore

logger = logging.getLogger(__name__)


class Status(str, Enum):
    UNCONFIGURED = "unconfigured"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class State:
    status: Status = Status.UNCONFIGURED
    snapshot: Snapshot = field(default_factory=Snapshot)
    config: Config | None = None
    pending_error: LedgerError | None = None
    error_action: str | None = None    # ledger action that raised pending_error


class PortfolioController:
    def __init__(
        self,
        store: ConfigStore,
        client_factory: Callable[[str], LedgerClient] = HttpLedgerClient,
    ):
        self.store = store
        self.client_factory = client_factory
        self.client: LedgerClient | None = None
        self.state = State()

    @property
    def busy(self) -> bool:
        """True while a ledger call is in flight. Callers should refuse new actions."""
        return self.state.status == Status.LOADING

    def metrics(self) -> PortfolioMetrics:
        return summarize(self.state.snapshot)

    def find(self, row_ref: str) -> Position | None:
        """Look up a position of the current snapshot by its rowIndex as typed by the user."""
        row_ref = row_ref.strip()
        for p in self.state.snapshot.positions:
            if str(p.row_index) == row_ref:
                return p
        return None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def start(self) -> State:
        config = await self.store.get()
        if config is None:
            logger.info("Ledger endpoint not configured yet")
            return self.state
        self._configure(config)
        return await self.refresh()

    async def save_config(self, endpoint: str) -> State:
        config = await self.store.set(endpoint)
        self._configure(config)
        return await self.refresh()

    async def refresh(self) -> State:
        if self.client is None:
            return self.state

        previous = self._begin()
        try:
            snapshot = await self.client.read()
        except LedgerError as e:
            logger.warning(f"Ledger read failed: {e}")
            self.state = replace(self.state, status=Status.ERROR, pending_error=e, error_action="read")
            return self.state
        except Exception:
            self.state = previous
            raise

        self.state = replace(self.state, status=Status.READY, snapshot=snapshot)
        logger.info(f"Snapshot refreshed: {len(snapshot.positions)} positions, value {snapshot.total_value:.2f}")
        return self.state

    async def add(self, position: NewPosition) -> State:
        return await self._mutate(
            "add", lambda c: c.add(position.ticker, position.quantity, position.cost_basis),
        )

    async def edit(self, row_index: int | str, quantity: float, cost_basis: float) -> State:
        return await self._mutate(
            "update", lambda c: c.update(row_index, quantity, cost_basis),
        )

    async def delete(self, row_index: int | str) -> State:
        return await self._mutate("delete", lambda c: c.delete(row_index))

    async def import_csv(self, text: str) -> tuple[State, int]:
        """Parse and submit a CSV in one bulkAdd call.

        Returns the new state and the number of rows submitted. Raises
        ValidationError before touching the ledger if no row is usable.
        """
        self._require_client()
        positions = parse_positions_csv(text)

        async def submit(client: LedgerClient) -> None:
            await client.bulk_add(positions)
            positions_imported_total.inc(len(positions))

        return await self._mutate("bulkAdd", submit), len(positions)

    # ------------------------------------------------------------------

    def _configure(self, config: Config) -> None:
        self.client = self.client_factory(config.endpoint)
        self.state = replace(self.state, config=config)

    def _begin(self) -> State:
        """Enter LOADING and return the state to restore if the call blows up."""
        previous = self.state
        if previous.status == Status.UNCONFIGURED:
            previous = replace(previous, status=Status.READY)
        self.state = replace(self.state, status=Status.LOADING, pending_error=None, error_action=None)
        return previous

    def _require_client(self) -> LedgerClient:
        if self.client is None:
            raise NotConfiguredError("Ledger endpoint is not configured")
        return self.client

    async def _mutate(self, action: str, call: Callable[[LedgerClient], Awaitable[None]]) -> State:
        client = self._require_client()
        previous = self._begin()
        try:
            await call(client)
        except LedgerError as e:
            logger.warning(f"Ledger {action} failed: {e}")
            self.state = replace(self.state, status=Status.ERROR, pending_error=e, error_action=action)
            return self.state
        except Exception:
            self.state = previous
            raise

        return await self.refresh()
