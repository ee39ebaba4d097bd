import logging
import time
from typing import Any, Callable, Sequence

import httpx
from pydantic import ValidationError as SchemaError

from src.errors import ConnectivityError, RemoteError, ValidationError
from src.ledger.base import LedgerClient
from src.ledger.schemas import (
    AddRequest, BulkAddRequest, DeleteRequest, LedgerRequest,
    PositionIn, ReadResponse, UpdateRequest,
)
from src.metrics import ledger_request_duration_seconds, ledger_requests_total
from src.portfolio.models import NewPosition, Snapshot

logger = logging.getLogger(__name__)


def _cache_buster() -> str:
    return str(int(time.time() * 1000))


def _to_snapshot(payload: Any) -> Snapshot:
    try:
        body = ReadResponse.model_validate(payload)
    except SchemaError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors()[:5])
        raise RemoteError(f"Unexpected ledger response shape ({fields})") from e
    return Snapshot(positions=tuple(body.data), total_value=body.total_value)


class HttpLedgerClient(LedgerClient):
    """Ledger Service over HTTP (e.g. a Google Apps Script web app).

    Reads are ``GET ?action=read&t=<ms>``; mutations are ``POST`` with a JSON
    body. Redirects are followed since Apps Script answers with a 302 to the
    rendered result.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self.transport,
        )

    async def _exchange(self, method: str, strict: bool, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, self.endpoint, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ConnectivityError(f"Could not reach ledger: {e}") from e

        if response.is_error:
            raise RemoteError(
                f"Ledger answered HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            if strict:
                raise RemoteError("Ledger response is not JSON") from e
            return None

        if isinstance(payload, dict) and payload.get("error"):
            raise RemoteError(str(payload["error"]), status_code=response.status_code)
        return payload

    async def _call(
        self,
        action: str,
        method: str,
        parse: Callable[[Any], Any] | None = None,
        **kwargs,
    ) -> Any:
        started = time.perf_counter()
        try:
            payload = await self._exchange(method, strict=parse is not None, **kwargs)
            result = parse(payload) if parse else None
        except ConnectivityError as e:
            ledger_requests_total.labels(action=action, result="connectivity_error").inc()
            logger.warning(f"Ledger {action} failed: {e}")
            raise
        except RemoteError as e:
            ledger_requests_total.labels(action=action, result="remote_error").inc()
            logger.warning(f"Ledger {action} rejected: {e}")
            raise
        finally:
            ledger_request_duration_seconds.labels(action=action).observe(time.perf_counter() - started)

        ledger_requests_total.labels(action=action, result="ok").inc()
        logger.debug(f"Ledger {action} ok in {time.perf_counter() - started:.2f}s")
        return result

    async def _post(self, request: LedgerRequest) -> None:
        await self._call(request.action, "POST", json=request.model_dump(by_alias=True))

    async def read(self) -> Snapshot:
        return await self._call(
            "read", "GET", parse=_to_snapshot,
            params={"action": "read", "t": _cache_buster()},
        )

    async def add(self, ticker: str, quantity: float, cost_basis: float) -> None:
        await self._post(AddRequest(ticker=ticker, quantity=quantity, cost_basis=cost_basis))

    async def update(self, row_index: int | str, quantity: float, cost_basis: float) -> None:
        await self._post(UpdateRequest(row_index=row_index, quantity=quantity, cost_basis=cost_basis))

    async def delete(self, row_index: int | str) -> None:
        await self._post(DeleteRequest(row_index=row_index))

    async def bulk_add(self, positions: Sequence[NewPosition]) -> None:
        if not positions:
            raise ValidationError("No positions to import")
        await self._post(BulkAddRequest(positions=[
            PositionIn(ticker=p.ticker, quantity=p.quantity, cost_basis=p.cost_basis)
            for p in positions
        ]))
