"""Wire schemas for the Ledger Service.

Requests are discriminated on ``action``. Read responses are validated
strictly: a missing or mistyped field is rejected instead of defaulted,
server-computed fields included.
"""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True, extra="ignore")

    row_index: int | str = Field(alias="rowIndex")   # opaque, ledger-assigned
    ticker: str
    quantity: float
    cost_basis: float = Field(alias="costBasis")
    price: float
    name: str
    change_pct: float = Field(alias="changePct")
    market_value: float = Field(alias="marketValue")
    total_return: float = Field(alias="totalReturn")


class ReadResponse(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    data: list[Position]
    total_value: float = Field(alias="totalValue")


class PositionIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticker: str
    quantity: float
    cost_basis: float = Field(alias="costBasis")


class AddRequest(PositionIn):
    action: Literal["add"] = "add"


class UpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["update"] = "update"
    row_index: int | str = Field(alias="rowIndex")
    quantity: float
    cost_basis: float = Field(alias="costBasis")


class DeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["delete"] = "delete"
    row_index: int | str = Field(alias="rowIndex")


class BulkAddRequest(BaseModel):
    action: Literal["bulkAdd"] = "bulkAdd"
    positions: list[PositionIn]


LedgerRequest = Annotated[
    Union[AddRequest, UpdateRequest, DeleteRequest, BulkAddRequest],
    Field(discriminator="action"),
]
