"""Domain models (Pydantic v2).

Request/response shapes of the pipeline plus thin, permissive views of the
API resources. Resource models only name identifying fields; everything else
the service returns is kept as extra attributes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from bkper.core.domain.http_method import HttpMethod


class RequestDescriptor(BaseModel):
    """One outbound call, frozen once built."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        min_length=1,
        description="Resource path relative to the API base URL (e.g. 'v5/user').",
    )
    method: HttpMethod = Field(
        default=HttpMethod.GET,
        description="HTTP verb.",
    )
    payload: Any = Field(
        default=None,
        description="JSON-serializable body, or a pre-encoded string.",
    )
    params: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Query parameters in insertion order (repeats allowed).",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Caller-supplied headers.",
    )


class ResponseEnvelope(BaseModel):
    """Decoded response of a single call."""

    status_code: int = Field(..., ge=100, le=599)
    data: Any = Field(default=None, description="Decoded JSON body (or raw text).")
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class _Resource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class User(_Resource):
    id: str | None = None
    name: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None


class Book(_Resource):
    id: str
    name: str | None = None
    owner_name: str | None = Field(default=None, alias="ownerName")
    permission: str | None = None
    time_zone: str | None = Field(default=None, alias="timeZone")
    fraction_digits: int | None = Field(default=None, alias="fractionDigits")
    properties: dict[str, str] = Field(default_factory=dict)


class Transaction(_Resource):
    id: str | None = None
    date: str | None = None
    amount: str | None = None
    description: str | None = None
    posted: bool | None = None


class TransactionPage(_Resource):
    items: list[Transaction] = Field(default_factory=list)
    cursor: str | None = None
