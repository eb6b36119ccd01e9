from __future__ import annotations

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from servicedesk.utils.time import ensure_utc

SCHEMA_VERSION = 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class TicketStatus(str, Enum):
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def _missing_(cls, value: object) -> TicketStatus | None:
        # accept "InProgress", "in_progress", "completed", ...
        if not isinstance(value, str):
            return None
        wanted = value.replace(" ", "").replace("_", "").lower()
        for member in cls:
            if member.value.replace(" ", "").lower() == wanted:
                return member
        return None


STATUS_PRIORITY = {
    TicketStatus.WAITING: 1,
    TicketStatus.IN_PROGRESS: 2,
    TicketStatus.COMPLETED: 3,
}


def normalize_fee(value: Any) -> int:
    """Coerce fee input to a non-negative whole amount; anything unreadable is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        amount = value
    elif isinstance(value, float):
        amount = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        amount = int(match.group(1)) if match else 0
    else:
        amount = 0
    return max(amount, 0)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ticket(CamelModel):
    id: str
    name: str = ""
    phone: str = ""
    address: str = ""
    description: str = ""
    images: list[str] = Field(default_factory=list)
    created_at: datetime
    status: TicketStatus = TicketStatus.WAITING
    assigned_to: str = ""
    in_progress_at: datetime | None = None
    completed_at: datetime | None = None
    root_cause: str = ""
    actions_taken: str = ""
    fee: int = 0

    @field_validator("name", "phone", "address", "description", "assigned_to", "root_cause", "actions_taken", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("fee", mode="before")
    @classmethod
    def _normalize_fee(cls, value: Any) -> int:
        return normalize_fee(value)

    @field_validator("created_at", "in_progress_at", "completed_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class TicketCreate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    name: str
    phone: str
    address: str = ""
    description: str = ""
    images: list[str] = Field(default_factory=list)

    @field_validator("name", "phone")
    @classmethod
    def _ensure_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("name and phone are required")
        return value


class TicketPatch(CamelModel):
    """Fields a technician may change on an open ticket."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    assigned_to: str | None = None
    status: TicketStatus | None = None
    root_cause: str | None = None
    actions_taken: str | None = None
    fee: int | None = None

    @field_validator("fee", mode="before")
    @classmethod
    def _normalize_fee(cls, value: Any) -> int | None:
        if value is None:
            return None
        return normalize_fee(value)

    def changes(self) -> dict[str, Any]:
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}


class Snapshot(CamelModel):
    version: int = SCHEMA_VERSION
    tickets: list[Ticket] = Field(default_factory=list)
    initialized: bool = False

    @field_validator("version", mode="before")
    @classmethod
    def _null_version(cls, value: Any) -> Any:
        return SCHEMA_VERSION if value is None else value

    @field_validator("initialized", mode="before")
    @classmethod
    def _null_initialized(cls, value: Any) -> Any:
        return False if value is None else value


class Statistics(CamelModel):
    total: int = 0
    waiting_count: int = 0
    in_progress_count: int = 0
    completed_count: int = 0
    total_revenue: int = 0


class StorageInfo(CamelModel):
    version: int
    total_tickets: int
    size_bytes: int
    size_text: str


class ImportResponse(CamelModel):
    status: str = "imported"
    total_tickets: int
