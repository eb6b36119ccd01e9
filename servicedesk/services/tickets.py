from __future__ import annotations

import json
import secrets
from datetime import date, datetime
from typing import Any, Callable, Mapping, Sequence

from loguru import logger
from pydantic import ValidationError

from servicedesk.core.config import AppConfig
from servicedesk.core.errors import DuplicateTicketError, TicketCompletedError
from servicedesk.schemas import (
    SCHEMA_VERSION,
    Snapshot,
    StorageInfo,
    Ticket,
    TicketCreate,
    TicketPatch,
    TicketStatus,
)
from servicedesk.services.db import build_engine, build_session_factory, init_db
from servicedesk.services.seed import build_demo_tickets, needs_seeding
from servicedesk.services.storage import KeyValueStorage, MemoryStorage, SqlStorage
from servicedesk.utils.time import ensure_utc, utc_now

DEFAULT_STORAGE_KEY = "ticketManagementData"
MEMORY_URL = "memory://"

_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_ticket_id(now: datetime | None = None) -> str:
    moment = now or utc_now()
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"t-{int(moment.timestamp() * 1000)}-{suffix}"


def backup_filename(day: date | None = None) -> str:
    day = day or utc_now().date()
    return f"ticket-backup-{day.isoformat()}.json"


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    return f"{size_bytes / (1024 * 1024):.2f} MB"


class TicketStore:
    """
    Owns the persisted snapshot of every ticket.

    Each operation re-reads the snapshot from storage and, when it mutates,
    writes the whole snapshot back before returning.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        seed_demo_data: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.key = key
        self.seed_demo_data = seed_demo_data
        self.clock = clock
        self.log = logger.bind(component="ticket-store", key=key)
        self._bootstrap()

    # -------- snapshot I/O --------

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    def _write(self, snapshot: Snapshot) -> None:
        self.storage.set_item(self.key, snapshot.model_dump_json(by_alias=True))

    def _reset(self) -> Snapshot:
        snapshot = Snapshot(version=SCHEMA_VERSION, tickets=[], initialized=False)
        self._write(snapshot)
        return snapshot

    def _read(self) -> Snapshot:
        raw = self.storage.get_item(self.key)
        if raw is None:
            self.log.info("No snapshot under key={key}; creating an empty one", key=self.key)
            return self._reset()
        try:
            return Snapshot.model_validate_json(raw)
        except ValidationError as exc:
            self.log.warning("Stored snapshot under key={key} is unreadable, resetting: {error}", key=self.key, error=exc)
            return self._reset()

    def _bootstrap(self) -> None:
        """Seed demo tickets into a brand-new store; runs only at construction."""
        snapshot = self._read()
        if not self.seed_demo_data or not needs_seeding(snapshot.initialized, len(snapshot.tickets)):
            return
        snapshot = Snapshot(
            version=snapshot.version,
            tickets=build_demo_tickets(self._now()),
            initialized=True,
        )
        self._write(snapshot)
        self.log.info("Seeded {count} demo tickets", count=len(snapshot.tickets))

    def load(self) -> Snapshot:
        return self._read()

    # -------- reads --------

    def get_all(self) -> list[Ticket]:
        return list(self.load().tickets)

    def get(self, ticket_id: str) -> Ticket | None:
        for ticket in self.load().tickets:
            if ticket.id == ticket_id:
                return ticket
        return None

    # -------- mutations --------

    def replace_all(self, tickets: Sequence[Ticket]) -> None:
        snapshot = self.load()
        snapshot.tickets = list(tickets)
        self._write(snapshot)

    def add(self, ticket: Ticket) -> Ticket:
        snapshot = self.load()
        if any(existing.id == ticket.id for existing in snapshot.tickets):
            raise DuplicateTicketError(ticket.id)
        snapshot.tickets.append(ticket)
        self._write(snapshot)
        self.log.info("Added ticket id={ticket_id}", ticket_id=ticket.id)
        return ticket

    def create(self, payload: TicketCreate) -> Ticket:
        now = self._now()
        ticket = Ticket(
            id=generate_ticket_id(now),
            name=payload.name,
            phone=payload.phone,
            address=payload.address,
            description=payload.description,
            images=list(payload.images),
            created_at=now,
            status=TicketStatus.WAITING,
        )
        return self.add(ticket)

    def _status_stamps(self, ticket: Ticket, new_status: TicketStatus | None) -> dict[str, datetime]:
        if new_status is None:
            return {}
        now = self._now()
        stamps: dict[str, datetime] = {}
        if new_status is not TicketStatus.WAITING and ticket.in_progress_at is None:
            stamps["in_progress_at"] = now
        if new_status is TicketStatus.COMPLETED and ticket.completed_at is None:
            stamps["completed_at"] = now
        return stamps

    def update(self, ticket_id: str, patch: TicketPatch | Mapping[str, Any]) -> Ticket | None:
        """
        Merge ``patch`` onto the first ticket with ``ticket_id``.

        Returns None for an unknown id, whatever the patch holds. For a known
        ticket, a mapping that is not a valid ``TicketPatch`` raises pydantic's
        ``ValidationError`` and a Completed ticket raises ``TicketCompletedError``.
        """
        snapshot = self.load()
        index = next((i for i, ticket in enumerate(snapshot.tickets) if ticket.id == ticket_id), None)
        if index is None:
            self.log.info("Update skipped, ticket id={ticket_id} not found", ticket_id=ticket_id)
            return None

        current = snapshot.tickets[index]
        if current.status is TicketStatus.COMPLETED:
            raise TicketCompletedError(ticket_id)

        if not isinstance(patch, TicketPatch):
            patch = TicketPatch.model_validate(patch)

        changes = patch.changes()
        changes.update(self._status_stamps(current, changes.get("status")))
        updated = current.model_copy(update=changes)
        snapshot.tickets[index] = updated
        self._write(snapshot)
        self.log.info(
            "Updated ticket id={ticket_id} fields={fields}",
            ticket_id=ticket_id,
            fields=sorted(changes),
        )
        return updated

    def remove(self, ticket_id: str) -> None:
        snapshot = self.load()
        remaining = [ticket for ticket in snapshot.tickets if ticket.id != ticket_id]
        if len(remaining) == len(snapshot.tickets):
            return
        snapshot.tickets = remaining
        self._write(snapshot)
        self.log.info("Removed ticket id={ticket_id}", ticket_id=ticket_id)

    def clear(self) -> None:
        snapshot = self.load()
        self._write(Snapshot(version=snapshot.version, tickets=[], initialized=True))
        self.log.info("Cleared all tickets")

    # -------- backup --------

    def export_snapshot(self) -> str:
        return self.load().model_dump_json(by_alias=True, indent=2)

    def import_snapshot(self, text: str | bytes) -> bool:
        try:
            payload = json.loads(text)
        except (TypeError, ValueError, RecursionError) as exc:
            self.log.warning("Import rejected, payload is not JSON: {error}", error=type(exc).__name__)
            return False

        if not isinstance(payload, dict) or not isinstance(payload.get("tickets"), list):
            self.log.warning("Import rejected, payload has no tickets list")
            return False

        # every ticket must carry at least an id and createdAt; a partial import is refused outright
        try:
            snapshot = Snapshot.model_validate(payload)
        except (ValidationError, RecursionError) as exc:
            self.log.warning("Import rejected, invalid ticket data: {error}", error=exc)
            return False

        self._write(snapshot)
        self.log.info("Imported snapshot with {count} tickets", count=len(snapshot.tickets))
        return True

    def storage_info(self) -> StorageInfo:
        snapshot = self.load()
        size_bytes = len(snapshot.model_dump_json(by_alias=True).encode("utf-8"))
        return StorageInfo(
            version=snapshot.version,
            total_tickets=len(snapshot.tickets),
            size_bytes=size_bytes,
            size_text=format_size(size_bytes),
        )


def get_ticket_store(settings: AppConfig) -> TicketStore:
    if settings.database_url == MEMORY_URL:
        storage: KeyValueStorage = MemoryStorage()
    else:
        engine = build_engine(settings.database_url)
        init_db(engine)
        storage = SqlStorage(build_session_factory(engine))
    return TicketStore(storage, key=settings.storage_key, seed_demo_data=settings.seed_demo_data)
