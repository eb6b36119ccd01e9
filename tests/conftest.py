from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from servicedesk.schemas import Ticket, TicketStatus
from servicedesk.services.db import build_engine, build_session_factory, init_db
from servicedesk.services.storage import MemoryStorage, SqlStorage
from servicedesk.services.tickets import TicketStore

START = datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_ticket(ticket_id: str, created_at: datetime = START, **fields) -> Ticket:
    defaults = {
        "name": f"Customer {ticket_id}",
        "phone": "0900000000",
        "status": TicketStatus.WAITING,
    }
    defaults.update(fields)
    return Ticket(id=ticket_id, created_at=created_at, **defaults)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage, clock) -> TicketStore:
    return TicketStore(storage, seed_demo_data=False, clock=clock)


@pytest.fixture
def sql_storage(tmp_path) -> SqlStorage:
    engine = build_engine(f"sqlite:///{tmp_path / 'tickets.db'}")
    init_db(engine)
    return SqlStorage(build_session_factory(engine))
