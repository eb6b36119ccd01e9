from __future__ import annotations

import json

from servicedesk.schemas import TicketStatus
from servicedesk.services import query
from servicedesk.services.seed import build_demo_tickets, needs_seeding
from servicedesk.services.tickets import DEFAULT_STORAGE_KEY, TicketStore

from conftest import START


def test_demo_tickets_cover_every_status() -> None:
    tickets = build_demo_tickets(START)
    stats = query.compute_statistics(tickets)

    assert stats.total == 5
    assert stats.waiting_count == 2
    assert stats.in_progress_count == 1
    assert stats.completed_count == 2
    assert stats.total_revenue == 600000
    assert len({t.id for t in tickets}) == 5


def test_demo_timestamps_are_ordered() -> None:
    for ticket in build_demo_tickets(START):
        assert ticket.created_at <= START
        if ticket.in_progress_at:
            assert ticket.created_at <= ticket.in_progress_at
        if ticket.completed_at:
            assert ticket.in_progress_at <= ticket.completed_at
        if ticket.status is TicketStatus.WAITING:
            assert ticket.in_progress_at is None and ticket.completed_at is None


def test_seed_runs_once(storage, clock) -> None:
    store = TicketStore(storage, clock=clock)
    first = store.load()
    assert first.initialized is True
    assert len(first.tickets) == 5

    clock.advance(days=1)
    assert len(store.load().tickets) == 5
    assert [t.id for t in TicketStore(storage, clock=clock).get_all()] == [t.id for t in first.tickets]


def test_seed_skips_uninitialized_snapshot_with_tickets(storage, clock) -> None:
    store = TicketStore(storage, seed_demo_data=False, clock=clock)
    payload = {"version": 1, "initialized": False, "tickets": [
        {"id": "t-kept", "name": "A", "phone": "1", "createdAt": "2024-01-01T00:00:00Z", "status": "Waiting"},
    ]}
    assert store.import_snapshot(json.dumps(payload))

    seeded = TicketStore(storage, seed_demo_data=True, clock=clock)
    assert [t.id for t in seeded.get_all()] == ["t-kept"]


def test_seeding_disabled_leaves_store_empty(storage, clock) -> None:
    store = TicketStore(storage, seed_demo_data=False, clock=clock)
    assert store.get_all() == []
    assert json.loads(storage.get_item(DEFAULT_STORAGE_KEY))["initialized"] is False


def test_needs_seeding() -> None:
    assert needs_seeding(False, 0) is True
    assert needs_seeding(True, 0) is False
    assert needs_seeding(False, 3) is False
