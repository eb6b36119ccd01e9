from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from servicedesk.schemas import Ticket, TicketPatch, TicketStatus, normalize_fee


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (150000, 150000),
        ("450000", 450000),
        ("120k", 120),
        (" 42 ", 42),
        (99.9, 99),
        ("", 0),
        ("abc", 0),
        (None, 0),
        (-5, 0),
        ("-20", 0),
        (float("nan"), 0),
        (True, 0),
    ],
)
def test_normalize_fee(raw, expected) -> None:
    assert normalize_fee(raw) == expected


def test_status_accepts_spacing_variants() -> None:
    assert TicketStatus("InProgress") is TicketStatus.IN_PROGRESS
    assert TicketStatus("in_progress") is TicketStatus.IN_PROGRESS
    assert TicketStatus("completed") is TicketStatus.COMPLETED
    with pytest.raises(ValueError):
        TicketStatus("Cancelled")


def test_naive_timestamps_become_utc() -> None:
    ticket = Ticket(id="t-1", created_at=datetime(2024, 1, 2, 9, 0))
    assert ticket.created_at == datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc)
    assert ticket.created_at.tzinfo is not None


def test_patch_reports_only_sent_fields() -> None:
    patch = TicketPatch.model_validate({"assignedTo": "An", "fee": "x"})
    assert patch.changes() == {"assigned_to": "An", "fee": 0}


def test_patch_forbids_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        TicketPatch.model_validate({"completedAt": None})
