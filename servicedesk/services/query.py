"""
Read-only views over a ticket list.

Every function takes a sequence of tickets and returns a new list (or a
summary); nothing here touches the store. Filters are independent predicates,
so applying them in any order gives the same result.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Sequence

from servicedesk.schemas import STATUS_PRIORITY, Statistics, Ticket, TicketStatus
from servicedesk.utils.time import end_of_day, get_local_timezone, parse_day, start_of_day

ALL = "all"

DateBound = date | datetime | str | None


def _is_all(value: object) -> bool:
    return value is None or value == "" or (isinstance(value, str) and value.lower() == ALL)


def filter_by_status(tickets: Iterable[Ticket], status: TicketStatus | str | None = ALL) -> list[Ticket]:
    if _is_all(status):
        return list(tickets)
    wanted = TicketStatus(status)
    return [ticket for ticket in tickets if ticket.status is wanted]


def filter_by_assignee(tickets: Iterable[Ticket], name: str | None = ALL) -> list[Ticket]:
    if _is_all(name):
        return list(tickets)
    return [ticket for ticket in tickets if ticket.assigned_to == name]


def filter_by_date_range(
    tickets: Iterable[Ticket],
    date_from: DateBound = None,
    date_to: DateBound = None,
    tz: str | None = None,
) -> list[Ticket]:
    tz = tz or get_local_timezone()
    result = list(tickets)
    if date_from:
        lower = start_of_day(parse_day(date_from, tz), tz)
        result = [ticket for ticket in result if ticket.created_at >= lower]
    if date_to:
        upper = end_of_day(parse_day(date_to, tz), tz)
        result = [ticket for ticket in result if ticket.created_at <= upper]
    return result


def search_text(tickets: Iterable[Ticket], query: str | None) -> list[Ticket]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(tickets)
    return [
        ticket
        for ticket in tickets
        if needle in ticket.name.lower() or needle in ticket.phone or needle in ticket.id.lower()
    ]


def sort_for_technician_view(tickets: Iterable[Ticket]) -> list[Ticket]:
    # newest first, then a stable pass groups by status priority
    newest_first = sorted(tickets, key=lambda ticket: ticket.created_at, reverse=True)
    return sorted(newest_first, key=lambda ticket: STATUS_PRIORITY[ticket.status])


def sort_for_admin_view(tickets: Iterable[Ticket]) -> list[Ticket]:
    return sorted(tickets, key=lambda ticket: ticket.created_at, reverse=True)


def compute_statistics(tickets: Sequence[Ticket]) -> Statistics:
    counts = {status: 0 for status in TicketStatus}
    revenue = 0
    for ticket in tickets:
        counts[ticket.status] += 1
        if ticket.status is TicketStatus.COMPLETED:
            revenue += ticket.fee
    return Statistics(
        total=len(tickets),
        waiting_count=counts[TicketStatus.WAITING],
        in_progress_count=counts[TicketStatus.IN_PROGRESS],
        completed_count=counts[TicketStatus.COMPLETED],
        total_revenue=revenue,
    )


def technician_worklist(
    tickets: Iterable[Ticket],
    status: TicketStatus | str | None = ALL,
    assignee: str | None = ALL,
) -> list[Ticket]:
    filtered = filter_by_assignee(filter_by_status(tickets, status), assignee)
    return sort_for_technician_view(filtered)


def admin_table(
    tickets: Iterable[Ticket],
    query: str | None = "",
    status: TicketStatus | str | None = ALL,
    assignee: str | None = ALL,
    date_from: DateBound = None,
    date_to: DateBound = None,
    tz: str | None = None,
) -> list[Ticket]:
    filtered = search_text(tickets, query)
    filtered = filter_by_status(filtered, status)
    filtered = filter_by_assignee(filtered, assignee)
    filtered = filter_by_date_range(filtered, date_from, date_to, tz=tz)
    return sort_for_admin_view(filtered)
