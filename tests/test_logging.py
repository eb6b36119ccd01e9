from __future__ import annotations

import logging

from loguru import logger

from servicedesk.core.logging import setup_logging
from servicedesk.services.storage import MemoryStorage
from servicedesk.services.tickets import TicketStore


def _capture() -> tuple[list[str], int]:
    lines: list[str] = []
    handler_id = logger.add(lambda message: lines.append(str(message).strip()), format="{extra[component]} {message}")
    return lines, handler_id


def test_stdlib_records_reach_loguru() -> None:
    setup_logging("DEBUG")
    lines, handler_id = _capture()
    try:
        logging.getLogger("sqlalchemy.pool").warning("pool exhausted")
    finally:
        logger.remove(handler_id)

    assert "sqlalchemy.pool pool exhausted" in lines


def test_store_messages_carry_component(clock) -> None:
    setup_logging("DEBUG")
    lines, handler_id = _capture()
    try:
        store = TicketStore(MemoryStorage(), seed_demo_data=False, clock=clock)
        store.import_snapshot("not json")
    finally:
        logger.remove(handler_id)

    assert any(line.startswith("ticket-store Import rejected") for line in lines)
