from .ticket import (
    SCHEMA_VERSION,
    STATUS_PRIORITY,
    ImportResponse,
    Snapshot,
    Statistics,
    StorageInfo,
    Ticket,
    TicketCreate,
    TicketPatch,
    TicketStatus,
    normalize_fee,
)

__all__ = [
    "SCHEMA_VERSION",
    "STATUS_PRIORITY",
    "ImportResponse",
    "Snapshot",
    "Statistics",
    "StorageInfo",
    "Ticket",
    "TicketCreate",
    "TicketPatch",
    "TicketStatus",
    "normalize_fee",
]
