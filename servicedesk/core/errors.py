from __future__ import annotations


class ServiceDeskError(Exception):
    """Base class for errors raised by the ticket store."""


class StorageError(ServiceDeskError):
    """The host storage could not be read or written."""


class DuplicateTicketError(ServiceDeskError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket {ticket_id} already exists")
        self.ticket_id = ticket_id


class TicketCompletedError(ServiceDeskError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f"Ticket {ticket_id} is completed and can no longer be edited")
        self.ticket_id = ticket_id
