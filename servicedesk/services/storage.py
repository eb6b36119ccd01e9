"""
Host storage for the ticket snapshot.

The store keeps its whole state as one text blob under a single key, so a
backend only has to offer get/set/remove of strings. ``SqlStorage`` persists the
blobs in a SQLAlchemy table; ``MemoryStorage`` keeps them in a dict and is meant
for tests and throwaway sessions.
"""
from __future__ import annotations

from typing import Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from servicedesk.core.errors import StorageError
from servicedesk.models.storage_item import StorageItem
from servicedesk.services.db import db_session
from servicedesk.utils.time import utc_now

log = logger.bind(component="storage")


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SqlStorage:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get_item(self, key: str) -> str | None:
        try:
            with db_session(self.session_factory) as session:
                item = session.get(StorageItem, key)
                return item.value if item else None
        except SQLAlchemyError as exc:
            log.error("Reading storage key={key} failed: {error}", key=key, error=exc)
            raise StorageError(f"Could not read '{key}' from storage") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            with db_session(self.session_factory) as session:
                item = session.get(StorageItem, key)
                if item:
                    item.value = value
                    item.updated_at = utc_now()
                else:
                    session.add(StorageItem(key=key, value=value, updated_at=utc_now()))
        except SQLAlchemyError as exc:
            log.error("Writing storage key={key} failed: {error}", key=key, error=exc)
            raise StorageError(f"Could not write '{key}' to storage") from exc
        log.debug("Persisted storage key={key} ({size} chars)", key=key, size=len(value))

    def remove_item(self, key: str) -> None:
        try:
            with db_session(self.session_factory) as session:
                item = session.get(StorageItem, key)
                if item:
                    session.delete(item)
        except SQLAlchemyError as exc:
            log.error("Removing storage key={key} failed: {error}", key=key, error=exc)
            raise StorageError(f"Could not remove '{key}' from storage") from exc
