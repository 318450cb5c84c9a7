"""Document store interface consumed by the interaction engine.

Records are JSON-compatible dicts grouped in named collections. Queries take
equality filters (``{"parent_id": "blog-42"}``); an empty mapping returns the
whole collection. Implementations raise ``StoreUnavailableError`` for
transient failures and nothing else for expected conditions (a missing record
is ``None`` from ``get`` and a no-op for ``delete``).
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


Record = dict[str, Any]
Filters = Mapping[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal CRUD + query access to persisted records."""

    async def get(self, collection: str, record_id: str) -> Record | None:
        """Fetch one record by id, or ``None`` when absent."""
        ...

    async def query(self, collection: str, filters: Filters) -> list[Record]:
        """Fetch every record of ``collection`` matching all ``filters``."""
        ...

    async def put(self, collection: str, record_id: str, record: Record) -> None:
        """Create or replace a record."""
        ...

    async def delete(self, collection: str, record_id: str) -> None:
        """Remove a record; deleting a missing record is a no-op."""
        ...


def matches(record: Record, filters: Filters) -> bool:
    """Check a record against equality filters."""
    return all(record.get(key) == value for key, value in filters.items())
