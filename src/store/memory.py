"""In-memory document store for tests and local development."""

import copy
from collections import defaultdict

from .base import Filters, Record, matches


class InMemoryDocumentStore:
    """Dict-backed store; records are copied on the way in and out."""

    def __init__(self) -> None:
        self._collections: defaultdict[str, dict[str, Record]] = defaultdict(dict)

    async def get(self, collection: str, record_id: str) -> Record | None:
        record = self._collections[collection].get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def query(self, collection: str, filters: Filters) -> list[Record]:
        return [
            copy.deepcopy(record)
            for record in self._collections[collection].values()
            if matches(record, filters)
        ]

    async def put(self, collection: str, record_id: str, record: Record) -> None:
        self._collections[collection][record_id] = copy.deepcopy(record)

    async def delete(self, collection: str, record_id: str) -> None:
        self._collections[collection].pop(record_id, None)

    def count(self, collection: str) -> int:
        """Number of records currently held in ``collection``."""
        return len(self._collections[collection])
