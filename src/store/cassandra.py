"""Cassandra-backed document store.

Records are stored as JSON text in two tables:
- ``interaction_records``: O(1) lookup by (collection, record_id)
- ``interaction_records_by_parent``: every record of one content item in a
  single partition, for the per-thread and per-item reaction queries

Both tables are written in one logged batch, so a cancelled or timed-out
write is either applied to both or to neither.
"""

import json
from typing import TYPE_CHECKING, Any

import structlog
from cassandra import OperationTimedOut, ReadTimeout, Unavailable, WriteTimeout
from cassandra.cluster import NoHostAvailable
from cassandra.query import BatchStatement

from src.interactions.exceptions import StoreUnavailableError

from .base import Filters, Record, matches


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)

PARENT_FIELD = "parent_id"

TRANSIENT_ERRORS = (
    NoHostAvailable,
    OperationTimedOut,
    ReadTimeout,
    Unavailable,
    WriteTimeout,
)


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

RECORDS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.interaction_records (
    collection TEXT,
    record_id TEXT,
    parent_id TEXT,
    body TEXT,
    PRIMARY KEY ((collection, record_id))
)
"""

RECORDS_BY_PARENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.interaction_records_by_parent (
    collection TEXT,
    parent_id TEXT,
    record_id TEXT,
    body TEXT,
    PRIMARY KEY ((collection, parent_id), record_id)
) WITH CLUSTERING ORDER BY (record_id ASC)
"""

INTERACTIONS_TABLES_CQL = [
    RECORDS_TABLE_CQL,
    RECORDS_BY_PARENT_TABLE_CQL,
]


class CassandraDocumentStore:
    """Document store on a cassandra-asyncio-driver session (``aexecute``)."""

    def __init__(self, session: "Session", keyspace: str) -> None:
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get_record = self.session.prepare(f"""
            SELECT parent_id, body FROM {self.keyspace}.interaction_records
            WHERE collection = ? AND record_id = ?
        """)

        self._scan_collection = self.session.prepare(f"""
            SELECT body FROM {self.keyspace}.interaction_records
            WHERE collection = ?
            ALLOW FILTERING
        """)

        self._get_by_parent = self.session.prepare(f"""
            SELECT body FROM {self.keyspace}.interaction_records_by_parent
            WHERE collection = ? AND parent_id = ?
        """)

        self._insert_record = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.interaction_records
            (collection, record_id, parent_id, body)
            VALUES (?, ?, ?, ?)
        """)

        self._insert_by_parent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.interaction_records_by_parent
            (collection, parent_id, record_id, body)
            VALUES (?, ?, ?, ?)
        """)

        self._delete_record = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.interaction_records
            WHERE collection = ? AND record_id = ?
        """)

        self._delete_by_parent = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.interaction_records_by_parent
            WHERE collection = ? AND parent_id = ? AND record_id = ?
        """)

    async def _execute(self, statement: Any, params: list[Any] | None = None) -> Any:
        try:
            return await self.session.aexecute(statement, params)
        except TRANSIENT_ERRORS as e:
            logger.warning(
                "cassandra_transient_error", error=str(e), error_type=type(e).__name__
            )
            raise StoreUnavailableError(f"Cassandra unavailable: {e}") from e

    async def get(self, collection: str, record_id: str) -> Record | None:
        rows = await self._execute(self._get_record, [collection, record_id])
        row = rows.one()
        return json.loads(row.body) if row else None

    async def query(self, collection: str, filters: Filters) -> list[Record]:
        parent_id = filters.get(PARENT_FIELD)
        if parent_id is not None:
            rows = await self._execute(self._get_by_parent, [collection, parent_id])
        else:
            rows = await self._execute(self._scan_collection, [collection])

        records = (json.loads(row.body) for row in rows)
        return [record for record in records if matches(record, filters)]

    async def put(self, collection: str, record_id: str, record: Record) -> None:
        body = json.dumps(record, separators=(",", ":"))
        parent_id = record.get(PARENT_FIELD)

        batch = BatchStatement()
        batch.add(self._insert_record, [collection, record_id, parent_id, body])
        if parent_id is not None:
            batch.add(self._insert_by_parent, [collection, parent_id, record_id, body])
        await self._execute(batch)

    async def delete(self, collection: str, record_id: str) -> None:
        rows = await self._execute(self._get_record, [collection, record_id])
        row = rows.one()
        if not row:
            return

        batch = BatchStatement()
        batch.add(self._delete_record, [collection, record_id])
        if row.parent_id is not None:
            batch.add(self._delete_by_parent, [collection, row.parent_id, record_id])
        await self._execute(batch)
