"""Bounded retry for transient store failures.

Each store call is retried on its own. ``put`` and ``delete`` address a fixed
record id, so replaying one after an ambiguous timeout cannot create a second
record or remove a different one.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from src.interactions.exceptions import StoreUnavailableError

from .base import DocumentStore, Filters, Record


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RetryingDocumentStore:
    """Wrap a store and retry ``StoreUnavailableError`` with exponential backoff."""

    def __init__(
        self,
        store: DocumentStore,
        attempts: int = 2,
        backoff_seconds: float = 0.1,
    ) -> None:
        """Initialize the wrapper.

        Args:
            store: Backend store to delegate to.
            attempts: Extra attempts after the first failure.
            backoff_seconds: Delay before the first retry; doubles each time.
        """
        self.store = store
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds

    async def _call(
        self, operation: str, func: Callable[[], Awaitable[T]], collection: str
    ) -> T:
        attempt = 0
        while True:
            try:
                return await func()
            except StoreUnavailableError as e:
                if attempt >= self.attempts:
                    logger.error(
                        "store_retry_exhausted",
                        operation=operation,
                        collection=collection,
                        attempts=attempt + 1,
                        error=e.message,
                    )
                    raise
                delay = self.backoff_seconds * (2**attempt)
                attempt += 1
                logger.warning(
                    "store_retry",
                    operation=operation,
                    collection=collection,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=e.message,
                )
                await asyncio.sleep(delay)

    async def get(self, collection: str, record_id: str) -> Record | None:
        return await self._call(
            "get", lambda: self.store.get(collection, record_id), collection
        )

    async def query(self, collection: str, filters: Filters) -> list[Record]:
        return await self._call(
            "query", lambda: self.store.query(collection, filters), collection
        )

    async def put(self, collection: str, record_id: str, record: Record) -> None:
        await self._call(
            "put", lambda: self.store.put(collection, record_id, record), collection
        )

    async def delete(self, collection: str, record_id: str) -> None:
        await self._call(
            "delete", lambda: self.store.delete(collection, record_id), collection
        )
