"""Per-key critical sections for read-then-write sequences.

A reaction toggle reads the user's current record and writes the next state.
Two in-flight toggles for the same (content item, user) pair must not
interleave, or both could read "none" and both write "like". Operations on
different keys never contend.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager, suppress
from typing import TYPE_CHECKING, Protocol

import structlog
from redis.exceptions import LockError, RedisError

from .exceptions import StoreUnavailableError


if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.lock import Lock


logger = structlog.get_logger(__name__)


class KeyedLock(Protocol):
    """Mutual exclusion scoped to a string key."""

    def hold(self, key: str) -> AbstractAsyncContextManager[None]:
        """Async context manager holding the lock for ``key``."""
        ...


class LocalKeyedLock:
    """One ``asyncio.Lock`` per key within a single process.

    Locks are reclaimed once no task holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class RedisKeyedLock:
    """Distributed per-key lock on Redis, for multi-worker deployments.

    ``timeout`` is the lease on the Redis key. While the block runs the lease
    is renewed every ``timeout / 3`` seconds, so a slow store call cannot
    outlive it; a crashed holder still frees the key after ``timeout``.
    ``blocking_timeout`` bounds how long a caller waits for a busy key.

    Redis errors while acquiring are retried ``attempts`` extra times with
    exponential backoff from ``backoff_seconds``. Every failure surfaces as a
    retryable ``StoreUnavailableError``, including a lease found lost at
    release: the block's write may then have raced another holder, so the
    caller must reload instead of trusting its result.
    """

    KEY_PREFIX = "interactions:lock:"

    def __init__(
        self,
        redis: "Redis",
        timeout: float = 10.0,
        blocking_timeout: float = 5.0,
        attempts: int = 2,
        backoff_seconds: float = 0.1,
    ) -> None:
        self.redis = redis
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds

    async def _acquire(self, lock: "Lock", key: str) -> None:
        attempt = 0
        while True:
            try:
                acquired = await lock.acquire()
                break
            except RedisError as e:
                if attempt >= self.attempts:
                    logger.warning("lock_backend_error", key=key, error=str(e))
                    raise StoreUnavailableError("Lock service unavailable") from e
                delay = self.backoff_seconds * (2**attempt)
                attempt += 1
                logger.warning(
                    "lock_acquire_retry",
                    key=key,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)

        if not acquired:
            logger.warning("lock_acquire_timeout", key=key)
            raise StoreUnavailableError("Timed out waiting for a concurrent update")

    async def _keep_alive(self, lock: "Lock", key: str) -> None:
        interval = self.timeout / 3
        while True:
            await asyncio.sleep(interval)
            try:
                await lock.reacquire()
            except RedisError as e:
                logger.warning("lock_renewal_failed", key=key, error=str(e))
                return

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{self.KEY_PREFIX}{key}",
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        await self._acquire(lock, key)

        renewal = asyncio.create_task(self._keep_alive(lock, key))
        try:
            yield
        except BaseException:
            await self._stop(renewal)
            try:
                await lock.release()
            except RedisError as e:
                logger.warning("lock_release_failed", key=key, error=str(e))
            raise

        await self._stop(renewal)
        try:
            await lock.release()
        except LockError as e:
            logger.warning("lock_expired_before_release", key=key)
            raise StoreUnavailableError(
                "Lock expired during update; reload and retry"
            ) from e
        except RedisError as e:
            # Lease still expires on its own.
            logger.warning("lock_release_failed", key=key, error=str(e))

    @staticmethod
    async def _stop(renewal: "asyncio.Task[None]") -> None:
        renewal.cancel()
        with suppress(asyncio.CancelledError):
            await renewal
