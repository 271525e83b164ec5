"""
AccountLock - per-account lock for ledger workflows.

Serialises every workflow that reads and then writes an account balance,
closing the read-modify-write race between concurrent requests that
touch the same account.

Backends:
- Redis (``redis.asyncio`` Lock) when REDIS_URL is configured, so the
  lock holds across workers and hosts.
- In-process ``asyncio.Lock`` registry otherwise (single worker).

Usage:
    from app.utils.account_lock import AccountLock

    async with AccountLock([account_id]):
        # Only one workflow at a time for this account
        ...

Notes:
    - Lock key format: ``lock:account:{account_id}``
    - Several accounts are locked in ascending id order
    - Acquisition waits at most ACCOUNT_LOCK_WAIT_SECONDS, then raises
      LedgerConcurrencyException (HTTP 409)
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from redis.exceptions import LockError

from app.core.config import get_settings
from app.core.redis_client import get_redis_client, is_redis_configured
from app.utils.error_handler import LedgerConcurrencyException

logger = logging.getLogger(__name__)

__all__ = ["AccountLock", "LocalLockBackend", "RedisLockBackend", "get_lock_backend"]


class LocalLockBackend:
    """
    Keyed asyncio.Lock registry.

    Entries are dropped once no task holds or waits for them.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    async def acquire(self, key: str, wait_seconds: float, timeout_seconds: float) -> Optional[Any]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await asyncio.wait_for(lock.acquire(), timeout=wait_seconds)
        except asyncio.TimeoutError:
            self._forget(key)
            return None
        return key

    async def release(self, handle: Any) -> None:
        lock = self._locks.get(handle)
        if lock is not None and lock.locked():
            lock.release()
        self._forget(handle)

    def _forget(self, key: str) -> None:
        remaining = self._users.get(key, 0) - 1
        if remaining <= 0:
            self._users.pop(key, None)
            self._locks.pop(key, None)
        else:
            self._users[key] = remaining

    def held_keys(self) -> List[str]:
        return [key for key, lock in self._locks.items() if lock.locked()]


class RedisLockBackend:
    """Redis locks with a TTL so a crashed worker cannot hold an account forever."""

    def __init__(self, client=None):
        self.client = client or get_redis_client()

    async def acquire(self, key: str, wait_seconds: float, timeout_seconds: float) -> Optional[Any]:
        lock = self.client.lock(key, timeout=timeout_seconds, blocking_timeout=wait_seconds)
        acquired = await lock.acquire()
        return lock if acquired else None

    async def release(self, handle: Any) -> None:
        try:
            await handle.release()
        except LockError as e:
            # TTL elapsed before release
            logger.warning(f"Lock '{handle.name}' expired before release: {e}")


_local_backend = LocalLockBackend()


def get_lock_backend():
    """Redis backend when configured, otherwise the shared in-process registry."""
    if is_redis_configured():
        return RedisLockBackend()
    return _local_backend


class AccountLock:
    """
    Lock one or more accounts for the duration of a workflow.

    None entries are ignored, duplicates are collapsed.
    """

    def __init__(
        self,
        account_ids: Iterable[Optional[int]],
        wait_seconds: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
        backend=None,
    ):
        settings = get_settings()
        self.account_ids = sorted({account_id for account_id in account_ids if account_id is not None})
        self.wait_seconds = wait_seconds if wait_seconds is not None else settings.ACCOUNT_LOCK_WAIT_SECONDS
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.ACCOUNT_LOCK_TIMEOUT_SECONDS
        )
        self.backend = backend or get_lock_backend()
        self._handles: List[Any] = []
        self._start_time: Optional[float] = None

    @staticmethod
    def key_for(account_id: int) -> str:
        return f"lock:account:{account_id}"

    @property
    def acquired(self) -> bool:
        return bool(self._handles)

    async def acquire(self) -> None:
        """
        Acquire every account lock in ascending id order.

        Raises:
            LedgerConcurrencyException: If a lock is not obtained in time
        """
        self._start_time = time.time()
        for account_id in self.account_ids:
            handle = await self.backend.acquire(self.key_for(account_id), self.wait_seconds, self.timeout_seconds)
            if handle is None:
                await self.release()
                logger.warning(f"⏳ Account {account_id} busy after {self.wait_seconds}s")
                raise LedgerConcurrencyException(
                    message=f"Account {account_id} is being updated by another operation, retry later",
                    account_id=account_id,
                )
            self._handles.append(handle)
            logger.debug(f"🔒 Acquired lock for account {account_id}")

    async def release(self) -> None:
        """Release held locks in reverse order."""
        while self._handles:
            handle = self._handles.pop()
            await self.backend.release(handle)
        if self._start_time is not None and self.account_ids:
            logger.debug(
                f"🔓 Released account locks {self.account_ids} "
                f"(held for {time.time() - self._start_time:.3f}s)"
            )
        self._start_time = None

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.release()
        return False
