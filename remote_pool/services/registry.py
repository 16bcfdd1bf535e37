"""Concurrency-safe table of pooled sessions.

Locking Strategy:
- One `asyncio.Lock` serializes every mutation (acquire, insert, evict, drain)
- Network I/O never happens under the lock; callers connect first, then
  insert with compare-and-set semantics
- Removing an entry and disposing its session happen under the same lock
  hold, so a disposed session is never visible in the table
- A leased session is marked in use under the lock, so the reaper never
  closes a session with an operation still running on it

LRU Eviction:
- OrderedDict with move_to_end() tracks recency
- When the table is full, the oldest entries are evicted before an insert
"""

import asyncio
import logging
import time
from collections import OrderedDict

from remote_pool.exceptions import PoolClosedError
from remote_pool.models import Session, TargetDescriptor, TargetIdentity

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps target identity to its single live Session."""

    def __init__(self, max_size: int = 100) -> None:
        """Initialize an empty registry.

        Args:
            max_size: Maximum number of sessions held (must be > 0)

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {max_size}")

        self.max_size = max_size
        self._sessions: OrderedDict[TargetIdentity, Session] = OrderedDict()
        self._lock = asyncio.Lock()
        self._closed = False

    def _remove_locked(self, identity: TargetIdentity, reason: str) -> Session | None:
        session = self._sessions.pop(identity, None)
        if session is not None:
            logger.info(
                "Closing %s session to %s (pool_size=%d)",
                reason,
                identity,
                len(self._sessions),
            )
            session.dispose()
        return session

    @staticmethod
    def _mark_used(session: Session, lease: bool) -> None:
        if lease:
            session.retain()
        else:
            session.touch()

    async def acquire(self, target: TargetDescriptor, lease: bool = False) -> Session | None:
        """Return the live session for target, stamping its last use.

        Dead sessions, and sessions opened with a different credential than
        target carries, are removed and disposed.

        Args:
            target: Descriptor to look up
            lease: Mark the returned session in use; the caller must call
                Session.release() when its operation finishes

        Returns:
            Reusable session, or None if the caller must connect
        """
        identity = target.identity
        async with self._lock:
            session = self._sessions.get(identity)
            if session is None:
                return None

            if not session.is_alive:
                self._remove_locked(identity, "dead")
                return None

            if not session.matches(target):
                self._remove_locked(identity, "credential-changed")
                return None

            self._mark_used(session, lease)
            self._sessions.move_to_end(identity)
            logger.debug(
                "Reusing existing session to %s (pool_size=%d)",
                identity,
                len(self._sessions),
            )
            return session

    async def insert_or_adopt(self, session: Session, lease: bool = False) -> Session:
        """Insert a freshly connected session unless another caller won.

        If a live session for the same identity was inserted while this one
        was connecting, the newcomer is disposed and the incumbent returned.
        With lease set, whichever session is returned is marked in use.

        Returns:
            The session now registered for the identity

        Raises:
            PoolClosedError: If the registry has been drained for shutdown
        """
        identity = session.identity
        async with self._lock:
            if self._closed:
                session.dispose()
                raise PoolClosedError(identity)

            incumbent = self._sessions.get(identity)
            if incumbent is not None:
                if incumbent.is_alive:
                    logger.debug(
                        "Lost connect race for %s, adopting existing session", identity
                    )
                    self._mark_used(incumbent, lease)
                    self._sessions.move_to_end(identity)
                    session.dispose()
                    return incumbent
                self._remove_locked(identity, "dead")

            while len(self._sessions) >= self.max_size:
                oldest = next(iter(self._sessions))
                logger.info(
                    "Pool at capacity (%d/%d), evicting LRU: %s",
                    len(self._sessions),
                    self.max_size,
                    oldest,
                )
                self._remove_locked(oldest, "lru")

            self._mark_used(session, lease)
            self._sessions[identity] = session
            logger.info(
                "SSH session established to %s (pool_size=%d/%d)",
                identity,
                len(self._sessions),
                self.max_size,
            )
            return session

    async def evict(
        self,
        identity: TargetIdentity,
        session: Session | None = None,
        reason: str = "evicted",
    ) -> bool:
        """Remove and dispose the session for identity.

        Args:
            identity: Key to remove
            session: If given, only remove the entry when it is this object
            reason: Reason shown in the log line

        Returns:
            True if an entry was removed
        """
        async with self._lock:
            current = self._sessions.get(identity)
            if current is None or (session is not None and current is not session):
                if session is not None:
                    session.dispose()
                return False
            self._remove_locked(identity, reason)
            return True

    async def evict_idle(self, idle_timeout: float, now: float | None = None) -> int:
        """Remove sessions idle longer than idle_timeout or found dead.

        Sessions with an operation in flight are never idle.

        Returns:
            Number of sessions removed
        """
        if now is None:
            now = time.monotonic()

        removed = 0
        async with self._lock:
            for identity, session in list(self._sessions.items()):
                if not session.is_alive:
                    self._remove_locked(identity, "dead")
                    removed += 1
                elif not session.is_busy and session.idle_for(now) > idle_timeout:
                    self._remove_locked(identity, "idle")
                    removed += 1
        return removed

    async def drain(self) -> int:
        """Remove and dispose every session and refuse further inserts.

        Returns:
            Number of sessions removed
        """
        async with self._lock:
            self._closed = True
            identities = list(self._sessions)
            for identity in identities:
                self._remove_locked(identity, "shutdown")
        return len(identities)

    def get(self, identity: TargetIdentity) -> Session | None:
        """Optimistic read without taking the lock."""
        return self._sessions.get(identity)

    @property
    def size(self) -> int:
        return len(self._sessions)

    @property
    def identities(self) -> list[TargetIdentity]:
        return list(self._sessions)

    @property
    def is_closed(self) -> bool:
        return self._closed
