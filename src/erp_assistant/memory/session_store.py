"""
Session store for pending conversational flows.

Maps session id ("tenant:user") to its FlowState. This is the only mutable
state shared between requests, so the in-memory implementation provides
both map safety and per-session serialization.
"""
import logging
import threading
import time
import zlib
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from ..intent.types import FlowState

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """
    Protocol for flow-state storage.

    Implementations must be safe for concurrent callers.
    """

    @abstractmethod
    def inject(self, session_id: str, state: "FlowState") -> None:
        """Create or replace the flow state of a session."""

    @abstractmethod
    def extract(self, session_id: str) -> Optional["FlowState"]:
        """Return the live flow state, or None."""

    @abstractmethod
    def remove(self, session_id: str) -> None:
        """Drop the session; a missing session is not an error."""

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[None]:
        """
        Serialize work on one session.

        The default does nothing; stores shared between threads override it.
        """
        yield


class InMemorySessionStore(SessionStore):
    """
    Dictionary-backed store with lock striping and sliding expiry.

    Session ids hash onto a fixed number of re-entrant stripe locks, so
    messages for one session are linearized while other sessions proceed in
    parallel. A short guard lock protects the dictionary itself.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = 1800.0,
        lock_stripes: int = 64,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        :param ttl_seconds: Idle time after which a session expires; None disables expiry
        :param lock_stripes: Number of per-session lock stripes
        :param clock: Monotonic time source (injectable for tests)
        """
        if lock_stripes <= 0:
            raise ValueError("lock_stripes must be positive")
        self._ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self._clock = clock
        self._sessions: Dict[str, Tuple["FlowState", float]] = {}
        self._guard = threading.Lock()
        self._stripes = [threading.RLock() for _ in range(lock_stripes)]
        self._last_sweep = clock()

    def _stripe(self, session_id: str) -> threading.RLock:
        return self._stripes[zlib.crc32(session_id.encode("utf-8")) % len(self._stripes)]

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[None]:
        with self._stripe(session_id):
            yield

    def inject(self, session_id: str, state: "FlowState") -> None:
        if state is None:
            raise ValueError("state must not be None; use remove() to drop a session")
        now = self._clock()
        with self._guard:
            self._sessions[session_id] = (state, now)
            self._sweep_if_due(now)

    def extract(self, session_id: str) -> Optional["FlowState"]:
        now = self._clock()
        with self._guard:
            self._sweep_if_due(now)
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            state, touched = entry
            if self._expired(touched, now):
                del self._sessions[session_id]
                logger.info(f"Session {session_id} expired")
                return None
            # Sliding expiry
            self._sessions[session_id] = (state, now)
            return state

    def remove(self, session_id: str) -> None:
        with self._guard:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        """
        Drop every expired session.

        :return: Number of sessions removed
        """
        if self._ttl is None:
            return 0
        with self._guard:
            return self._sweep(self._clock())

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def _sweep_if_due(self, now: float) -> None:
        # Abandoned sessions are reclaimed by regular traffic, at most once per TTL
        if self._ttl is not None and now - self._last_sweep >= self._ttl:
            self._sweep(now)

    def _sweep(self, now: float) -> int:
        """Drop expired entries; caller holds the guard lock."""
        self._last_sweep = now
        expired = [sid for sid, (_, touched) in self._sessions.items() if self._expired(touched, now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def _expired(self, touched: float, now: float) -> bool:
        return self._ttl is not None and now - touched >= self._ttl
