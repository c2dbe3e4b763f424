"""
Session state store.

Process-wide map from session id to SessionState with:
- a per-session lock so turns for the same session never interleave,
- TTL eviction of idle sessions driven by an injected clock,
- a bound on the number of live sessions (least recently active evicted).

Reads hand out deep copies; a turn works on its copy and commits it
back only when it completes, so a failed turn leaves the last good
state in place.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from concierge.shared.config import DEFAULT_CONFIG
from concierge.shared.contracts.session_state import SessionState


logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory session store with per-id locking and TTL eviction."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CONFIG.session_ttl_seconds,
        max_sessions: int = DEFAULT_CONFIG.max_active_sessions,
        clock: Callable[[], float] = time.monotonic,
        lock_factory: Callable[[], Any] = threading.Lock,
    ):
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        self._lock_factory = lock_factory
        self._sessions: Dict[str, SessionState] = {}
        self._locks: Dict[str, Any] = {}
        # Turns holding or waiting on each session lock
        self._lock_users: Dict[str, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[None]:
        """
        Serialize turns for one session id.

        The lock stays registered while any turn holds or waits on it, so
        eviction can never hand a later turn a second lock for the same id.
        A lock for an id with no committed session is dropped on release.
        """
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = self._lock_factory()
            self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._lock_users[session_id] -= 1
                if self._lock_users[session_id] == 0:
                    del self._lock_users[session_id]
                    if session_id not in self._sessions:
                        self._locks.pop(session_id, None)

    def tracked_locks(self) -> int:
        """Number of session locks currently registered."""
        with self._guard:
            return len(self._locks)

    def _expired(self, state: SessionState, now: float) -> bool:
        return self._ttl is not None and now - state.last_active > self._ttl

    def load(self, session_id: str) -> SessionState:
        """
        Return a working copy of the session, creating it on first contact.

        An expired session is discarded and replaced by a fresh one.
        """
        now = self._clock()
        with self._guard:
            state = self._sessions.get(session_id)
            if state is not None and self._expired(state, now):
                logger.info(f"[session={session_id}] [store] Session expired, starting fresh")
                del self._sessions[session_id]
                state = None
            if state is None:
                return SessionState(session_id=session_id, created_at=now, last_active=now)
            return state.model_copy(deep=True)

    def get(self, session_id: str) -> Optional[SessionState]:
        """Read-only snapshot of the committed state, if any."""
        with self._guard:
            state = self._sessions.get(session_id)
            return state.model_copy(deep=True) if state is not None else None

    def commit(self, state: SessionState) -> None:
        """Persist a completed turn's state."""
        now = self._clock()
        committed = state.model_copy(deep=True)
        committed.last_active = now
        with self._guard:
            self._sessions[state.session_id] = committed
            self._evict_locked(now)

    def evict_expired(self) -> int:
        """Drop idle sessions; returns how many were removed."""
        with self._guard:
            return self._evict_locked(self._clock())

    def _evict_locked(self, now: float) -> int:
        removed = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        overflow = len(self._sessions) - len(removed) - self._max_sessions
        if overflow > 0:
            live = sorted(
                (s for sid, s in self._sessions.items() if sid not in removed),
                key=lambda s: s.last_active,
            )
            removed.extend(s.session_id for s in live[:overflow])

        for sid in removed:
            del self._sessions[sid]
            if sid not in self._lock_users:
                self._locks.pop(sid, None)
        if removed:
            logger.info(f"[store] Evicted {len(removed)} sessions | live={len(self._sessions)}")
        return len(removed)
