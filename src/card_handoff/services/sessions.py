"""In-memory registry of handoff sessions with TTL eviction."""

import asyncio
import contextlib
import dataclasses
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from card_handoff.domain.cards import CardRecord
from card_handoff.domain.errors import SessionExpiredError, SessionNotFoundError
from card_handoff.domain.sessions import Session, SessionStatus

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


@dataclass
class SessionRegistry:
    """Owns every live session and evicts them once their TTL elapses.

    Sessions are immutable; each write swaps the stored object under the
    lock, so readers see either the old or the new session, never a mix.
    An expired session is reported as absent by every accessor, whether or
    not the periodic sweep has removed it yet.

    ``overwrite_ready`` decides what a second successful upload does to a
    session that is already ready: replace the record (default) or keep the
    first one.
    """

    ttl_seconds: int = 300
    sweep_interval_seconds: float = 30.0
    clock: Callable[[], datetime] = utc_now
    overwrite_ready: bool = True
    _sessions: dict[str, Session] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _sweep_task: asyncio.Task[None] | None = field(
        default=None, init=False, repr=False
    )

    def create(self) -> Session:
        """Create a pending session with a fresh id."""
        created_at = self.clock()
        with self._lock:
            session_id = str(uuid4())
            while session_id in self._sessions:
                session_id = str(uuid4())
            session = Session(
                id=session_id,
                created_at=created_at,
                expires_at=created_at + timedelta(seconds=self.ttl_seconds),
            )
            self._sessions[session_id] = session
        _logger.info("Session created: id=%s", session_id)
        return session

    def get(self, session_id: str) -> Session | None:
        """Return a live session, or None when unknown or expired."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self.clock()):
                self._sessions.pop(session_id, None)
                return None
            return session

    def lookup(self, session_id: str) -> Session:
        """Return a live session or raise not-found / expired."""
        with self._lock:
            return self._require_live(session_id)

    def attach_result(self, session_id: str, record: CardRecord) -> Session:
        """Mark a live session ready with its card record."""
        with self._lock:
            session = self._require_live(session_id)
            if session.status is SessionStatus.READY:
                if not self.overwrite_ready:
                    _logger.info("Keeping first result: id=%s", session_id)
                    return session
                _logger.info("Replacing earlier result: id=%s", session_id)
            updated = dataclasses.replace(
                session, status=SessionStatus.READY, record=record
            )
            self._sessions[session_id] = updated
            return updated

    def mark_delivered(self, session_id: str) -> Session | None:
        """Record the first delivery of a ready session to the desktop."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.status is not SessionStatus.READY:
                return session
            if session.delivered_at is None:
                session = dataclasses.replace(session, delivered_at=self.clock())
                self._sessions[session_id] = session
            return session

    def sweep(self) -> int:
        """Remove every expired session and return how many were dropped."""
        now = self.clock()
        with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.is_expired(now)
            ]
            for session_id in expired:
                del self._sessions[session_id]
        if expired:
            _logger.info("Swept expired sessions: count=%s", len(expired))
        return len(expired)

    def active_count(self) -> int:
        """Return the number of stored sessions."""
        with self._lock:
            return len(self._sessions)

    async def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_forever())

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task = self._sweep_task
        self._sweep_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _require_live(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError()
        if session.is_expired(self.clock()):
            del self._sessions[session_id]
            raise SessionExpiredError()
        return session

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep()
