"""In-process registry of open edit sessions."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from functools import lru_cache
from typing import Optional

from bodytrack.core.config import get_settings
from bodytrack.schemas.measurement import MeasurementRecord
from bodytrack.services.edit_session import MeasurementEditSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Open sessions keyed by UUID. Holds at most `max_sessions`; the oldest is evicted."""

    def __init__(self, max_sessions: int = 500) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[uuid.UUID, MeasurementEditSession] = OrderedDict()
        self._lock = threading.Lock()

    def open(
        self, baseline: Optional[MeasurementRecord] = None
    ) -> tuple[uuid.UUID, MeasurementEditSession]:
        session = MeasurementEditSession(baseline)
        session_id = uuid.uuid4()
        with self._lock:
            self._sessions[session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Edit session %s evicted (limit %d)", evicted, self.max_sessions)
        return session_id, session

    def get(self, session_id: uuid.UUID) -> MeasurementEditSession:
        """Raises KeyError for unknown or already closed sessions."""
        with self._lock:
            return self._sessions[session_id]

    def claim(self, session_id: uuid.UUID) -> MeasurementEditSession:
        """Remove and return a session so only one caller can submit it.

        Raises KeyError like get(). Hand it back with restore() if the submit fails.
        """
        with self._lock:
            return self._sessions.pop(session_id)

    def restore(self, session_id: uuid.UUID, session: MeasurementEditSession) -> None:
        with self._lock:
            self._sessions[session_id] = session

    def discard(self, session_id: uuid.UUID) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache
def get_session_store() -> SessionStore:
    """Process-wide store (FastAPI dependency)."""
    return SessionStore(max_sessions=get_settings().max_open_sessions)
