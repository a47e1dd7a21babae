"""In-memory transcript session store with TTL cleanup.

WHY: Over HTTP, each open transcript (one episode in one browser tab)
needs its own TranscriptView (pages, playback position, selection, and
notes) kept on the server between requests. Notes are deliberately not
persisted: a session lives as long as the user keeps using it.

HOW: Three pieces work together:
  Session       - dataclass holding a TranscriptView, the RecordingPlayer
                  that collects its seek commands, and access timestamps
  SessionStore  - thread-safe dict-based store with create/get/list/delete
                  and TTL cleanup
  Session.lock  - serialises commands on one view (FastAPI runs sync
                  endpoints in a thread pool)

RULES:
- Store mutations are protected by threading.Lock
- Commands on a view run under that session's own lock
- Session IDs are UUID4 hex strings generated at creation time
- TTL is measured from last access, default 1 hour
- get_session() bumps last_accessed_at; missing IDs return None
- create_session() raises ValueError when max_sessions is reached
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from podcast_reader.config import WORDS_PER_PAGE
from podcast_reader.core.ir import Word
from podcast_reader.core.playback import RecordingPlayer
from podcast_reader.core.session import TranscriptView

logger = logging.getLogger(__name__)

# Default time-to-live for idle sessions (seconds)
DEFAULT_TTL_SECONDS = 3600


@dataclass
class Session:
    """One remote transcript view.

    RULES:
    - id: UUID4 hex, unique and immutable after creation
    - view: the TranscriptView owning pages, selection, and notes
    - player: collects seek commands for the client to apply
    - title: optional episode title for display
    """

    id: str
    view: TranscriptView
    player: RecordingPlayer
    created_at: float
    last_accessed_at: float
    title: Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class SessionStore:
    """Thread-safe in-memory store for transcript sessions."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_sessions: int = 100,
    ) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(
        self,
        words: Sequence[Word] = (),
        page_size: int = WORDS_PER_PAGE,
        title: Optional[str] = None,
    ) -> Session:
        """Create a session with a freshly paginated view.

        Raises:
            ValueError: If max_sessions is reached or page_size is invalid.
        """
        player = RecordingPlayer()
        view = TranscriptView(words=words, page_size=page_size, player=player)

        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of sessions ({}) reached".format(self.max_sessions)
                )
            now = time.time()
            session = Session(
                id=uuid.uuid4().hex,
                view=view,
                player=player,
                created_at=now,
                last_accessed_at=now,
                title=title,
            )
            self._sessions[session.id] = session

        logger.info(
            "Created session %s (%d words, %d pages)",
            session.id, len(view.words), len(view.pages),
        )
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_accessed_at = time.time()
            return session

    def list_sessions(self) -> List[Session]:
        """All sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL; return the count."""
        now = time.time()
        expired: List[Session] = []
        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if now - session.last_accessed_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", session.id, now - session.last_accessed_at,
            )
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
