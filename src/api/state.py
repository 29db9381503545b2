import logging
import time
from typing import Dict, Optional

from storage.record_store import InMemoryRecordStore, RecordStore
from study_schedule import config
from study_schedule.chat import ExtractionSession
from study_schedule.navigation import ViewRouter
from study_schedule.repositories import MaterialRepository, SubjectRepository

logger = logging.getLogger(__name__)

# Global instances initialized at startup (or lazily, see init_state)
store: Optional[RecordStore] = None
materials: Optional[MaterialRepository] = None
subjects: Optional[SubjectRepository] = None

# Extraction chat sessions keyed by session id; API keys live only in here
sessions: Dict[str, ExtractionSession] = {}

view_router = ViewRouter()


def init_state(record_store: Optional[RecordStore] = None) -> None:
    """(Re)build the repositories on top of a record store, in-memory by default."""
    global store, materials, subjects, view_router

    store = record_store or InMemoryRecordStore()
    materials = MaterialRepository(store)
    subjects = SubjectRepository(store, materials=materials)
    sessions.clear()
    view_router = ViewRouter()


def prune_sessions(now: Optional[float] = None) -> int:
    """Drop sessions idle longer than SESSION_IDLE_TTL_S. A running request keeps its session."""
    now = time.monotonic() if now is None else now
    expired = [
        sid for sid, s in sessions.items()
        if not s.busy and now - s.last_used > config.SESSION_IDLE_TTL_S
    ]
    for sid in expired:
        del sessions[sid]
    if expired:
        logger.info(f"Expired {len(expired)} idle extraction session(s)")
    return len(expired)


def add_session(session: ExtractionSession) -> None:
    """Register a session, evicting the least recently used idle ones above MAX_SESSIONS."""
    prune_sessions()
    idle = sorted((s for s in sessions.values() if not s.busy), key=lambda s: s.last_used)
    while idle and len(sessions) >= config.MAX_SESSIONS:
        evicted = idle.pop(0)
        del sessions[evicted.id]
        logger.info(f"Evicted extraction session {evicted.id} (limit {config.MAX_SESSIONS})")
    sessions[session.id] = session
