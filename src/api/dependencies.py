from fastapi import HTTPException

from api import state
from study_schedule.chat import ExtractionSession
from study_schedule.navigation import ViewRouter
from study_schedule.repositories import MaterialRepository, SubjectRepository


def _ensure_state() -> None:
    if state.store is None:
        state.init_state()


def get_subject_repository() -> SubjectRepository:
    _ensure_state()
    return state.subjects


def get_material_repository() -> MaterialRepository:
    _ensure_state()
    return state.materials


def get_view_router() -> ViewRouter:
    return state.view_router


def get_session(session_id: str) -> ExtractionSession:
    state.prune_sessions()
    session = state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    session.touch()
    return session
