import logging
import time
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from api import state
from api.dependencies import get_material_repository, get_session, get_subject_repository
from api.metrics import (
    DRAFTS_EXTRACTED_TOTAL,
    EXTRACTION_FAILURES_TOTAL,
    MATERIALS_CREATED_TOTAL,
    REQUEST_LATENCY_SECONDS,
    REQUESTS_TOTAL,
)
from study_schedule.chat import ExtractionSession
from study_schedule.errors import RequestInFlight, StoreError, ValidationError
from study_schedule.repositories import MaterialRepository, SubjectRepository

router = APIRouter(prefix="/extraction", tags=["extraction"])
logger = logging.getLogger(__name__)


class ConnectIn(BaseModel):
    api_key: str


class MessageIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    reference_day: Optional[date] = Field(None, alias="reference_date")


def _serialize_session(session: ExtractionSession) -> dict:
    # never includes the API key
    return {
        "session_id": session.id,
        "busy": session.busy,
        "messages": [
            {
                "id": m.id,
                "role": m.role,
                "content": m.content,
                "timestamp": m.timestamp.isoformat(),
            }
            for m in session.messages
        ],
        "drafts": [d.model_dump(by_alias=True) for d in session.drafts],
    }


@router.post("/sessions", status_code=201)
async def connect(
    payload: ConnectIn,
    materials: MaterialRepository = Depends(get_material_repository),
) -> dict:
    """Open a chat session with a user-supplied API key (kept in memory only)."""
    try:
        session = ExtractionSession(payload.api_key, materials)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    state.add_session(session)
    logger.info(f"Opened extraction session {session.id}")
    return _serialize_session(session)


@router.get("/sessions/{session_id}")
async def get_session_state(session: ExtractionSession = Depends(get_session)) -> dict:
    return _serialize_session(session)


@router.post("/sessions/{session_id}/messages")
async def send_message(
    payload: MessageIn,
    session: ExtractionSession = Depends(get_session),
    subjects: SubjectRepository = Depends(get_subject_repository),
) -> dict:
    """
    One extraction turn. Upstream and parse failures come back as an assistant
    message in the transcript, not as an HTTP error.
    """
    start = time.time()
    try:
        known = await subjects.list()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))

    try:
        reply = await session.send(payload.text, known, reference_date=payload.reference_day)
    except RequestInFlight as e:
        REQUESTS_TOTAL.labels(endpoint="/extraction/messages", status="busy").inc()
        raise HTTPException(status_code=409, detail=str(e))

    if reply is None:
        raise HTTPException(status_code=400, detail="Message text is empty")

    if session.last_error:
        status = "error"
        EXTRACTION_FAILURES_TOTAL.labels(kind=session.last_error).inc()
    else:
        status = "processed"
        DRAFTS_EXTRACTED_TOTAL.inc(len(session.drafts))

    REQUESTS_TOTAL.labels(endpoint="/extraction/messages", status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/extraction/messages").observe(time.time() - start)

    body = _serialize_session(session)
    body["status"] = status
    return body


@router.post("/sessions/{session_id}/drafts/{index}/confirm", status_code=201)
async def confirm_draft(index: int, session: ExtractionSession = Depends(get_session)) -> dict:
    try:
        material = await session.confirm(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Draft not found")
    except StoreError as e:
        logger.error(f"Failed to create material from draft: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    MATERIALS_CREATED_TOTAL.labels(source="extraction").inc()
    return {"material": material, "remaining_drafts": len(session.drafts)}


@router.delete("/sessions/{session_id}/drafts/{index}")
async def discard_draft(index: int, session: ExtractionSession = Depends(get_session)) -> dict:
    try:
        session.discard(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Draft not found")
    return {"remaining_drafts": len(session.drafts)}


@router.delete("/sessions/{session_id}")
async def disconnect(session: ExtractionSession = Depends(get_session)) -> dict:
    state.sessions.pop(session.id, None)
    logger.info(f"Closed extraction session {session.id}")
    return {"status": "closed"}
