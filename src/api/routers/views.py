import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_material_repository, get_subject_repository, get_view_router
from study_schedule.dashboard import ALL_SUBJECTS, dashboard_summary
from study_schedule.errors import InvalidTransition, StoreError
from study_schedule.navigation import MaterialsForDate, SettingsLocked, ViewRouter
from study_schedule.repositories import MaterialRepository, SubjectRepository

router = APIRouter(tags=["views"])
logger = logging.getLogger(__name__)


class PasscodeIn(BaseModel):
    passcode: str


def _serialize_view(view: ViewRouter, materials: Optional[MaterialRepository] = None) -> dict:
    s = view.state
    out = {"view": s.name}
    if isinstance(s, SettingsLocked) and s.error:
        out["error"] = s.error
    if isinstance(s, MaterialsForDate):
        out["date"] = s.day.isoformat()
        if materials is not None:
            out["materials"] = materials.on_date(s.day)
    return out


@router.get("/calendar")
async def calendar(
    subject: str = ALL_SUBJECTS,
    subjects: SubjectRepository = Depends(get_subject_repository),
    materials: MaterialRepository = Depends(get_material_repository),
) -> dict:
    """Dashboard data: highlighted dates and counters, optionally filtered by subject."""
    try:
        known = await subjects.list()
        items = await materials.list()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))

    summary = dashboard_summary(known, items, subject)
    body = asdict(summary)
    body["dates"] = [d.isoformat() for d in summary.dates]
    return body


@router.get("/view")
async def current_view(
    view: ViewRouter = Depends(get_view_router),
    materials: MaterialRepository = Depends(get_material_repository),
) -> dict:
    try:
        await materials.refetch()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _serialize_view(view, materials)


@router.post("/view/settings")
async def open_settings(view: ViewRouter = Depends(get_view_router)) -> dict:
    try:
        view.open_settings()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _serialize_view(view)


@router.post("/view/passcode")
async def submit_passcode(payload: PasscodeIn, view: ViewRouter = Depends(get_view_router)) -> dict:
    try:
        view.submit_passcode(payload.passcode)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _serialize_view(view)


@router.post("/view/cancel")
async def cancel_settings(view: ViewRouter = Depends(get_view_router)) -> dict:
    try:
        view.cancel()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _serialize_view(view)


@router.post("/view/date/{day}")
async def select_date(
    day: date,
    subject: str = ALL_SUBJECTS,
    view: ViewRouter = Depends(get_view_router),
    materials: MaterialRepository = Depends(get_material_repository),
) -> dict:
    try:
        await materials.refetch()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))

    on_day = [
        m for m in materials.on_date(day)
        if subject == ALL_SUBJECTS or m.subject_id == subject
    ]
    try:
        view.select_date(day, on_day)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    out = _serialize_view(view)
    if isinstance(view.state, MaterialsForDate):
        out["materials"] = on_day
    return out


@router.post("/view/back")
async def back_to_dashboard(view: ViewRouter = Depends(get_view_router)) -> dict:
    try:
        view.back()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _serialize_view(view)
