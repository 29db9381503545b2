import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_subject_repository
from study_schedule.errors import StoreError
from study_schedule.models import PRESET_COLORS, Subject, SubjectCreate
from study_schedule.repositories import SubjectRepository

router = APIRouter(prefix="/subjects", tags=["subjects"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_subjects(
    repo: SubjectRepository = Depends(get_subject_repository),
) -> List[Subject]:
    """Subjects ordered by creation time."""
    try:
        return await repo.list()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/colors")
async def subject_colors() -> dict:
    return {"colors": PRESET_COLORS}


@router.post("", status_code=201)
async def create_subject(
    payload: SubjectCreate,
    repo: SubjectRepository = Depends(get_subject_repository),
) -> Subject:
    try:
        return await repo.create(payload)
    except StoreError as e:
        logger.error(f"Failed to create subject: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.delete("/{subject_id}")
async def delete_subject(
    subject_id: str,
    repo: SubjectRepository = Depends(get_subject_repository),
) -> dict:
    """Delete a subject; its materials go with it (store-level cascade)."""
    try:
        await repo.refetch()
        if repo.get(subject_id) is None:
            raise HTTPException(status_code=404, detail="Subject not found")
        await repo.delete(subject_id)
    except StoreError as e:
        logger.error(f"Failed to delete subject: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {"status": "deleted", "id": subject_id}
