import logging
import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from api.dependencies import get_material_repository
from api.metrics import MATERIALS_CREATED_TOTAL, REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL
from study_schedule.entry import MaterialRow, create_materials_for_date
from study_schedule.errors import StoreError, ValidationError
from study_schedule.models import Material, MaterialCreate
from study_schedule.repositories import MaterialRepository

router = APIRouter(prefix="/materials", tags=["materials"])
logger = logging.getLogger(__name__)


class MaterialBatchIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: Optional[date] = Field(None, alias="date")
    materials: List[MaterialRow] = Field(default_factory=list)


@router.get("")
async def list_materials(
    repo: MaterialRepository = Depends(get_material_repository),
) -> List[Material]:
    """Materials ordered by scheduled date."""
    try:
        return await repo.list()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/by-date/{day}")
async def materials_for_day(
    day: date,
    repo: MaterialRepository = Depends(get_material_repository),
) -> dict:
    try:
        await repo.refetch()
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"date": day.isoformat(), "materials": repo.on_date(day)}


@router.post("", status_code=201)
async def create_material(
    payload: MaterialCreate,
    repo: MaterialRepository = Depends(get_material_repository),
) -> Material:
    try:
        material = await repo.create(payload)
    except StoreError as e:
        logger.error(f"Failed to create material: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    MATERIALS_CREATED_TOTAL.labels(source="manual").inc()
    return material


@router.post("/batch", status_code=201)
async def create_material_batch(
    payload: MaterialBatchIn,
    repo: MaterialRepository = Depends(get_material_repository),
) -> dict:
    """Settings form: several materials on one chosen date."""
    start = time.time()
    try:
        created = await create_materials_for_date(repo, payload.day, payload.materials)
    except ValidationError as e:
        REQUESTS_TOTAL.labels(endpoint="/materials/batch", status="invalid").inc()
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        REQUESTS_TOTAL.labels(endpoint="/materials/batch", status="error").inc()
        logger.error(f"Failed to create materials: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    REQUESTS_TOTAL.labels(endpoint="/materials/batch", status="created").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/materials/batch").observe(time.time() - start)
    MATERIALS_CREATED_TOTAL.labels(source="manual").inc(len(created))
    return {"created": created, "count": len(created)}


@router.delete("/{material_id}")
async def delete_material(
    material_id: str,
    repo: MaterialRepository = Depends(get_material_repository),
) -> dict:
    try:
        await repo.refetch()
        if repo.get(material_id) is None:
            raise HTTPException(status_code=404, detail="Material not found")
        await repo.delete(material_id)
    except StoreError as e:
        logger.error(f"Failed to delete material: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {"status": "deleted", "id": material_id}
