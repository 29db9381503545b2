from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from study_schedule.errors import ValidationError
from study_schedule.models import Material, MaterialCreate
from study_schedule.repositories import MaterialRepository

logger = logging.getLogger(__name__)


class MaterialRow(BaseModel):
    """One row of the manual entry form; rows with a blank title are skipped."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    subject_id: str = Field("", alias="subjectId")
    file_url: Optional[str] = Field(None, alias="fileUrl")
    file_name: Optional[str] = Field(None, alias="fileName")


async def create_materials_for_date(
    repo: MaterialRepository,
    day: Optional[date],
    rows: Sequence[MaterialRow],
) -> List[Material]:
    if day is None:
        raise ValidationError("Please select a date")

    when = datetime.combine(day, time(0, 0)).isoformat()
    created = []
    for row in rows:
        if not row.title.strip():
            continue
        fields = MaterialCreate(
            title=row.title,
            description=row.description,
            subject_id=row.subject_id,
            file_url=row.file_url,
            file_name=row.file_name,
            date=when,
        )
        created.append(await repo.create(fields))

    logger.info(f"Created {len(created)} material(s) for {day}")
    return created
