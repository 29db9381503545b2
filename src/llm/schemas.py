from __future__ import annotations
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class ExtractedMaterial(BaseModel):
    """One item of the JSON array the model is asked to return."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    subject_id: Optional[str] = Field(default=None, alias="subjectId")
    date: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("subject_id", "date", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        # models emit "null", "", or numbers for these; treat them as text or absent
        if v is None:
            return None
        v = str(v).strip()
        if not v or v.lower() in {"null", "none"}:
            return None
        return v


class ExtractedMaterialList(RootModel[List[ExtractedMaterial]]):
    pass
