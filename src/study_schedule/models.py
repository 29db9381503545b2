from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


PRESET_COLORS: List[str] = [
    "#3B82F6", "#EF4444", "#10B981", "#F59E0B",
    "#8B5CF6", "#EC4899", "#06B6D4", "#84CC16",
]

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
_DRAFT_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _to_str(v: Any) -> Any:
    # asyncpg hands back UUID/datetime objects, the in-memory store plain strings
    if isinstance(v, UUID):
        return str(v)
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return v


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 date or date/time string (trailing 'Z' allowed)."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = PRESET_COLORS[0]

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name must not be blank")
        return v2

    @field_validator("color")
    @classmethod
    def color_is_hex(cls, v: str) -> str:
        if not _HEX_COLOR_RE.match(v):
            raise ValueError("color must be a hex code like #3B82F6")
        return v.upper()

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class Subject(SubjectCreate):
    id: str
    created_at: Optional[str] = None

    @field_validator("id", "created_at", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        return _to_str(v)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Subject":
        return cls.model_validate(dict(row))


class MaterialCreate(BaseModel):
    """
    Store rows use snake_case columns; clients see the camelCase names the
    web client uses (subjectId, fileUrl, fileName, createdAt). Both are
    accepted on input.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    subject_id: Optional[str] = Field(None, alias="subjectId")
    file_url: Optional[str] = Field(None, alias="fileUrl")
    file_name: Optional[str] = Field(None, alias="fileName")
    date: str

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("description", "subject_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        v = _to_str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date", mode="before")
    @classmethod
    def date_is_iso(cls, v: Any) -> str:
        v = _to_str(v)
        if not isinstance(v, str):
            raise ValueError("date must be an ISO-8601 string")
        try:
            parse_iso(v)
        except ValueError:
            raise ValueError(f"date is not ISO-8601: {v!r}")
        return v

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False)


class Material(MaterialCreate):
    id: str
    created_at: Optional[str] = Field(None, alias="createdAt")

    @field_validator("id", "created_at", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        return _to_str(v)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Material":
        return cls.model_validate(dict(row))

    @property
    def day(self) -> date:
        return material_day(self)


class MaterialDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    subject_id: Optional[str] = Field(None, alias="subjectId")
    date: str

    @field_validator("date")
    @classmethod
    def date_is_day(cls, v: str) -> str:
        if not _DRAFT_DATE_RE.match(v):
            raise ValueError("draft date must be YYYY-MM-DD")
        return v

    def to_material(self) -> MaterialCreate:
        # The draft's calendar day becomes local midnight, no timezone shift.
        day = datetime.strptime(self.date, "%Y-%m-%d")
        return MaterialCreate(
            title=self.title,
            description=self.description,
            subject_id=self.subject_id,
            date=day.isoformat(),
        )


def material_day(material: MaterialCreate) -> date:
    """Calendar day a material is scheduled on; the time component is ignored."""
    return parse_iso(material.date).date()
