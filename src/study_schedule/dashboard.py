from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Sequence

from study_schedule.models import Material, Subject, material_day

ALL_SUBJECTS = "all"
DEFAULT_HIGHLIGHT = "#10B981"


@dataclass
class DashboardSummary:
    subject_filter: str
    total_subjects: int
    filtered_materials: int
    active_dates: int
    highlight_color: str
    dates: List[date] = field(default_factory=list)


def filter_by_subject(materials: Sequence[Material], subject_filter: str = ALL_SUBJECTS) -> List[Material]:
    if subject_filter == ALL_SUBJECTS:
        return list(materials)
    return [m for m in materials if m.subject_id == subject_filter]


def materials_on(materials: Sequence[Material], day: date) -> List[Material]:
    return [m for m in materials if material_day(m) == day]


def dates_with_materials(materials: Sequence[Material]) -> List[date]:
    return sorted({material_day(m) for m in materials})


def highlight_color(subjects: Sequence[Subject], subject_filter: str = ALL_SUBJECTS) -> str:
    if subject_filter == ALL_SUBJECTS:
        return DEFAULT_HIGHLIGHT
    subject = next((s for s in subjects if s.id == subject_filter), None)
    return subject.color if subject else DEFAULT_HIGHLIGHT


def dashboard_summary(
    subjects: Sequence[Subject],
    materials: Sequence[Material],
    subject_filter: str = ALL_SUBJECTS,
) -> DashboardSummary:
    filtered = filter_by_subject(materials, subject_filter)
    days = dates_with_materials(filtered)
    return DashboardSummary(
        subject_filter=subject_filter,
        total_subjects=len(subjects),
        filtered_materials=len(filtered),
        active_dates=len(days),
        highlight_color=highlight_color(subjects, subject_filter),
        dates=days,
    )
