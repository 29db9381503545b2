from __future__ import annotations

from typing import Optional, Sequence

from study_schedule.models import Subject


def resolve_subject_id(given: Optional[str], subjects: Sequence[Subject]) -> Optional[str]:
    """Map the model's subject reference (id or name fragment) to a known subject id.

    Case-insensitive; a subject matches on exact id or when its name contains
    the given text. First match in sequence order wins, no match -> None.
    """
    if not given or not given.strip():
        return None

    needle = given.strip().lower()
    for s in subjects:
        if s.id.lower() == needle or needle in s.name.lower():
            return s.id
    return None
