from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from study_schedule.models import Subject


@dataclass(frozen=True)
class TemporalContext:
    today: date
    year: int
    month_name: str
    long_form: str


def _ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def long_date(d: date) -> str:
    """'June 11th, 2025'."""
    return f"{d.strftime('%B')} {_ordinal(d.day)}, {d.year}"


def temporal_context(reference_date: date) -> TemporalContext:
    return TemporalContext(
        today=reference_date,
        year=reference_date.year,
        month_name=reference_date.strftime("%B"),
        long_form=long_date(reference_date),
    )


def format_subjects(subjects: Sequence[Subject]) -> str:
    if not subjects:
        return "(none)"
    return ", ".join(f"{s.name} ({s.id})" for s in subjects)


def build_extraction_prompt(subjects: Sequence[Subject], reference_date: date) -> str:
    """Instruction text grounding relative dates on the real current date.

    The user's free text is not part of this string; providers append it as
    the final segment ("User input: ...").
    """
    ctx = temporal_context(reference_date)
    y = ctx.year

    return f"""You are an intelligent study material organizer.

CURRENT DATE CONTEXT:
- Today's date: {ctx.long_form} ({ctx.today.isoformat()}, {ctx.today.strftime('%A')})
- Current year: {y}
- Current month: {ctx.month_name}

Based on the user's text input, extract and create study materials with the following guidelines:

1. Identify subjects, topics, assignments, deadlines, and study materials
2. Create appropriate titles and descriptions
3. Determine dates from context using these rules:
   - If a specific date is mentioned, use that date
   - If only a day is mentioned (e.g., "Monday", "next Tuesday"), calculate it from today's date
   - If a relative date is mentioned (e.g., "next week", "in 3 days", "tomorrow"), calculate it from today's date
   - If a month is mentioned without a year, assume the current year ({y})
   - If no date is specified but it looks like an assignment or exam, suggest a reasonable date within the next few weeks
   - NEVER use a year before {y} unless the user explicitly names one
4. Return a JSON array of materials, each object with exactly these fields:
[
  {{
    "title": "Material title",
    "description": "Detailed description",
    "subjectId": "subject id from the list below, or null",
    "date": "YYYY-MM-DD"
  }}
]

Available subjects: {format_subjects(subjects)}

Use the id in parentheses for subjectId when a subject matches. If a subject mentioned doesn't match the available subjects, set subjectId to null.
Extract every actionable study item (assignments, readings, exams) from the text.

IMPORTANT:
- The "date" field MUST be exactly YYYY-MM-DD, for example "{y}-06-03" for "June 3rd".
- All dates must be in {y} or later unless the user explicitly mentions an earlier year.
- Return only the JSON array."""
