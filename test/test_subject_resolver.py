from extraction.subject_resolver import resolve_subject_id
from study_schedule.models import Subject

SUBJECTS = [
    Subject(id="s1", name="Mathematics", color="#3B82F6"),
    Subject(id="s2", name="Advanced Math", color="#EF4444"),
]


def test_substring_match_is_case_insensitive_and_first_wins():
    assert resolve_subject_id("math", SUBJECTS) == "s1"
    assert resolve_subject_id("ADVANCED", SUBJECTS) == "s2"


def test_exact_id_match():
    assert resolve_subject_id("s2", SUBJECTS) == "s2"
    assert resolve_subject_id("S2", SUBJECTS) == "s2"


def test_unmatched_subject_resolves_to_none():
    assert resolve_subject_id("Chemistry", SUBJECTS) is None


def test_empty_subject_stays_none():
    assert resolve_subject_id(None, SUBJECTS) is None
    assert resolve_subject_id("  ", SUBJECTS) is None
    assert resolve_subject_id("math", []) is None
