import asyncio
from datetime import date

import pytest

from storage.record_store import InMemoryRecordStore, RecordStore
from study_schedule.entry import MaterialRow, create_materials_for_date
from study_schedule.errors import StoreError, ValidationError
from study_schedule.models import MaterialCreate, SubjectCreate
from study_schedule.repositories import MaterialRepository, SubjectRepository


class BrokenStore(RecordStore):
    async def insert(self, table, row):
        raise StoreError("insert rejected")

    async def select(self, table, order_by, ascending=True):
        raise StoreError("select rejected")

    async def delete(self, table, record_id):
        raise StoreError("delete rejected")


def _repos(store):
    materials = MaterialRepository(store)
    subjects = SubjectRepository(store, materials=materials)
    return subjects, materials


def test_subjects_listed_in_creation_order(store):
    subjects, _ = _repos(store)

    async def scenario():
        await subjects.create(SubjectCreate(name="Physics"))
        await subjects.create(SubjectCreate(name="Art", color="#ef4444"))
        return await subjects.list()

    out = asyncio.run(scenario())
    assert [s.name for s in out] == ["Physics", "Art"]
    assert out[1].color == "#EF4444"
    assert all(s.id and s.created_at for s in out)
    assert subjects.loading is False


def test_materials_ordered_by_date_and_cache_refetched(store):
    _, materials = _repos(store)

    async def scenario():
        await materials.create(MaterialCreate(title="Later", date="2025-07-01T00:00:00"))
        created = await materials.create(MaterialCreate(title="Sooner", date="2025-06-13T00:00:00"))
        return created

    created = asyncio.run(scenario())
    assert created.id
    assert created.created_at
    # cache already reflects the store, no explicit list() needed
    assert [m.title for m in materials.items] == ["Sooner", "Later"]
    assert [m.title for m in materials.on_date(date(2025, 6, 13))] == ["Sooner"]


def test_deleting_subject_cascades_to_its_materials(store):
    subjects, materials = _repos(store)

    async def scenario():
        physics = await subjects.create(SubjectCreate(name="Physics"))
        await materials.create(
            MaterialCreate(title="Lab report", subject_id=physics.id, date="2025-06-13T00:00:00")
        )
        await materials.create(MaterialCreate(title="Unfiled", date="2025-06-14T00:00:00"))
        await subjects.delete(physics.id)
        return await materials.list()

    remaining = asyncio.run(scenario())
    assert [m.title for m in remaining] == ["Unfiled"]
    # linked cache was refreshed by the subject delete itself
    assert [m.title for m in materials.items] == ["Unfiled"]
    assert subjects.items == []


def test_delete_material(store):
    _, materials = _repos(store)

    async def scenario():
        m = await materials.create(MaterialCreate(title="Quiz", date="2025-06-13"))
        await materials.delete(m.id)
        return await materials.list()

    assert asyncio.run(scenario()) == []


def test_store_errors_are_logged_and_reraised(caplog):
    subjects, materials = _repos(BrokenStore())

    with pytest.raises(StoreError):
        asyncio.run(subjects.create(SubjectCreate(name="Physics")))
    with pytest.raises(StoreError):
        asyncio.run(materials.list())
    with pytest.raises(StoreError):
        asyncio.run(materials.delete("m1"))

    assert "Error creating subject" in caplog.text
    assert "Error fetching materials" in caplog.text
    assert materials.loading is False


def test_unknown_table_or_column_is_rejected(store):
    with pytest.raises(StoreError):
        asyncio.run(store.insert("users", {"name": "x"}))
    with pytest.raises(StoreError):
        asyncio.run(store.select("subjects", "name; DROP TABLE subjects"))


def test_manual_entry_requires_a_date(store):
    _, materials = _repos(store)
    with pytest.raises(ValidationError, match="Please select a date"):
        asyncio.run(create_materials_for_date(materials, None, [MaterialRow(title="Essay")]))


def test_manual_entry_skips_blank_titles(store):
    _, materials = _repos(store)
    rows = [
        MaterialRow(title="Essay", description="  ", subjectId=""),
        MaterialRow(title="   "),
        MaterialRow(title="Slides", fileUrl="https://files.test/s.pdf", fileName="s.pdf"),
    ]
    created = asyncio.run(create_materials_for_date(materials, date(2025, 6, 13), rows))

    assert [m.title for m in created] == ["Essay", "Slides"]
    assert all(m.date == "2025-06-13T00:00:00" for m in created)
    assert created[0].description is None and created[0].subject_id is None
    assert created[1].file_name == "s.pdf"
