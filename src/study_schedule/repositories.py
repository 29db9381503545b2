"""
Client-side caches over the record store, one per record kind.

Each repository owns an ordered list synchronized with the store. After every
successful create/delete the cache is re-fetched rather than patched locally,
so store-side cascades (deleting a subject removes its materials) are always
reflected.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from storage.record_store import RecordStore
from study_schedule.errors import StoreError
from study_schedule.models import (
    Material,
    MaterialCreate,
    Subject,
    SubjectCreate,
    material_day,
)

logger = logging.getLogger(__name__)


class MaterialRepository:
    table = "materials"
    order_by = "date"

    def __init__(self, store: RecordStore):
        self.store = store
        self.items: List[Material] = []
        self.loading = True

    async def refetch(self) -> List[Material]:
        try:
            rows = await self.store.select(self.table, self.order_by, ascending=True)
        except StoreError as e:
            logger.error(f"Error fetching materials: {e}")
            raise
        finally:
            self.loading = False

        self.items = [Material.from_row(r) for r in rows]
        return list(self.items)

    async def list(self) -> List[Material]:
        return await self.refetch()

    async def create(self, fields: MaterialCreate) -> Material:
        try:
            row = await self.store.insert(self.table, fields.to_row())
        except StoreError as e:
            logger.error(f"Error creating material: {e}")
            raise

        material = Material.from_row(row)
        logger.info(f"Created material {material.id} on {material.date[:10]}")
        await self.refetch()
        return material

    async def delete(self, material_id: str) -> None:
        try:
            await self.store.delete(self.table, material_id)
        except StoreError as e:
            logger.error(f"Error deleting material: {e}")
            raise
        await self.refetch()

    def get(self, material_id: str) -> Optional[Material]:
        return next((m for m in self.items if m.id == material_id), None)

    def on_date(self, day: date) -> List[Material]:
        """Cached materials scheduled on the given calendar day."""
        return [m for m in self.items if material_day(m) == day]


class SubjectRepository:
    table = "subjects"
    order_by = "created_at"

    def __init__(self, store: RecordStore, materials: Optional[MaterialRepository] = None):
        self.store = store
        self.items: List[Subject] = []
        self.loading = True
        # linked so a subject delete also refreshes the cascaded materials
        self.materials = materials

    async def refetch(self) -> List[Subject]:
        try:
            rows = await self.store.select(self.table, self.order_by, ascending=True)
        except StoreError as e:
            logger.error(f"Error fetching subjects: {e}")
            raise
        finally:
            self.loading = False

        self.items = [Subject.from_row(r) for r in rows]
        return list(self.items)

    async def list(self) -> List[Subject]:
        return await self.refetch()

    async def create(self, fields: SubjectCreate) -> Subject:
        try:
            row = await self.store.insert(self.table, fields.to_row())
        except StoreError as e:
            logger.error(f"Error creating subject: {e}")
            raise

        subject = Subject.from_row(row)
        logger.info(f"Created subject {subject.id} ({subject.name})")
        await self.refetch()
        return subject

    async def delete(self, subject_id: str) -> None:
        try:
            await self.store.delete(self.table, subject_id)
        except StoreError as e:
            logger.error(f"Error deleting subject: {e}")
            raise

        await self.refetch()
        if self.materials is not None:
            await self.materials.refetch()

    def get(self, subject_id: str) -> Optional[Subject]:
        return next((s for s in self.items if s.id == subject_id), None)
