import asyncio
import uuid
from contextlib import asynccontextmanager

import pytest

from storage import db
from storage.record_store import PostgresRecordStore
from study_schedule.errors import StoreError
from study_schedule.models import MaterialCreate

SUBJECT_ID = "6f1c2b9e-2f0a-4c7e-9a51-0d3e6b8f4a10"


class FakePool:
    """Records the SQL sent to it; optionally fails every call."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    async def _run(self, kind, query, args):
        self.calls.append((kind, " ".join(query.split()), args))
        if self.error is not None:
            raise self.error

    async def fetchrow(self, query, *args):
        await self._run("fetchrow", query, args)
        return {"id": uuid.uuid4(), **dict(zip(("title",), args))}

    async def fetch(self, query, *args):
        await self._run("fetch", query, args)
        return self.rows

    async def execute(self, query, *args):
        await self._run("execute", query, args)
        return "DELETE 1"

    @asynccontextmanager
    async def acquire(self):
        if self.error is not None:
            raise self.error
        yield self

    async def fetchval(self, query, *args):
        await self._run("fetchval", query, args)
        return 3


def test_insert_builds_parameterized_sql():
    pool = FakePool()
    store = PostgresRecordStore(pool)
    row = MaterialCreate(title="Lab", subjectId=SUBJECT_ID, date="2025-06-13T00:00:00").to_row()

    out = asyncio.run(store.insert("materials", row))

    kind, query, args = pool.calls[0]
    assert kind == "fetchrow"
    assert query.startswith("INSERT INTO materials (title, description, subject_id,")
    assert query.endswith("VALUES ($1, $2, $3, $4, $5, $6) RETURNING *")
    assert args[0] == "Lab"
    assert args[2] == uuid.UUID(SUBJECT_ID)
    assert args[3] is None
    assert out["title"] == "Lab"


def test_insert_with_malformed_subject_id_is_a_store_error():
    pool = FakePool()
    row = MaterialCreate(title="Lab", subjectId="abc", date="2025-06-13").to_row()

    with pytest.raises(StoreError, match="invalid subject_id"):
        asyncio.run(PostgresRecordStore(pool).insert("materials", row))
    assert pool.calls == []


def test_select_orders_by_whitelisted_column():
    pool = FakePool(rows=[{"id": "a"}, {"id": "b"}])
    store = PostgresRecordStore(pool)

    rows = asyncio.run(store.select("materials", "date"))
    asyncio.run(store.select("subjects", "created_at", ascending=False))

    assert rows == [{"id": "a"}, {"id": "b"}]
    assert pool.calls[0][1] == "SELECT * FROM materials ORDER BY date ASC, created_at ASC"
    assert pool.calls[1][1] == "SELECT * FROM subjects ORDER BY created_at DESC, created_at ASC"


def test_delete_uses_uuid_key():
    pool = FakePool()
    asyncio.run(PostgresRecordStore(pool).delete("subjects", SUBJECT_ID))
    assert pool.calls == [("execute", "DELETE FROM subjects WHERE id = $1", (uuid.UUID(SUBJECT_ID),))]

    with pytest.raises(StoreError, match="invalid id"):
        asyncio.run(PostgresRecordStore(pool).delete("subjects", "not-a-uuid"))


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.insert("subjects", {"name": "Physics", "color": "#3B82F6"}),
        lambda s: s.select("subjects", "created_at"),
        lambda s: s.delete("materials", SUBJECT_ID),
    ],
    ids=["insert", "select", "delete"],
)
def test_database_failures_are_wrapped(call):
    store = PostgresRecordStore(FakePool(error=ConnectionResetError("connection lost")))
    with pytest.raises(StoreError, match="connection lost") as exc:
        asyncio.run(call(store))
    assert isinstance(exc.value.__cause__, ConnectionResetError)


def test_health_check_counts_records():
    assert asyncio.run(db.health_check(FakePool())) == {
        "status": "healthy",
        "records": {"subjects": 3, "materials": 3},
    }


def test_health_check_reports_unreachable_database():
    health = asyncio.run(db.health_check(FakePool(error=ConnectionRefusedError("refused"))))
    assert health["status"] == "unhealthy"
    assert "refused" in health["error"]


def test_api_maps_malformed_subject_id_to_bad_gateway(client):
    from api import state

    state.init_state(PostgresRecordStore(FakePool()))
    resp = client.post("/materials", json={"title": "Lab", "subjectId": "abc", "date": "2025-06-13"})
    assert resp.status_code == 502
    assert "invalid subject_id" in resp.json()["detail"]
