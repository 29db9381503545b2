import logging

from fastapi import FastAPI

from api import state
from api.routers import extraction, materials, ops, subjects, views
from storage import db
from storage.record_store import InMemoryRecordStore, PostgresRecordStore
from study_schedule import config

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Study Schedule API")

app.include_router(ops.router)
app.include_router(subjects.router)
app.include_router(materials.router)
app.include_router(views.router)
app.include_router(extraction.router)


@app.on_event("startup")
async def startup() -> None:
    if config.DATABASE_URL:
        pool = await db.open_pool()
        state.init_state(PostgresRecordStore(pool))
        logger.info("Using PostgreSQL record store")
    else:
        state.init_state(InMemoryRecordStore())
        logger.warning("DATABASE_URL not set, records are kept in memory only")

    await state.subjects.refetch()
    await state.materials.refetch()
    logger.info(
        f"Loaded {len(state.subjects.items)} subject(s), {len(state.materials.items)} material(s)"
    )


@app.on_event("shutdown")
async def shutdown() -> None:
    state.sessions.clear()
    if isinstance(state.store, PostgresRecordStore):
        await db.close_pool()
