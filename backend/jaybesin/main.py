"""
FastAPI app entrypoint
- CORS
- routers (tracking, catalog, inbox, settings, admin, WebSocket)
- AsyncEventBus + DocumentStore started in the lifespan
- domain error → HTTP status mapping
- health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from jaybesin.config import settings
from jaybesin.database import engine, Base, SessionLocal
from jaybesin.api import catalog, documents, inbox, shipments, tracking, users
from jaybesin.api import settings as settings_api
from jaybesin.api.websocket import router as ws_router
from jaybesin.core.shipment_record import ShipmentValidationError
from jaybesin.core.stages import STAGES_VERSION
from jaybesin.documents.builder import DocumentGenerationError
from jaybesin.events.event_bus import AsyncEventBus
from jaybesin.schemas.common import HealthResponse
from jaybesin.store.document_store import (
    DocumentStore, DuplicateKeyError, PersistenceError, WriteOutcomeUnknown,
)

# Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Module-level references (created in the lifespan, cleaned up on shutdown)
_async_event_bus: AsyncEventBus | None = None
_store: DocumentStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start and stop the background components"""
    global _async_event_bus, _store

    # ── 1. DB tables ──
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

    db = SessionLocal()
    try:
        from jaybesin.models import Shipment
        shipment_count = db.query(Shipment).count()
        if shipment_count == 0:
            logger.warning("No shipments yet. Run python seed_data.py for sample data.")
        else:
            logger.info(f"Shipments on record: {shipment_count}")
    finally:
        db.close()

    # ── 2. AsyncEventBus ──
    _async_event_bus = AsyncEventBus(settings.REDIS_URL)

    # ── 3. DocumentStore (subscribes to the change topics) ──
    _store = DocumentStore(SessionLocal, _async_event_bus, settings.WRITE_TIMEOUT_SECONDS)
    await _store.start()

    # ── 4. Start the bus consumer loops ──
    await _async_event_bus.start()
    logger.info("AsyncEventBus started")

    app.state.store = _store
    app.state.session_factory = SessionLocal

    yield

    # ── shutdown ──
    if _store:
        await _store.stop()
        logger.info("DocumentStore stopped")

    if _async_event_bus:
        await _async_event_bus.stop()
        logger.info("AsyncEventBus stopped")


app = FastAPI(
    title="JayBesin Logistics",
    description="China → Ghana freight: tracking, manifests, billing documents",
    version="2.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Domain errors ──

@app.exception_handler(ShipmentValidationError)
async def validation_error_handler(request: Request, exc: ShipmentValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    if exc.not_found:
        return JSONResponse(status_code=404, content={"detail": str(exc)})
    logger.error(f"Persistence failure: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(WriteOutcomeUnknown)
async def write_outcome_handler(request: Request, exc: WriteOutcomeUnknown):
    # The write may still land; clients re-read instead of resubmitting
    return JSONResponse(status_code=504, content={"detail": str(exc), "outcome": "unknown"})


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(DocumentGenerationError)
async def document_error_handler(request: Request, exc: DocumentGenerationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Routers
app.include_router(tracking.router)
app.include_router(catalog.router)
app.include_router(catalog.admin_router)
app.include_router(inbox.router)
app.include_router(inbox.admin_router)
app.include_router(settings_api.router)
app.include_router(settings_api.admin_router)
app.include_router(shipments.router)
app.include_router(documents.router)
app.include_router(users.router)
app.include_router(ws_router)


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """System status"""
    db_ok = False
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db_ok = True
        db.close()
    except Exception as e:
        logger.warning(f"Health check DB query failed: {e}")

    redis_ok = _async_event_bus.is_redis if _async_event_bus else False

    return HealthResponse(
        status="ok" if db_ok else "degraded",
        db_connected=db_ok,
        redis_connected=redis_ok,
        stages_version=STAGES_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
