"""
WebSocket endpoint: live collection snapshots
A client connected to /ws/collections/{collection} receives
  - snapshot: the full collection, once on connect and after every change
Catalog collections are public; the rest need an admin user_id query param.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from jaybesin.database import SessionLocal
from jaybesin.models import User
from jaybesin.models.user import UserRole
from jaybesin.store.document_store import COLLECTIONS, SETTINGS_COLLECTION
from jaybesin.store.subscriptions import CollectionSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLIC_COLLECTIONS = {"products", "vehicles", "categories"}


class ConnectionManager:
    """WebSocket connection registry per collection"""

    def __init__(self):
        self.active_connections: dict[str, list[WebSocket]] = {}

    async def connect(self, collection: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.setdefault(collection, []).append(websocket)
        logger.info(f"WebSocket connected to {collection}: {self.count()} active")

    def disconnect(self, collection: str, websocket: WebSocket):
        connections = self.active_connections.get(collection, [])
        if websocket in connections:
            connections.remove(websocket)
        logger.info(f"WebSocket disconnected from {collection}: {self.count()} active")

    def count(self) -> int:
        return sum(len(c) for c in self.active_connections.values())


ws_manager = ConnectionManager()


def _is_admin(user_id: str | None, session_factory=SessionLocal) -> bool:
    if not user_id:
        return False
    db = session_factory()
    try:
        user = db.get(User, user_id)
        return user is not None and user.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)
    finally:
        db.close()


def _snapshot_message(snapshot: CollectionSnapshot) -> str:
    return json.dumps({
        "type": "snapshot",
        "collection": snapshot.collection,
        "version": snapshot.version,
        "data": snapshot.documents,
    }, ensure_ascii=False, default=str)


@router.websocket("/ws/collections/{collection}")
async def collection_feed(websocket: WebSocket, collection: str):
    """Live snapshot feed for one collection"""
    if collection not in COLLECTIONS and collection != SETTINGS_COLLECTION:
        await websocket.close(code=4404)
        return

    app_state = websocket.app.state
    store = getattr(app_state, "store", None)
    if store is None:
        await websocket.close(code=1013)
        return

    if collection not in PUBLIC_COLLECTIONS:
        session_factory = getattr(app_state, "session_factory", SessionLocal)
        loop = asyncio.get_running_loop()
        user_id = websocket.query_params.get("user_id")
        if not await loop.run_in_executor(None, _is_admin, user_id, session_factory):
            await websocket.close(code=4403)
            return

    await ws_manager.connect(collection, websocket)

    async def push(snapshot: CollectionSnapshot):
        await websocket.send_text(_snapshot_message(snapshot))

    subscription = None
    try:
        subscription = await store.subscribe(collection, push)

        # Keep-alive loop (ping/pong)
        while True:
            try:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text(json.dumps({"type": "pong"}))
            except WebSocketDisconnect:
                break

    except Exception as e:
        logger.error(f"WebSocket error on {collection}: {e}")
    finally:
        if subscription is not None:
            subscription.unsubscribe()
        ws_manager.disconnect(collection, websocket)
