"""
WebSocket manager for live wedding updates
"""

import json
import logging
from typing import Dict, List
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.repositories import weddings_repo

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Manages WebSocket connections, one room per wedding slug"""

    def __init__(self):
        # slug -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, slug: str):
        """Accept WebSocket connection and add to the wedding room"""
        await websocket.accept()
        self.active_connections.setdefault(slug, []).append(websocket)
        logger.info(f"WebSocket connected to wedding {slug}. Total connections: {len(self.active_connections[slug])}")

    def disconnect(self, websocket: WebSocket, slug: str):
        """Remove WebSocket connection from the wedding room"""
        connections = self.active_connections.get(slug)
        if not connections or websocket not in connections:
            return

        connections.remove(websocket)
        logger.info(f"WebSocket disconnected from wedding {slug}. Remaining connections: {len(connections)}")

        # Clean up empty rooms
        if not connections:
            del self.active_connections[slug]

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast_to_wedding(self, slug: str, message: dict):
        """Broadcast message to every guest viewing a wedding website"""
        if slug not in self.active_connections:
            return

        disconnected = []
        for websocket in self.active_connections[slug].copy():
            try:
                await websocket.send_text(json.dumps(message, default=str))
            except Exception as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket, slug)

    def get_connection_count(self, slug: str) -> int:
        return len(self.active_connections.get(slug, []))

    def get_all_connection_counts(self) -> Dict[str, int]:
        return {
            slug: len(connections)
            for slug, connections in self.active_connections.items()
        }

# Global WebSocket manager instance
websocket_manager = WebSocketManager()

router = APIRouter()

@router.websocket("/weddings/{slug}")
async def websocket_endpoint(
    websocket: WebSocket,
    slug: str,
    db: Session = Depends(get_db)
):
    """WebSocket endpoint for live wedding updates"""
    matches = weddings_repo(db).list(where={"slug": slug})
    if not matches:
        await websocket.close(code=4004, reason="Wedding not found")
        return
    wedding = matches[0]

    await websocket_manager.connect(websocket, slug)

    try:
        await websocket_manager.send_personal_message({
            "type": "connection",
            "message": f"Connected to {wedding.get('partner1_name')} & {wedding.get('partner2_name')}",
            "slug": slug,
            "connection_count": websocket_manager.get_connection_count(slug)
        }, websocket)

        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            if client_message.get("type") == "ping":
                await websocket_manager.send_personal_message({
                    "type": "pong",
                    "timestamp": client_message.get("timestamp")
                }, websocket)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        websocket_manager.disconnect(websocket, slug)

@router.get("/stats")
async def websocket_stats():
    """Get WebSocket connection statistics (for debugging)"""
    counts = websocket_manager.get_all_connection_counts()
    return {
        "total_weddings_with_connections": len(counts),
        "connection_counts": counts,
        "total_connections": sum(counts.values())
    }
