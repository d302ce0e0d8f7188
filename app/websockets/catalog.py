"""
==============================================================================
Catalog WebSocket Module
==============================================================================

Real-time catalog updates pushed to every connected client.

Flow:
-----
1. Client connects to /ws/products
2. Server sends an init message with the client id and current catalog
3. After every product create/update/delete the server pushes the full
   catalog to all clients
4. Client may request a fresh snapshot or stop at any time

Messages (Client → Server):
---------------------------
- {"type": "get_products"}     → Reply with current catalog
- {"type": "stop"}             → Close the connection

Messages (Server → Client):
---------------------------
- {"type": "init", "client_id": "...", "products": [...]}
- {"type": "productsUpdate", "products": [...]}
- {"type": "error", "code": "...", "message": "..."}

A frame that is not valid JSON gets an INVALID_JSON error and the
connection stays open. Any other failure closes the socket with 1011.

==============================================================================
"""

import asyncio
import logging
import uuid
from typing import Dict, List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from app.catalog import Product
from app.core.dependencies import get_broadcaster, get_catalog_service
from app.services import CatalogService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()

PRODUCTS_UPDATE_EVENT = "productsUpdate"


class CatalogBroadcaster:
    """
    Registry of connected clients and catalog publisher.

    Delivery is best-effort: sends to all clients run concurrently, a
    client whose send fails is dropped and nothing is retried.
    """

    def __init__(self) -> None:
        self._clients: Dict[str, WebSocket] = {}

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def connect(self, websocket: WebSocket) -> str:
        """Register an accepted connection and return its client id."""
        client_id = uuid.uuid4().hex
        self._clients[client_id] = websocket
        logger.info(f"📱 Client connected via WebSocket: {client_id}")
        return client_id

    def disconnect(self, client_id: str) -> None:
        """Forget a client. Unknown ids are ignored."""
        if self._clients.pop(client_id, None) is not None:
            logger.info(f"📱 Client disconnected from WebSocket: {client_id}")

    async def publish(self, products: List[Product]) -> int:
        """
        Send the full catalog to every connected client.

        Args:
            products: Current catalog snapshot

        Returns:
            Number of clients the message was delivered to
        """
        message = {
            "type": PRODUCTS_UPDATE_EVENT,
            "products": [p.to_public() for p in products],
        }

        clients = list(self._clients.items())
        results = await asyncio.gather(
            *(websocket.send_json(message) for _, websocket in clients),
            return_exceptions=True
        )

        delivered = 0
        for (client_id, _), result in zip(clients, results):
            if isinstance(result, BaseException):
                logger.warning(f"Dropping client {client_id}: {result}")
                self.disconnect(client_id)
            else:
                delivered += 1

        logger.info(
            f"📡 Catalog update emitted ({len(products)} products, "
            f"{delivered} clients)"
        )
        return delivered


class CatalogWebSocketHandler:
    """Handler for one catalog subscription."""

    def __init__(
        self,
        websocket: WebSocket,
        broadcaster: CatalogBroadcaster,
        service: CatalogService
    ):
        self._websocket = websocket
        self._broadcaster = broadcaster
        self._service = service
        self._client_id = None

    async def _send_error(self, message: str, code: str = "ERROR") -> None:
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def _send_products(self, msg_type: str) -> None:
        payload = {
            "type": msg_type,
            "products": [p.to_public() for p in self._service.list_products()],
        }
        if msg_type == "init":
            payload["client_id"] = self._client_id
        await self._websocket.send_json(payload)

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        self._client_id = self._broadcaster.connect(self._websocket)

        try:
            await self._send_products("init")

            while True:
                try:
                    data = await self._websocket.receive_json()
                except ValueError:
                    await self._send_error("Message must be valid JSON", "INVALID_JSON")
                    continue

                msg_type = data.get("type") if isinstance(data, dict) else None

                if msg_type == "get_products":
                    await self._send_products(PRODUCTS_UPDATE_EVENT)
                elif msg_type == "stop":
                    logger.info(f"🛑 Client requested stop: {self._client_id}")
                    await self._websocket.close()
                    break
                else:
                    await self._send_error(
                        f"Unknown message type: {msg_type}", "UNKNOWN_TYPE"
                    )

        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error(f"Catalog WebSocket error ({self._client_id}): {e}")
            await self._close(code=1011)
        finally:
            self._broadcaster.disconnect(self._client_id)

    async def _close(self, code: int) -> None:
        # Only close a socket both sides still consider open
        if (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        ):
            await self._websocket.close(code=code)


@router.websocket("/ws/products")
async def websocket_products(
    websocket: WebSocket,
    broadcaster: CatalogBroadcaster = Depends(get_broadcaster),
    service: CatalogService = Depends(get_catalog_service)
):
    """Subscribe to full-catalog updates."""
    handler = CatalogWebSocketHandler(websocket, broadcaster, service)
    await handler.run()
