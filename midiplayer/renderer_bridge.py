import asyncio
import logging
import typing

import websockets
import websockets.asyncio.server
import websockets.exceptions

logger = logging.getLogger(__name__)


class RendererBridge:

    """
    WebSocket channel to external renderer processes.

    Every command posted by the sequencer is broadcast as a text frame to all
    connected renderers.  Delivery is fire-and-forget: commands posted while
    no renderer is connected are dropped, and a slow renderer never blocks
    playback.  Only one sequencer should post to a bridge at a time.
    """

    def __init__ (self, host: str = "127.0.0.1", port: int = 8765) -> None:

        self.host = host
        self.port = port
        self._server: typing.Optional[websockets.asyncio.server.Server] = None
        self._clients: typing.Set[websockets.asyncio.server.ServerConnection] = set()
        self.dropped = 0

    @property
    def client_count (self) -> int:
        return len(self._clients)

    async def start (self) -> None:

        """Start listening for renderer connections on the running loop."""

        if self._server is not None:
            return

        self._server = await websockets.asyncio.server.serve(self._handle_client, self.host, self.port)
        # Port 0 asks the OS for a free port.
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info(f"Renderer bridge listening on ws://{self.host}:{self.port}")

    async def _handle_client (self, websocket: websockets.asyncio.server.ServerConnection) -> None:

        self._clients.add(websocket)
        logger.info(f"Renderer connected ({len(self._clients)} total)")
        try:
            # Renderers never talk back; just hold the connection open.
            async for _message in websocket:
                pass
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            logger.info(f"Renderer disconnected ({len(self._clients)} total)")

    def post (self, command: str) -> None:

        """Broadcast one command to every connected renderer."""

        if not self._clients:
            self.dropped += 1
            return

        websockets.broadcast(self._clients, command)

    async def stop (self) -> None:

        if self._server is None:
            return

        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Renderer bridge closed")
