"""
Chrome DevTools Protocol (CDP) client.

One WebSocket connection per page target. The client is the session object
handed out by the session cache when this package attaches to Chrome itself:
it only needs ``send()`` and ``detach()``.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)


class CDPError(Exception):
    """CDP command error."""

    def __init__(self, code: int, message: str, method: Optional[str] = None):
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"CDP Error {code}: {prefix}{message}")


class CDPClient:
    """
    Async CDP client using WebSockets.

    Matches command responses to requests by message id. Events are
    ignored; nothing at this layer subscribes to them.
    """

    def __init__(self, timeout: float = 30.0):
        self.ws: Optional[ClientConnection] = None
        self.timeout = timeout
        self._callbacks: dict[int, tuple[asyncio.Future, str]] = {}
        self._id_counter = 0
        self._listen_task: Optional[asyncio.Task] = None
        self._connected = False
        self._ws_url: Optional[str] = None

    @property
    def connected(self) -> bool:
        """Check if connected to the page target."""
        return self._connected and self.ws is not None

    async def connect(self, ws_url: str) -> None:
        """Connect to a page target via its WebSocket debugger URL."""
        if self.connected:
            logger.warning("Already connected, closing existing connection")
            await self.close()

        logger.info(f"Connecting to CDP at {ws_url}")
        self._ws_url = ws_url

        try:
            self.ws = await connect(
                ws_url,
                max_size=None,  # screenshots and DOM snapshots can be large
                ping_interval=30,
                ping_timeout=10,
            )
        except Exception as e:
            logger.error(f"Failed to connect to CDP: {e}")
            raise

        self._connected = True
        self._listen_task = asyncio.create_task(self._listen_loop())
        logger.info("CDP connection established")

    async def _listen_loop(self) -> None:
        """Read messages until the socket closes."""
        try:
            async for message in self.ws:
                self._handle_message(message)
        except ConnectionClosed as e:
            logger.warning(f"CDP connection closed: {e}")
        finally:
            self._connected = False
            self._fail_pending(ConnectionError("CDP connection closed"))

    def _handle_message(self, message: str) -> None:
        """Resolve the pending future for a command response."""
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse CDP message: {e}")
            return
        if not isinstance(data, dict):
            logger.error(f"Ignoring non-object CDP message: {message!r}")
            return

        msg_id = data.get("id")
        if msg_id is None:
            return

        entry = self._callbacks.pop(msg_id, None)
        if entry is None:
            logger.debug(f"Dropping response for unknown message id {msg_id}")
            return

        future, method = entry
        if future.done():
            return
        if "error" in data:
            error = data["error"]
            future.set_exception(
                CDPError(error.get("code", -1), error.get("message", "Unknown error"), method)
            )
        else:
            future.set_result(data.get("result", {}))

    def _fail_pending(self, exc: Exception) -> None:
        for future, _ in self._callbacks.values():
            if not future.done():
                future.set_exception(exc)
        self._callbacks.clear()

    async def send(
        self,
        method: str,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """
        Send a CDP command and wait for the result.

        Args:
            method: CDP method name (e.g., "DOM.getContentQuads")
            params: Optional parameters dict

        Returns:
            The result dict from the CDP response

        Raises:
            CDPError: If the browser rejects the command
            RuntimeError: If not connected
            asyncio.TimeoutError: If no response arrives within ``timeout``
        """
        if not self.connected:
            raise RuntimeError("CDP client not connected")

        self._id_counter += 1
        msg_id = self._id_counter

        message = {
            "id": msg_id,
            "method": method,
            "params": params or {},
        }

        future: asyncio.Future[dict] = asyncio.get_running_loop().create_future()
        self._callbacks[msg_id] = (future, method)

        logger.debug(f"-> {method} #{msg_id}")
        try:
            await self.ws.send(json.dumps(message))
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(f"CDP command {method} timed out after {self.timeout}s")
        finally:
            self._callbacks.pop(msg_id, None)

    async def detach(self) -> None:
        """Session contract: detaching a page session closes its socket."""
        await self.close()

    async def close(self) -> None:
        """Close the CDP connection."""
        self._connected = False

        if self._listen_task:
            self._listen_task.cancel()
            try:
                await self._listen_task
            except asyncio.CancelledError:
                pass
            self._listen_task = None

        if self.ws:
            try:
                await self.ws.close()
            except ConnectionClosed:
                pass
            self.ws = None

        for future, _ in self._callbacks.values():
            if not future.done():
                future.cancel()
        self._callbacks.clear()

        logger.info("CDP connection closed")
