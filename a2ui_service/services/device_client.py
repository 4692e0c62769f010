"""
Device-side transport client.

Connects a local SurfaceStore to the design service over a WebSocket-like
connection: registers, then folds every pushed `a2ui_messages` frame into the
store in arrival order. On connection loss it reconnects with a capped
quadratic backoff and gives up after too many consecutive failures.

The connection is injected as an async factory so the client works with any
WebSocket library (and with in-memory fakes in tests).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from a2ui.kernel.processor import LiveResult, apply_live
from a2ui.kernel.store import SurfaceStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MAX_DELAY = 30.0


class Connection(Protocol):
    """What `connect()` must return. `receive_text` raises ConnectionError when the peer goes away."""

    async def send_text(self, data: str) -> None: ...

    async def receive_text(self) -> str: ...

    async def close(self) -> None: ...


Connect = Callable[[], Awaitable[Connection]]
Sleep = Callable[[float], Awaitable[Any]]


def reconnect_delay(attempt: int, max_delay: float = DEFAULT_MAX_DELAY) -> float:
    """Seconds to wait before reconnect attempt `attempt` (1-based): attempt², capped."""
    return float(min(attempt * attempt, max_delay))


class DeviceClient:
    """
    Keeps one device registered with the service and its store up to date.

      client = DeviceClient(store, connect, platform="ios", device_id="phone-1")
      await client.run()      # returns after stop() or after giving up
    """

    def __init__(
        self,
        store: SurfaceStore,
        connect: Connect,
        platform: str,
        device_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.store = store
        self._connect = connect
        self.platform = platform
        self.device_id = device_id
        self.max_attempts = max_attempts
        self.max_delay = max_delay
        self._sleep = sleep

        self.registered = False
        self.gave_up = False
        self.failures = 0
        self.results: list[LiveResult] = []
        self._stopping = False
        self._connection: Connection | None = None

    async def stop(self) -> None:
        """Stop the run loop and close the current connection."""
        self._stopping = True
        connection = self._connection
        if connection is not None:
            try:
                await connection.close()
            except (ConnectionError, OSError):
                logger.debug("client: close failed", exc_info=True)

    async def run(self) -> None:
        while not self._stopping:
            try:
                self._connection = await self._connect()
            except (ConnectionError, OSError) as e:
                logger.warning("client: connect failed: %s", e)
                if not await self._backoff():
                    return
                continue

            self.failures = 0
            try:
                await self._register()
                await self._receive_loop()
            except (ConnectionError, OSError) as e:
                logger.warning("client: connection lost: %s", e)
            finally:
                self.registered = False
                self._connection = None

            if self._stopping:
                return
            if not await self._backoff():
                return

    # -- internals --

    async def _backoff(self) -> bool:
        """Count a failure and sleep. Returns False once the client gives up."""
        if self._stopping:
            return False
        self.failures += 1
        if self.failures >= self.max_attempts:
            logger.error("client: giving up after %d failed attempts", self.failures)
            self.gave_up = True
            return False
        delay = reconnect_delay(self.failures, self.max_delay)
        logger.info("client: reconnecting in %.0fs (attempt %d/%d)", delay, self.failures, self.max_attempts)
        await self._sleep(delay)
        return not self._stopping

    async def _register(self) -> None:
        frame = {"type": "register", "platform": self.platform, "deviceId": self.device_id}
        await self._connection.send_text(json.dumps(frame))

    async def _receive_loop(self) -> None:
        while not self._stopping:
            raw = await self._connection.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("client: malformed frame: %r", raw[:200])
                continue
            if not isinstance(frame, dict):
                continue
            self.handle_frame(frame)

    def handle_frame(self, frame: dict[str, Any]) -> LiveResult | None:
        """Apply one decoded server frame. Unknown frame types are ignored."""
        frame_type = frame.get("type")

        if frame_type == "registered":
            self.registered = True
            logger.info("client: registered as %s", frame.get("deviceId", self.device_id))
            return None

        if frame_type == "a2ui_messages":
            messages = frame.get("messages")
            result = apply_live(self.store, messages)
            self.results.append(result)
            logger.info(
                "client: applied %d/%d messages",
                sum(1 for r in result.applied if r.accepted),
                len(messages) if isinstance(messages, list) else 0,
            )
            return result

        logger.debug("client: ignoring frame type %r", frame_type)
        return None
