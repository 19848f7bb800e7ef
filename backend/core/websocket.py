"""WebSocket hub for real-time inventory updates.
Tracks connected observers and pushes item updates to them.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import socketio
from pydantic import ValidationError as PydanticValidationError

from core.config import settings

logger = logging.getLogger(__name__)

UPDATE_EVENT = 'ReceiveItemUpdate'

SendFunc = Callable[[Dict[str, Any]], Awaitable[Any]]

# Create Socket.IO server with CORS support
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*',
    logger=False,
    engineio_logger=False,
    ping_timeout=60,  # Increased from default 20s to prevent premature disconnects
    ping_interval=25,  # Send ping every 25s
    allow_upgrades=True,  # Allow upgrade from polling to WebSocket
    # Don't set socketio_path here - let the mount point handle it
)


class ObserverHandle:
    """A registered observer: its send function and its own FIFO delivery queue"""

    def __init__(self, observer_id: str, send: SendFunc):
        self.id = observer_id
        self.send = send
        self.queue: asyncio.Queue = asyncio.Queue()
        self.task: Optional[asyncio.Task] = None
        self.closed = False

    def __repr__(self) -> str:
        return f"ObserverHandle({self.id!r})"


class UpdateBroadcaster:
    """
    Fan-out of update events to every subscribed observer.

    publish() only enqueues, so it never suspends or raises. Each observer
    drains its own queue in a dedicated task, which keeps events to one
    observer in order and isolates a failing observer from the others.
    """

    def __init__(self):
        self._observers: Dict[str, ObserverHandle] = {}
        self._counter = 0

    def subscribe(self, send: SendFunc, observer_id: Optional[str] = None) -> ObserverHandle:
        if observer_id is None:
            self._counter += 1
            observer_id = f"observer-{self._counter}"
        # Re-subscribing under the same id replaces the old handle
        self.unsubscribe(observer_id)

        handle = ObserverHandle(observer_id, send)
        handle.task = asyncio.get_running_loop().create_task(self._deliver(handle))
        self._observers[observer_id] = handle
        logger.info(f"Observer subscribed: {observer_id} ({len(self._observers)} connected)")
        return handle

    def unsubscribe(self, handle: Union[ObserverHandle, str, None]) -> bool:
        observer_id = handle.id if isinstance(handle, ObserverHandle) else handle
        if observer_id is None:
            return False
        current = self._observers.get(observer_id)
        if current is None:
            return False
        if isinstance(handle, ObserverHandle) and current is not handle:
            # Stale handle for an id that has since been re-subscribed
            return False

        del self._observers[observer_id]
        current.closed = True
        if current.task is not None:
            current.task.cancel()
        # Drop undelivered events so join() callers are released
        while True:
            try:
                current.queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            current.queue.task_done()
        logger.info(f"Observer unsubscribed: {observer_id}")
        return True

    def get(self, observer_id: Optional[str]) -> Optional[ObserverHandle]:
        if observer_id is None:
            return None
        return self._observers.get(observer_id)

    @property
    def observers(self) -> List[ObserverHandle]:
        return list(self._observers.values())

    def publish(self, event: Dict[str, Any], exclude: Optional[ObserverHandle] = None) -> int:
        """Queue `event` for every observer except `exclude`. Returns the number of recipients."""
        recipients = 0
        for handle in list(self._observers.values()):
            if handle is exclude or handle.closed:
                continue
            handle.queue.put_nowait(event)
            recipients += 1
        return recipients

    async def join(self):
        """Wait until every queued event has been attempted"""
        for handle in list(self._observers.values()):
            if not handle.closed:
                await handle.queue.join()

    async def close(self):
        for handle in list(self._observers.values()):
            self.unsubscribe(handle)

    async def _deliver(self, handle: ObserverHandle):
        while True:
            event = await handle.queue.get()
            try:
                await handle.send(event)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Dropped update for observer {handle.id}: {e}")
            finally:
                handle.queue.task_done()


# Global broadcaster instance
broadcaster = UpdateBroadcaster()


def _send_to(sid: str) -> SendFunc:
    async def send(event: Dict[str, Any]):
        await sio.emit(UPDATE_EVENT, event, to=sid)
    return send


def originator_for(sid: Optional[str]) -> Optional[ObserverHandle]:
    """Handle to exclude from a broadcast triggered by `sid`, per configuration"""
    if not settings.BROADCAST_EXCLUDE_ORIGINATOR:
        return None
    return broadcaster.get(sid)


# Socket.IO Event Handlers
@sio.event
async def connect(sid, environ, auth=None):
    """Handle client connection"""
    logger.info(f"Client connected: {sid}")
    broadcaster.subscribe(_send_to(sid), observer_id=sid)
    await sio.emit('connection_established', {'sid': sid}, to=sid)


@sio.event
async def disconnect(sid, reason=None):
    """Handle client disconnection"""
    logger.info(f"Client disconnected: {sid}")
    broadcaster.unsubscribe(sid)


@sio.on('NotifyItemUpdated')
async def notify_item_updated(sid, data):
    """Client-originated update: forward to everyone else"""
    from modules.inventory.models import ItemUpdate

    try:
        update = ItemUpdate.model_validate(data)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring malformed update from {sid}: {e}")
        return {'status': 'error', 'detail': 'Invalid update payload'}

    recipients = broadcaster.publish(update.model_dump(mode='json'), exclude=originator_for(sid))
    return {'status': 'broadcasted', 'recipients': recipients}


__all__ = ['sio', 'broadcaster', 'UpdateBroadcaster', 'ObserverHandle', 'originator_for', 'UPDATE_EVENT']
