"""
Jitsi video room adapter.

A ``VideoRoom`` holds the options the embedded ``JitsiMeetExternalAPI`` is
constructed with, lets the host register handlers for the widget's lifecycle
events, and must be disposed when the session ends. Rooms are acquired and
released through ``VideoRoomRegistry``; leaving the ``with`` block of a room
disposes it.
"""

import logging
import time
from typing import Any, Callable, Optional

from ...config import JITSI_DOMAIN

logger = logging.getLogger(__name__)

VIDEO_EVENTS = (
    "videoConferenceJoined",
    "videoConferenceLeft",
    "participantJoined",
    "participantLeft",
    "readyToClose",
)

DEFAULT_CONTAINER = "jitsi-container"
ROOM_IDLE_TIMEOUT = 2 * 60 * 60  # 2 hours without events

EventHandler = Callable[[dict], Any]


def therapy_room_name(therapist_id: str, now: Optional[float] = None) -> str:
    millis = int((now if now is not None else time.time()) * 1000)
    return f"TherapySession-{therapist_id}-{millis}"


class VideoRoomDisposed(Exception):
    pass


class VideoRoom:
    def __init__(
        self,
        room_name: str,
        display_name: str = "Client",
        prejoin_page: bool = True,
        hide_branding: bool = False,
        parent_node: str = DEFAULT_CONTAINER,
        width: str = "100%",
        height: str = "100%",
        domain: str = JITSI_DOMAIN,
        owner_id: Optional[str] = None,
    ):
        self.room_name = room_name
        self.owner_id = owner_id
        self.last_activity = time.time()
        self.domain = domain
        self.participants: set[str] = set()
        self.disposed = False
        self._handlers: dict[str, list[EventHandler]] = {event: [] for event in VIDEO_EVENTS}

        interface_config = {}
        if hide_branding:
            interface_config = {
                "SHOW_JITSI_WATERMARK": False,
                "SHOW_BRAND_WATERMARK": False,
                "SHOW_POWERED_BY": False,
            }
        self.options = {
            "roomName": room_name,
            "width": width,
            "height": height,
            "parentNode": parent_node,
            "interfaceConfigOverwrite": interface_config,
            "configOverwrite": {"prejoinPageEnabled": prejoin_page},
            "userInfo": {"displayName": display_name},
        }

    @property
    def meeting_link(self) -> str:
        return f"https://{self.domain}/{self.room_name}"

    def on(self, event: str, handler: EventHandler) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown video event: {event}")
        if self.disposed:
            raise VideoRoomDisposed(self.room_name)
        self._handlers[event].append(handler)

    def emit(self, event: str, payload: Optional[dict] = None) -> int:
        """Forward a widget event to its handlers; returns how many ran"""
        if event not in self._handlers:
            raise ValueError(f"Unknown video event: {event}")
        if self.disposed:
            raise VideoRoomDisposed(self.room_name)

        payload = payload or {}
        self.last_activity = time.time()
        if event == "participantJoined" and payload.get("id"):
            self.participants.add(str(payload["id"]))
        elif event == "participantLeft" and payload.get("id"):
            self.participants.discard(str(payload["id"]))

        handlers = list(self._handlers[event])
        for handler in handlers:
            handler(payload)
        return len(handlers)

    def dispose(self) -> None:
        """Release the embedded session; safe to call twice"""
        if self.disposed:
            return
        self.disposed = True
        self.participants.clear()
        for handlers in self._handlers.values():
            handlers.clear()
        logger.info(f"📴 Video room {self.room_name} disposed")

    def __enter__(self) -> "VideoRoom":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class VideoRoomRegistry:
    """
    Rooms currently open on this process, keyed by room name.

    A room is released when the widget fires ``readyToClose``, when the host
    ends it, when its owner opens a new room, or once it has seen no events
    for ``idle_timeout`` seconds. The last case covers tabs closed without a
    clean hang-up.
    """

    def __init__(self, idle_timeout: float = ROOM_IDLE_TIMEOUT):
        self.idle_timeout = idle_timeout
        self._rooms: dict[str, VideoRoom] = {}

    def acquire(self, room: VideoRoom) -> VideoRoom:
        self.sweep()
        existing = self._rooms.get(room.room_name)
        if existing and not existing.disposed:
            return existing

        if room.owner_id:
            # One live room per host; an earlier one was abandoned
            for name in [n for n, r in self._rooms.items() if r.owner_id == room.owner_id]:
                self.release(name)

        self._rooms[room.room_name] = room
        # The widget asks to close once everyone has hung up
        room.on("readyToClose", lambda _payload: self.release(room.room_name))
        logger.info(f"🎥 Video room {room.room_name} opened")
        return room

    def get(self, room_name: str) -> Optional[VideoRoom]:
        return self._rooms.get(room_name)

    def release(self, room_name: str) -> bool:
        room = self._rooms.pop(room_name, None)
        if room is None:
            return False
        room.dispose()
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        """Release rooms idle for longer than ``idle_timeout``; returns how many"""
        now = now if now is not None else time.time()
        stale = [
            name
            for name, room in self._rooms.items()
            if now - room.last_activity > self.idle_timeout
        ]
        for name in stale:
            logger.info(f"⌛ Releasing idle video room {name}")
            self.release(name)
        return len(stale)

    def __len__(self) -> int:
        return len(self._rooms)


video_rooms = VideoRoomRegistry()
