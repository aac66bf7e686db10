"""Room channels: who is watching which room code, and event fan-out.

Socket.IO rooms do the actual delivery; :class:`ChannelRegistry` keeps the
membership bookkeeping the app needs to answer "who is in room 4821" and to
clean up after a dropped connection.
"""

import logging
import threading
from typing import Dict, Set

from flask import current_app
from flask_socketio import join_room, leave_room


class ChannelRegistry:
    """Room code -> connected session ids, plus the reverse index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._members: Dict[str, Set[str]] = {}
        self._channels: Dict[str, Set[str]] = {}

    def add(self, code: str, sid: str) -> bool:
        with self._lock:
            members = self._members.setdefault(code, set())
            if sid in members:
                return False
            members.add(sid)
            self._channels.setdefault(sid, set()).add(code)
            return True

    def discard(self, code: str, sid: str) -> bool:
        with self._lock:
            members = self._members.get(code)
            if not members or sid not in members:
                return False
            members.discard(sid)
            if not members:
                del self._members[code]
            channels = self._channels.get(sid)
            if channels is not None:
                channels.discard(code)
                if not channels:
                    del self._channels[sid]
            return True

    def drop(self, sid: str) -> Set[str]:
        """Forget a session entirely; returns the codes it was watching."""
        with self._lock:
            codes = self._channels.pop(sid, set())
            for code in codes:
                members = self._members.get(code)
                if members is None:
                    continue
                members.discard(sid)
                if not members:
                    del self._members[code]
            return codes

    def members(self, code: str) -> Set[str]:
        with self._lock:
            return set(self._members.get(code, ()))

    def channels_for(self, sid: str) -> Set[str]:
        with self._lock:
            return set(self._channels.get(sid, ()))

    def clear(self) -> None:
        with self._lock:
            self._members.clear()
            self._channels.clear()


class Broadcaster:
    """Relays state changes to every session watching a room code."""

    def __init__(self, registry: ChannelRegistry = None) -> None:
        self.registry = registry if registry is not None else ChannelRegistry()
        self.socketio = None
        self.namespace = '/'
        self.logger = logging.getLogger(__name__)

    def init_app(self, app, socketio) -> None:
        self.socketio = socketio
        self.namespace = app.config.get('SOCKETIO_NAMESPACE', '/')
        self.logger = app.logger
        self.registry.clear()
        app.extensions['broadcaster'] = self

    def shutdown(self) -> None:
        self.registry.clear()

    def join(self, sid: str, code: str) -> None:
        # A session may watch several rooms; joining never leaves the others
        join_room(code, sid=sid, namespace=self.namespace)
        if self.registry.add(code, sid):
            self.logger.info(f"[socket] {sid} joined room {code} ({len(self.registry.members(code))} watching)")

    def leave(self, sid: str, code: str) -> None:
        leave_room(code, sid=sid, namespace=self.namespace)
        if self.registry.discard(code, sid):
            self.logger.info(f"[socket] {sid} left room {code}")

    def disconnect(self, sid: str) -> None:
        # Socket.IO drops its own room membership on disconnect
        codes = self.registry.drop(sid)
        if codes:
            self.logger.info(f"[socket] {sid} disconnected from {', '.join(sorted(codes))}")

    def broadcast(self, code: str, event: str, payload) -> None:
        """Send ``event`` to the room's current viewers.

        Best effort: a failed emit is logged and never reaches the caller.
        Sessions joining later get nothing; they re-fetch over REST.
        """
        try:
            self.socketio.emit(event, payload, to=code, namespace=self.namespace)
        except Exception:
            self.logger.exception(f"[broadcast] {event} to room {code} failed")
            return
        self.logger.debug(f"[broadcast] {event} -> room {code} ({len(self.registry.members(code))} watching)")


def get_broadcaster() -> Broadcaster:
    return current_app.extensions['broadcaster']
