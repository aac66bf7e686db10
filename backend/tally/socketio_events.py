from flask import request
from flask_socketio import emit
from tally import socketio
from tally.realtime import get_broadcaster
from tally.services.rooms import CODE_PATTERN


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _extract_code(data):
    """Accept either the bare code string or ``{"code": "4821"}``."""
    if isinstance(data, dict):
        data = data.get('code')
    if not isinstance(data, str):
        return None
    code = data.strip()
    return code if CODE_PATTERN.match(code) else None


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(*args):
    get_broadcaster().disconnect(_get_sid())


def handle_join_room(data=None):
    code = _extract_code(data)
    if not code:
        emit('error', {'message': 'A 4-digit room code is required'})
        return
    get_broadcaster().join(_get_sid(), code)
    emit('joined', {'code': code})


def handle_leave_room(data=None):
    code = _extract_code(data)
    if not code:
        emit('error', {'message': 'A 4-digit room code is required'})
        return
    get_broadcaster().leave(_get_sid(), code)
    emit('left', {'code': code})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('leave-room', handle_leave_room, namespace=namespace)
