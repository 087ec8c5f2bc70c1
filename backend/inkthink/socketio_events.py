import functools

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from inkthink import socketio


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _services():
    return current_app.extensions['inkthink']


def _room_id(data):
    room_id = (data or {}).get('room_id')
    return room_id if isinstance(room_id, str) and room_id else None


def _guarded(name, fallback_message):
    """Wrap a handler so an unexpected failure is logged and reported to the caller only.

    A ``None`` message logs without replying, for events with nobody left to tell.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args):
            try:
                return fn(*args)
            except Exception:
                current_app.logger.exception(f"[handler-error] event={name} sid={_get_sid()}")
                if fallback_message is not None:
                    emit('error', {'message': fallback_message})
        return wrapper
    return decorator


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws', 'sid': _get_sid()})


@_guarded('disconnect', None)
def handle_disconnect(reason=None):
    sid = _get_sid()
    left = _services().membership.disconnect(sid)
    if left:
        current_app.logger.info(f"[disconnect] sid={sid} rooms={left} reason={reason}")


@_guarded('create_room', 'Failed to create the room')
def handle_create_room(data):
    room_id = _room_id(data)
    if _services().membership.create_room(_get_sid(), room_id, (data or {}).get('username')):
        join_room(room_id)


@_guarded('join_room', 'Failed to join the room')
def handle_join_room(data):
    room_id = _room_id(data)
    if _services().membership.join_room(_get_sid(), room_id, (data or {}).get('username')):
        join_room(room_id)


@_guarded('leave_room', 'Failed to leave the room')
def handle_leave_room(data):
    room_id = _room_id(data)
    if not room_id:
        emit('error', {'message': 'room_id is required'})
        return
    _services().membership.leave_room(_get_sid(), room_id)
    leave_room(room_id)
    emit('left', {'room_id': room_id})


@_guarded('start_game', 'Failed to start game')
def handle_start_game(data):
    _services().engine.start_game(_room_id(data), _get_sid())


@_guarded('submit_guess', 'Failed to process the guess')
def handle_submit_guess(data):
    _services().engine.submit_guess(_room_id(data), _get_sid(), (data or {}).get('guess'))


def handle_drawing(data):
    # Strokes from anyone but the active drawer are dropped silently
    _services().engine.relay_stroke(_room_id(data), _get_sid(), (data or {}).get('stroke'))


def handle_check_cheating(data):
    try:
        _services().cheat_detector.check_cheating(_room_id(data), _get_sid(), (data or {}).get('snapshot'))
    except Exception:
        current_app.logger.exception(f"[handler-error] event=check_cheating sid={_get_sid()}")


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create_room', handle_create_room, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('submit_guess', handle_submit_guess, namespace=namespace)
    socketio.on_event('drawing', handle_drawing, namespace=namespace)
    socketio.on_event('check_cheating', handle_check_cheating, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
