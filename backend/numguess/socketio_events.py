from flask import current_app
from flask_login import current_user
from flask_socketio import join_room, leave_room, emit
from numguess import socketio


def _player_room(user_id) -> str:
    return f"player:{user_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_player(data=None):
    """Subscribe the logged-in user's socket to their own game updates."""
    if not current_user.is_authenticated:
        emit('error', {'message': 'Login required'})
        return
    room = _player_room(current_user.id)
    join_room(room)
    current_app.logger.debug(f"[ws-join] user={current_user.id} room={room}")
    emit('joined', {'room': room})


def handle_leave_player(data=None):
    if not current_user.is_authenticated:
        emit('error', {'message': 'Login required'})
        return
    room = _player_room(current_user.id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_player', handle_join_player, namespace='/ws')
    socketio.on_event('leave_player', handle_leave_player, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
