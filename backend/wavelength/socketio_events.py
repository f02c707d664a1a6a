from flask_socketio import join_room, leave_room, emit
from wavelength import socketio


def room_for(code: str) -> str:
    return f"session:{str(code).upper()}"


def broadcast_state(code: str) -> None:
    """Tell every client in the session room to refetch state."""
    socketio.emit('state_update', {'code': code}, to=room_for(code), namespace='/ws')


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    code = (data or {}).get('code')
    if not code:
        emit('error', {'message': 'code is required'})
        return
    room = room_for(code)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_session(data):
    code = (data or {}).get('code')
    if not code:
        emit('error', {'message': 'code is required'})
        return
    room = room_for(code)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
