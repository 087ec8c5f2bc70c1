from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _services():
    return current_app.extensions['inkthink']


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the InkThink game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'rooms': len(_services().registry)})


@main.route('/api/rooms/<string:room_id>')
def get_room_state(room_id):
    with _services().engine.locked(room_id) as room:
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict())
