from flask import Blueprint, jsonify, request
from tally.services import rooms as room_service
from tally.services.games import get_history, start_game

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['POST'])
def create_room():
    room = room_service.create_room()
    return jsonify(room.to_dict()), 201


@rooms.route('/<string:code>', methods=['GET'])
def get_room(code):
    room = room_service.get_room(code)
    return jsonify(room.to_dict(include_children=True))


@rooms.route('/<string:code>/participants', methods=['POST'])
def add_participant(code):
    data = request.get_json(silent=True)
    name = data.get('name') if isinstance(data, dict) else None
    participant = room_service.add_participant(code, name)
    return jsonify(participant.to_dict()), 201


@rooms.route('/<string:code>/games', methods=['POST'])
def create_game(code):
    game = start_game(code)
    return jsonify(game.to_dict()), 201


@rooms.route('/<string:code>/history', methods=['GET'])
def history(code):
    return jsonify([game.to_dict() for game in get_history(code)])
