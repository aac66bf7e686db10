from flask import Blueprint, jsonify
from tally.services.games import decrement_score, end_game, increment_score

games = Blueprint('games', __name__)
scores = Blueprint('scores', __name__)


@games.route('/<string:game_id>/end', methods=['POST'])
def finish_game(game_id):
    game = end_game(game_id)
    return jsonify(game.to_dict(include_room=True))


@scores.route('/<string:score_id>/increment', methods=['POST'])
def increment(score_id):
    return jsonify(increment_score(score_id))


@scores.route('/<string:score_id>/decrement', methods=['POST'])
def decrement(score_id):
    return jsonify(decrement_score(score_id))
