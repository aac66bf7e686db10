from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from tally import db

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Tally scoreboard server!'})


@main.route('/health')
def health_check():
    try:
        db.session.execute(text('SELECT 1'))
        database = 'connected'
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[health] database unavailable: {exc}")
        database = 'disconnected'
    healthy = database == 'connected'
    return jsonify({
        'status': 'healthy' if healthy else 'degraded',
        'database': database,
    }), 200 if healthy else 503
