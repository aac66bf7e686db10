"""Domain errors raised by the services and their JSON rendering."""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from tally import db


class TallyError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(TallyError):
    status_code = 400
    message = 'Invalid request'


class NotFound(TallyError):
    status_code = 404
    message = 'Not found'


class Conflict(TallyError):
    status_code = 409
    message = 'Conflict'


class Expired(TallyError):
    status_code = 410
    message = 'Room has expired'


class StoreError(TallyError):
    status_code = 500
    message = 'Data store failure'


def register_error_handlers(app):
    @app.errorhandler(TallyError)
    def handle_tally_error(exc):
        if exc.status_code >= 500:
            app.logger.error(f"[error] {type(exc).__name__}: {exc.message}")
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(exc):
        db.session.rollback()
        app.logger.exception('[error] data store failure')
        return jsonify({'error': StoreError.message}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code
