from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from models import db


class ValidationError(Exception):
    """Request body or stored record failed validation (400)."""

    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail


class AuthenticationError(Exception):
    """Missing, forged or revoked token, or bad login credentials."""


def register_error_handlers(app):

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({'errors': error.detail}), 400

    @app.errorhandler(AuthenticationError)
    def handle_authentication_error(error):
        return '', 401

    @app.errorhandler(400)
    def handle_bad_request(error):
        return '', 400

    @app.errorhandler(404)
    def handle_not_found(error):
        return '', 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return '', 405, {'Allow': ', '.join(error.valid_methods or [])}

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(error):
        db.session.rollback()
        current_app.logger.exception('Store error')
        return jsonify({'errors': {'store': 'database error'}}), 400
