import logging

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from pet_market import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto a JSON error response."""
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self):
        body = {'message': self.message}
        if self.errors:
            body['errors'] = self.errors
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Validation failed'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = 'No token, authorization denied'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Not authorized'


class ConflictError(ApiError):
    status_code = 400
    default_message = 'Request conflicts with the current state'


class InvalidTransition(ConflictError):
    default_message = 'Invalid status transition'


def register_error_handlers(api):
    @api.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        logger.warning(f"{type(error).__name__}: {error.message}")
        return error.to_dict(), error.status_code

    @api.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception(f"Database error: {error}")
        return {'message': 'Server error'}, 500

    @api.errorhandler(Exception)
    def handle_unexpected_error(error):
        # Token errors are answered by the flask-jwt-extended loaders
        if isinstance(error, (JWTExtendedException, PyJWTError)):
            raise error
        if isinstance(error, HTTPException):
            return getattr(error, 'data', None) or {'message': error.description}, error.code
        db.session.rollback()
        logger.exception(f"Unhandled error: {error}")
        return {'message': 'Server error'}, 500
