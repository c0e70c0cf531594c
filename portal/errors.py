import logging
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PortalError(Exception):
    status_code = 500
    default_message = 'Server Error'

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self):
        body = {'message': self.message}
        if self.errors:
            body['errors'] = self.errors
        return body


class Unauthenticated(PortalError):
    status_code = 401
    default_message = 'No token, authorization denied'


class Forbidden(PortalError):
    status_code = 403
    default_message = 'Access denied: you are not allowed to do this'


class NotFound(PortalError):
    status_code = 404
    default_message = 'Not found'


class ValidationFailed(PortalError):
    status_code = 400
    default_message = 'Invalid request'


class Conflict(PortalError):
    status_code = 400
    default_message = 'User with that email or username already exists'


class Internal(PortalError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(PortalError)
    def handle_portal_error(error):
        if isinstance(error, Internal):
            logger.error('Internal error: %s', error.message, exc_info=error.__cause__ or error)
            return jsonify({'message': Internal.default_message}), 500
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception('Unhandled error')
        return jsonify({'message': 'Server Error'}), 500
