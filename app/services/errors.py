"""
Domain errors raised by the application services.

Each error carries the HTTP status and a stable code so route handlers can
render it without knowing which rule was violated.
"""


class ApplicationError(Exception):
    """Base exception for application workflow errors"""
    status_code = 400
    code = 'application_error'

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class Unauthenticated(ApplicationError):
    status_code = 401
    code = 'unauthenticated'


class Forbidden(ApplicationError):
    status_code = 403
    code = 'forbidden'


class NotFound(ApplicationError):
    status_code = 404
    code = 'not_found'


class ValidationFailed(ApplicationError):
    status_code = 400
    code = 'validation_failed'


class TerminalStateViolation(ApplicationError):
    status_code = 409
    code = 'application_reviewed'


class ProcessClosed(ApplicationError):
    status_code = 409
    code = 'application_closed'


class UpstreamFailure(ApplicationError):
    status_code = 502
    code = 'upstream_failure'
