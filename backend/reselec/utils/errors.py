from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError

from reselec.utils.responses import error_response


class ApiError(Exception):
    """
    Base business error. Carries the HTTP status the handler answers with.
    """
    def __init__(self, message, status_code=400, errors=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}
        self.payload = payload or {}


class NotFoundError(ApiError):
    def __init__(self, message="Resource not found", **kwargs):
        super().__init__(message, status_code=404, **kwargs)


class ConflictError(ApiError):
    """Uniqueness violation, typically two writers creating the same phase record."""

    def __init__(self, message="Conflicting concurrent update", **kwargs):
        super().__init__(message, status_code=409, **kwargs)


class InvalidTransitionError(ApiError):
    """
    Requested status is not reachable from the current one.
    The payload lists the allowed targets so the caller can self-correct.
    """

    def __init__(self, current, requested, allowed):
        current_s = getattr(current, "value", current)
        requested_s = getattr(requested, "value", requested)
        super().__init__(
            f"Invalid status transition from {current_s} to {requested_s}",
            status_code=400,
            payload={
                "current": current_s,
                "requested": requested_s,
                "allowed": [getattr(s, "value", s) for s in allowed],
            },
        )
        self.current = current
        self.requested = requested
        self.allowed = tuple(allowed)


class StoreError(ApiError):
    def __init__(self, message="Persistence failure", **kwargs):
        super().__init__(message, status_code=500, **kwargs)


def register_error_handlers(app):

    @app.errorhandler(StoreError)
    def handle_store_error(err: StoreError):
        app.logger.error("[store] %s", err.message)

        # Message only exposed while debugging
        message = err.message if app.debug else "Internal server error"
        return error_response(message, err.status_code)

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return error_response(err.message, err.status_code, errors=err.errors, payload=err.payload)

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err: ValidationError):
        return error_response("Validation failed", 400, errors=err.messages)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description or "HTTP error", err.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        app.logger.exception(err)
        return error_response("Internal server error", 500)
