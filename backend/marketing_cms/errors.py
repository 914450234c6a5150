from typing import Any, Optional

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from marketing_cms.domain.invariants.exceptions import InvariantViolation


class AppError(Exception):
    """
    Base error for failures the API reports to callers.

    Every subclass carries a stable `kind` and an HTTP status code so the
    error handlers can serialize it without inspecting the message.
    """

    status_code = 500
    kind = "AppError"

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {
            "error": self.kind,
            "message": self.message,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(AppError):
    status_code = 404
    kind = "NotFound"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with ID {resource_id} not found",
            details={"resource": resource, "id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(AppError):
    status_code = 409
    kind = "Conflict"


class ConcurrentModificationError(ConflictError):
    """Version sequence race on (page_id, version_number). Safe to retry."""

    kind = "ConcurrentModification"
    retryable = True


class ValidationError(AppError):
    status_code = 400
    kind = "ValidationError"


class ForbiddenError(AppError):
    status_code = 403
    kind = "Forbidden"


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        response = jsonify({
            "error": error.name.replace(" ", ""),
            "message": error.description,
        })
        response.status_code = error.code or 500
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        current_app.logger.exception("Unhandled error: %s", error)
        response = jsonify({
            "error": "InternalServerError",
            "message": "Internal server error"
        })
        response.status_code = 500
        return response
