"""
PrivFinOS - Application Errors

Services raise these; the Flask error handlers in api.py turn them into the
JSON error envelope with the matching HTTP status.
"""


class AppError(Exception):
    """Base error carrying an HTTP status code and an optional machine code."""

    status_code = 500

    def __init__(self, message, code=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        error = {"message": self.message}
        if self.code:
            error["code"] = self.code
        return error


class BadRequestError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, message="Unauthorized", code=None):
        super().__init__(message, code)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message="Forbidden", code=None):
        super().__init__(message, code)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message="Not found", code=None):
        super().__init__(message, code)


class ConflictError(AppError):
    status_code = 409


class InternalServerError(AppError):
    status_code = 500

    def __init__(self, message="Internal server error", code="INTERNAL_ERROR"):
        super().__init__(message, code)


class InvalidParentError(BadRequestError):
    """A category was given itself as parent."""

    def __init__(self, message="Category cannot be its own parent", code="INVALID_PARENT"):
        super().__init__(message, code)


class RequestValidationError(BadRequestError):
    """Request body, query string or path parameter failed schema validation."""

    def __init__(self, details, message="Validation error", code="VALIDATION_ERROR"):
        super().__init__(message, code)
        self.details = details

    def to_dict(self):
        error = super().to_dict()
        error["details"] = self.details
        return error
