"""Application error types and their HTTP representation."""

from __future__ import annotations

import logging

from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base class for errors that map onto an HTTP error response.

    ``str(error)`` is the descriptive text; ``detail`` is what a client sees.
    """

    status_code = 500

    def __init__(self, message: str = INTERNAL_MESSAGE, detail: str = INTERNAL_MESSAGE) -> None:
        super().__init__(message)
        self.detail = detail

    def to_response(self) -> JSONResponse:
        """Render the error as a JSON response carrying its status code."""
        return JSONResponse(
            {"error": self.detail, "status": self.status_code},
            status_code=self.status_code,
        )


class BadRequestError(AppError):
    """The request was malformed or failed validation."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(f"Bad request: {detail}", detail)


class NotFoundError(AppError):
    """The requested resource does not exist."""

    status_code = 404

    def __init__(self, detail: str) -> None:
        super().__init__(f"Not found: {detail}", detail)


class InternalServerError(AppError):
    """A failure inside the server that the client cannot fix."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__(INTERNAL_MESSAGE, INTERNAL_MESSAGE)


class UnauthorizedError(AppError):
    """The request lacks valid credentials."""

    status_code = 401

    def __init__(self) -> None:
        super().__init__("Unauthorized", "Unauthorized")


def error_response(exc: BaseException) -> JSONResponse:
    """Turn any exception into a JSON error response.

    Application errors keep their status and message; anything else is logged
    and reported to the client as a generic internal server error.
    """
    if isinstance(exc, AppError):
        return exc.to_response()
    if isinstance(exc, OSError):
        logger.error("IO error: %r", exc)
    else:
        logger.error("Unexpected error: %r", exc)
    return InternalServerError().to_response()