"""Map domain exceptions onto the JSON envelope and HTTP status codes."""

from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from .common.responses import fail
from .core.exceptions import ConflictError, NotFoundError, StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), status=400)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), status=404)

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return fail(str(e), status=400, code=e.code, record=e.record)

    @app.errorhandler(StorageUnavailableError)
    def _storage(e: StorageUnavailableError):
        logger.error("Storage unavailable: %s", e)
        return fail(str(e), status=503)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        if e.code == 404:
            return fail("Route not found", status=404)
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return fail(message, status=500)
