# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware rendering problem documents.
Maps the scoping exception taxonomy onto HTTP status codes for Flask.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Any, Dict, List, Optional, Tuple
from opentelemetry import trace
import logging

from ..exceptions import ScopingException, ValidationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

TITLES = {
    "validation-error": "Validation Error",
    "authentication-required": "Authentication Required",
    "resource-not-found": "Resource Not Found",
    "directory-unavailable": "Directory Unavailable",
    "internal-server-error": "Internal Server Error",
}


class ErrorHandlerMiddleware:
    """Centralized error handling with RFC 7807 problem responses."""

    def __init__(self, app: Flask, base_url: str):
        self.app = app
        self.base_url = base_url.rstrip('/')
        self.register_error_handlers()

    def build_problem(self, error_type: str, status: int, detail: Optional[str],
                      title: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Build a problem document."""
        problem = {
            "type": f"{self.base_url}/problems/{error_type}",
            "title": title or TITLES.get(error_type, error_type.replace('-', ' ').title()),
            "status": status,
            "detail": detail,
            "instance": request.path
        }
        if errors:
            problem["errors"] = errors
        return problem

    def register_error_handlers(self):
        """Register error handlers with the Flask application."""

        @self.app.errorhandler(ScopingException)
        def handle_scoping_exception(error: ScopingException):
            return self.handle_scoping_exception(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            return self.handle_http_exception(error)

        @self.app.errorhandler(Exception)
        def handle_generic_exception(error: Exception):
            return self.handle_unexpected_error(error)

    def handle_scoping_exception(self, error: ScopingException) -> Tuple[Any, int]:
        """Handle exceptions raised by the resolvers and the scoper."""
        with tracer.start_as_current_span("error_handler.scoping_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Scoping exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            errors = error.validation_errors if isinstance(error, ValidationException) else None
            problem = self.build_problem(error.error_type, error.status_code, error.message, errors=errors)

            return jsonify(problem), error.status_code

    def handle_http_exception(self, error: HTTPException) -> Tuple[Any, int]:
        """Handle werkzeug HTTP errors (404 routes, 405 methods, bad JSON)."""
        status = error.code or 500
        error_type = (error.name or "error").lower().replace(' ', '-')

        logger.warning(
            f"HTTP error: {error.name}",
            extra={"status_code": status, "path": request.path, "method": request.method}
        )

        problem = self.build_problem(error_type, status, error.description, title=error.name)
        return jsonify(problem), status

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """Handle exceptions not caught by specific handlers."""
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

            # Don't expose internal error details in production
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            problem = self.build_problem("internal-server-error", 500, detail)
            return jsonify(problem), 500
