# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Exception taxonomy for recipient resolution and visibility scoping.

Every exception carries the HTTP status and problem type an embedding
application should report, so the error handler middleware can render them
without knowing the individual classes.
"""


class ScopingException(Exception):
    """Base class for scoping core exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(ScopingException):
    """Malformed input: bad target shape or a missing required reference."""

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(ScopingException):
    """No authenticated user was supplied where one is required."""

    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class NotFoundException(ScopingException):
    """A directly referenced directory record does not exist."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class DirectoryUnavailableException(ScopingException):
    """The entity directory could not be reached or answered with garbage."""

    def __init__(self, message: str):
        super().__init__(message, 503, "directory-unavailable")
