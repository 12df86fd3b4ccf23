"""
Typed failures surfaced to API callers.

Each error carries a stable machine code (mirrors callable-function codes such
as ``not-found`` or ``failed-precondition``) and the HTTP status it maps to.
Handlers in ``app.main`` render them as ``{"error": {"code", "message"}}``.
"""
from __future__ import annotations


class AppError(Exception):
    code = "internal"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class InvalidArgument(AppError):
    code = "invalid-argument"
    status_code = 400


class Unauthenticated(AppError):
    code = "unauthenticated"
    status_code = 401


class PermissionDenied(AppError):
    code = "permission-denied"
    status_code = 403


class NotFound(AppError):
    code = "not-found"
    status_code = 404


class FailedPrecondition(AppError):
    code = "failed-precondition"
    status_code = 409


class Internal(AppError):
    code = "internal"
    status_code = 500


class InvalidRecord(InvalidArgument):
    """A stored record did not match its schema when read."""
