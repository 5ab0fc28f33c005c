"""Errors surfaced by the feedback core.

Each error carries the HTTP status the API layer maps it to, so services stay
free of FastAPI imports.
"""
from __future__ import annotations


class CoachError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.code)
        self.detail = detail or self.code


class InvalidInput(CoachError):
    code = "invalid_input"
    status_code = 422


class NotFound(CoachError):
    """Missing or not owned by the caller. The two cases are never told apart."""

    code = "not_found"
    status_code = 404


class UpstreamError(CoachError):
    code = "upstream_error"
    status_code = 502


class Timeout(UpstreamError):
    code = "timeout"
    status_code = 504


class Conflict(CoachError):
    code = "conflict"
    status_code = 409
