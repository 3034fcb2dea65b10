"""
core/errors.py -- Base error type shared by every layer.

A ServiceError carries a stable machine-readable `code`, a client-safe
`message`, and the HTTP status the API boundary maps it to. api/main.py
renders all of them through the same ErrorResponse envelope.
"""

from __future__ import annotations


class ServiceError(Exception):
    code = "service_error"
    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class StoreUnavailable(ServiceError):
    """A store could not be reached or failed mid-query.

    Raised by the stores in place of raw driver errors so callers see one
    condition regardless of the database backend.
    """

    code = "store_unavailable"
    status_code = 503
    message = "The service is temporarily unavailable."
