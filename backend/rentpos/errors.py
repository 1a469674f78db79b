# Overview: Error taxonomy shared by services and routes.

"""
POS error hierarchy.

Every service raises a PosError subclass so routes can map failures to
HTTP responses without inspecting messages. Each error carries an optional
details dict (e.g. requested vs. available stock) that is returned to the
client verbatim.
"""

from flask import jsonify


class PosError(Exception):
    """Base class for POS operation errors."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(PosError):
    """Missing or malformed input (e.g. empty return date)."""
    status_code = 400


class AuthenticationError(PosError):
    """Unknown username or password that does not verify."""
    status_code = 401


class AuthorizationError(PosError):
    """Authenticated employee lacks the required position."""
    status_code = 403


class NotFoundError(PosError):
    """Unresolvable product, customer, rental or employee."""
    status_code = 404


class InsufficientStockError(PosError):
    """Requested quantity exceeds available stock."""
    status_code = 409


class PersistenceError(PosError):
    """The underlying store rejected or failed a read/write."""
    status_code = 503


def error_response(exc: PosError):
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return jsonify(body), exc.status_code
