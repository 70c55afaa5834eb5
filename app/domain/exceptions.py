"""Centralized exception hierarchy for the plant care service.

All domain and service exceptions inherit from :class:`PlantCareError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    PlantCareError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── NotFoundError            (404: plant or task does not exist)
    ├── ConflictError            (409: state conflict)
    │   └── InvalidStateError    (409: task not in the required status)
    ├── ServiceError             (500: business-logic failure)
    │   └── StorageError         (500: persistence collaborator failure)
    └── ConfigurationError       (500: missing / invalid config)
"""

from __future__ import annotations


class PlantCareError(Exception):
    """Base exception for all plant care application errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(PlantCareError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(PlantCareError):
    """Requested plant or task does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(PlantCareError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


class InvalidStateError(ConflictError):
    """Action attempted on a task that is not in the required status.

    Usually means the client is looking at a stale view (double-click,
    second browser tab). Not retried.
    """

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(PlantCareError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class StorageError(ServiceError):
    """Database / persistence collaborator failure (HTTP 500)."""

    http_status: int = 500


class ConfigurationError(PlantCareError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
