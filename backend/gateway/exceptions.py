"""
Backend Gateway — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions raised by the service layer.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    GatewayError (base)          → 500 Internal Server Error
    └── NotFoundError            → 404 Not Found

Persistence faults are not wrapped: SQLAlchemy exceptions (IntegrityError,
OperationalError, ...) travel up from the repositories untouched and are
mapped to 500 by their own handler.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(GatewayError):
    """
    Raised when a requested resource does not exist.

    What:    The id given by the client matches no row.
    When:    GET/PATCH/DELETE /clients/{id} with an unknown UUID.
    HTTP:    404 Not Found

    Repositories report missing rows as None/False; the service layer turns
    that into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id
