"""Typed access and validation failures surfaced to transport collaborators."""

from typing import Any


class AccessError(Exception):
    """
    Base error with a stable type code and structured details.

    Attributes:
        message: Human-readable message
        code: Machine-readable error type
        details: Additional structured information
    """

    code = "ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Structured form handed to the transport layer."""
        body = {"message": self.message, "type": self.code}
        if self.details:
            body["details"] = self.details
        return body


class Unauthorized(AccessError):
    """No actor, or the actor cannot see this kind of entity at all."""

    code = "NOT_AUTHORIZED"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class Forbidden(AccessError):
    """The actor can see the row but may not perform this operation on it."""

    code = "FORBIDDEN"

    def __init__(self, message: str = "You don't have permissions to do this"):
        super().__init__(message)


class NotFound(AccessError):
    """No row matched after scoping; out-of-scope rows look identical."""

    code = "NOT_FOUND"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ValidationFailed(AccessError):
    code = "VALIDATION_FAILED"

    def __init__(self, message: str = "Validation failed", details: dict[str, Any] | None = None):
        super().__init__(message, details=details)
