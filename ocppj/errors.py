"""
Error types for the OCPP-J runtime.

OcppError is the value carried by a CallError on the wire. LocalError and its
subclasses never leave the process: they describe why an outbound request
could not be completed.
"""

from enum import Enum


class ErrorCode(str, Enum):
    NOT_IMPLEMENTED = "NotImplemented"
    NOT_SUPPORTED = "NotSupported"
    INTERNAL_ERROR = "InternalError"
    PROTOCOL_ERROR = "ProtocolError"
    SECURITY_ERROR = "SecurityError"
    FORMATION_VIOLATION = "FormationViolation"
    FORMAT_VIOLATION = "FormatViolation"
    PROPERTY_CONSTRAINT_VIOLATION = "PropertyConstraintViolation"
    OCCURRENCE_CONSTRAINT_VIOLATION = "OccurrenceConstraintViolation"
    TYPE_CONSTRAINT_VIOLATION = "TypeConstraintViolation"
    GENERIC_ERROR = "GenericError"

    def __str__(self):
        return self.value


def as_error_code(code):
    """Map a raw code onto ErrorCode, keeping unknown codes as plain strings."""
    try:
        return ErrorCode(code)
    except ValueError:
        return code


class OcppError(Exception):
    """A protocol error, as sent or received in a CallError."""

    def __init__(self, code, description="", message_id="", details=None):
        super().__init__(description)
        self.code = as_error_code(code)
        self.description = description
        self.message_id = message_id
        self.details = details if details is not None else {}

    def __str__(self):
        return f"ocpp message ({self.message_id}): {self.code} - {self.description}"

    def __repr__(self):
        return (
            f"OcppError(code={str(self.code)!r}, description={self.description!r}, "
            f"message_id={self.message_id!r})"
        )


class LocalError(Exception):
    """Base class for caller-side failures of an outbound request."""


class UnsupportedActionError(LocalError):
    """The endpoint is not allowed to initiate this action."""


class QueueFullError(LocalError):
    """The per-peer request queue is at capacity."""


class RequestTimeoutError(LocalError):
    """No response arrived before the response deadline."""


class ConnectionLostError(LocalError):
    """The connection to the peer dropped before a response arrived."""


class NotStartedError(LocalError):
    """The endpoint has not been started."""


class DuplicateMessageIdError(LocalError):
    """A request with the same message id is still outstanding."""
