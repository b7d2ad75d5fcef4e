"""
OCPP-J envelope codec.

Wire frames are JSON arrays:

    [2, "<id>", "<action>", {payload}]                      Call
    [3, "<id>", {payload}]                                  CallResult
    [4, "<id>", "<code>", "<description>", {details}]       CallError
"""

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional

from ocppj.errors import ErrorCode, OcppError, as_error_code
from ocppj.payload import to_json


class MessageType(IntEnum):
    CALL = 2
    CALL_RESULT = 3
    CALL_ERROR = 4


@dataclass(frozen=True)
class Dialect:
    """Version specific constants of an OCPP-J protocol revision."""

    version: str
    subprotocol: str
    format_error_code: ErrorCode
    client_name: str
    server_name: str


V16 = Dialect("1.6", "ocpp1.6", ErrorCode.FORMATION_VIOLATION, "charge point", "central system")
V201 = Dialect("2.0.1", "ocpp2.0.1", ErrorCode.FORMAT_VIOLATION, "charging station", "CSMS")


@dataclass
class Call:
    unique_id: str
    action: str
    payload: Any

    message_type = MessageType.CALL

    def to_frame(self):
        return [int(self.message_type), self.unique_id, self.action, to_json(self.payload)]


@dataclass
class CallResult:
    unique_id: str
    payload: Any

    message_type = MessageType.CALL_RESULT

    def to_frame(self):
        return [int(self.message_type), self.unique_id, to_json(self.payload)]


@dataclass
class CallError:
    unique_id: str
    code: Any
    description: str = ""
    details: Optional[dict] = field(default_factory=dict)

    message_type = MessageType.CALL_ERROR

    def to_frame(self):
        return [
            int(self.message_type),
            self.unique_id,
            str(self.code),
            self.description or "",
            self.details if self.details is not None else {},
        ]

    def to_ocpp_error(self):
        return OcppError(self.code, self.description, self.unique_id, self.details)

    @classmethod
    def from_ocpp_error(cls, error, message_id=None):
        return cls(message_id or error.message_id, error.code, error.description, error.details)


def encode(message):
    """
    Serialize a message to its wire text.

    Raises:
        TypeError, ValueError: when the payload holds values JSON cannot express
    """
    return json.dumps(message.to_frame(), separators=(",", ":"), ensure_ascii=False)


def parse_envelope(data, format_code=ErrorCode.FORMAT_VIOLATION):
    """
    Parse a wire frame into Call, CallResult or CallError.

    Payloads are left as decoded JSON objects; typing them requires the
    feature, which the endpoint resolves.

    Args:
        data: frame text or bytes
        format_code: error code used for envelope errors

    Raises:
        OcppError: with format_code, carrying the message id when it could be read
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise OcppError(format_code, f"Invalid message encoding: {e}")
    try:
        arr = json.loads(data)
    except ValueError as e:
        raise OcppError(format_code, f"Invalid JSON: {e}")

    if not isinstance(arr, list) or len(arr) < 3:
        raise OcppError(format_code, "Invalid message. Expected array length >= 3")

    unique_id = arr[1] if isinstance(arr[1], str) else ""
    type_id = arr[0]
    if isinstance(type_id, bool) or not isinstance(type_id, int):
        raise OcppError(
            format_code, f"Invalid element {type_id!r} at 0, expected message type (int)", unique_id
        )
    if not isinstance(arr[1], str):
        raise OcppError(format_code, f"Invalid element {arr[1]!r} at 1, expected unique ID (string)")
    if not unique_id:
        raise OcppError(format_code, "Invalid unique ID, cannot be empty")

    if type_id == MessageType.CALL:
        if len(arr) != 4:
            raise OcppError(format_code, "Invalid Call message. Expected array length 4", unique_id)
        if not isinstance(arr[2], str):
            raise OcppError(
                format_code, f"Invalid element {arr[2]!r} at 2, expected action (string)", unique_id
            )
        if not isinstance(arr[3], dict):
            raise OcppError(
                format_code, f"Invalid element {arr[3]!r} at 3, expected payload (object)", unique_id
            )
        return Call(unique_id, arr[2], arr[3])

    if type_id == MessageType.CALL_RESULT:
        if len(arr) != 3:
            raise OcppError(format_code, "Invalid Call Result message. Expected array length 3", unique_id)
        if not isinstance(arr[2], dict):
            raise OcppError(
                format_code, f"Invalid element {arr[2]!r} at 2, expected payload (object)", unique_id
            )
        return CallResult(unique_id, arr[2])

    if type_id == MessageType.CALL_ERROR:
        if len(arr) != 5:
            raise OcppError(format_code, "Invalid Call Error message. Expected array length 5", unique_id)
        code, description, details = arr[2], arr[3], arr[4]
        if not isinstance(code, str):
            raise OcppError(
                format_code, f"Invalid element {code!r} at 2, expected error code (string)", unique_id
            )
        if not isinstance(description, str):
            raise OcppError(
                format_code, f"Invalid element {description!r} at 3, expected description (string)", unique_id
            )
        if details is None:
            details = {}
        if not isinstance(details, dict):
            raise OcppError(
                format_code, f"Invalid element {details!r} at 4, expected details (object)", unique_id
            )
        return CallError(unique_id, as_error_code(code), description, details)

    raise OcppError(format_code, f"Invalid message type ID {type_id}", unique_id)
