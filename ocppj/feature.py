"""
Feature and Profile registry.

A Feature binds an action name to its request and response payload types and
records which side of the connection may initiate it. A Profile is a named
bundle of features.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet

from ocppj.errors import ErrorCode, OcppError
from ocppj.payload import build, from_json, to_json


class Role(str, Enum):
    CHARGING_STATION = "ChargingStation"
    CSMS = "CSMS"

    @property
    def peer(self):
        return Role.CSMS if self is Role.CHARGING_STATION else Role.CHARGING_STATION


FROM_CHARGING_STATION = frozenset({Role.CHARGING_STATION})
FROM_CSMS = frozenset({Role.CSMS})
FROM_BOTH = frozenset({Role.CHARGING_STATION, Role.CSMS})


def snake_case(name):
    """BootNotification -> boot_notification"""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name).lower()


@dataclass(frozen=True)
class Feature:
    action: str
    request_type: type
    response_type: type
    initiators: FrozenSet[Role]

    @property
    def handler_name(self) -> str:
        return f"on_{snake_case(self.action)}"

    def new_request(self, **kwargs):
        return build(self.request_type, "Call.Payload", **kwargs)

    def new_response(self, **kwargs):
        return build(self.response_type, "CallResult.Payload", **kwargs)

    def decode_request(self, payload, format_code=ErrorCode.FORMAT_VIOLATION, custom_type=None):
        return _decode(self.request_type, payload, format_code, "Call.Payload", custom_type)

    def decode_response(self, payload, format_code=ErrorCode.FORMAT_VIOLATION, custom_type=None):
        return _decode(self.response_type, payload, format_code, "CallResult.Payload", custom_type)

    def encode_request(self, request, custom_type=None):
        return _encode(request, custom_type)

    def encode_response(self, response, custom_type=None):
        return _encode(response, custom_type)


def _decode(payload_type, payload, format_code, namespace, custom_type):
    if custom_type is None:
        return from_json(payload_type, payload, format_code, namespace)
    custom = from_json(custom_type, payload, format_code, namespace)
    try:
        parsed = custom.parse()
    except (TypeError, ValueError) as e:
        raise OcppError(format_code, f"Invalid payload {namespace}: {e}") from e
    if not isinstance(parsed, payload_type):
        raise OcppError(
            format_code,
            f"Invalid payload {namespace}: {custom_type.__name__} parsed into {type(parsed).__name__}",
        )
    return parsed


def _encode(payload, custom_type):
    if custom_type is not None:
        payload = custom_type.serialize(payload)
    return to_json(payload)


class Profile:
    """A named bundle of features."""

    def __init__(self, name, features):
        self.name = name
        self.features = {}
        for feature in features:
            if feature.action in self.features:
                raise ValueError(f"duplicate action {feature.action} in profile {name}")
            self.features[feature.action] = feature

    def get(self, action):
        return self.features.get(action)

    def supports(self, action):
        return action in self.features

    def __iter__(self):
        return iter(self.features.values())

    def __len__(self):
        return len(self.features)

    def __repr__(self):
        return f"Profile({self.name!r}, {sorted(self.features)})"
