"""
Payload models and their JSON mapping.

Every OCPP payload is a pydantic model deriving from Payload. Field names are
snake_case in Python and camelCase on the wire; constraints are declared with
Field and the named rules of ocppj.validation:

    class AuthorizeRequest(Payload):
        id_tag: str = Field(max_length=20)
"""

import json
from datetime import datetime
from typing import Annotated, Any

import pydantic
from pydantic import BaseModel, ConfigDict, PlainSerializer, PlainValidator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from ocppj.errors import ErrorCode, OcppError
from ocppj.utils import format_ocpp_timestamp, parse_ocpp_timestamp
from ocppj.validation import ValidationError, json_type


class Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        revalidate_instances="always",
        extra="ignore",
    )


class CustomPayload(Payload):
    """
    A non-standard payload shape exchanged in place of a standard one.

    Register a subclass on an endpoint for an action; inbound payloads are
    decoded into the subclass and converted with parse, outbound payloads are
    converted with serialize before being written.
    """

    def parse(self):
        """Convert this payload into the standard payload it replaces."""
        raise NotImplementedError

    @classmethod
    def serialize(cls, payload):
        """Build the custom payload from a standard payload."""
        raise NotImplementedError


def _parse_timestamp(value):
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise PydanticCustomError("datetime_type", "Input should be a timestamp string")
    try:
        return parse_ocpp_timestamp(value)
    except ValueError as e:
        raise PydanticCustomError("timestamp_format", "{error}", {"error": str(e)})


DateTime = Annotated[
    datetime,
    PlainValidator(_parse_timestamp),
    PlainSerializer(format_ocpp_timestamp),
]


def to_json(obj: Any) -> dict:
    """
    Convert a payload model to a JSON-compatible dict.

    Fields set to None are omitted. Values inside free-form fields are passed
    through untouched, so json.dumps reports the ones JSON cannot express.
    Plain dicts, such as payloads decoded from the wire, are returned as is.
    """
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    return obj.model_dump(mode="python", by_alias=True, exclude_none=True)


def from_json(cls, raw, format_code=ErrorCode.FORMAT_VIOLATION, namespace=None):
    """
    Build a payload model from a decoded JSON object.

    JSON types are checked strictly: a number is never accepted for a string
    field and vice versa. Unknown keys are ignored.

    Args:
        cls: payload model
        raw: decoded JSON value
        format_code: error code used for malformed payloads
        namespace: prefix used when naming fields in errors

    Raises:
        OcppError: the format code for a non-object payload or a malformed
            timestamp
        ValidationError: for a missing field, a JSON type mismatch or a
            violated constraint
    """
    namespace = namespace or cls.__name__
    if not isinstance(raw, dict):
        raise OcppError(
            format_code,
            f"Invalid payload {namespace}, expected JSON object but was {json_type(raw)}",
        )
    try:
        return cls.model_validate_json(json.dumps(raw), strict=True)
    except pydantic.ValidationError as e:
        error = ValidationError.from_pydantic(e, namespace, cls)
        if error.rule == "timestamp_format":
            raise OcppError(format_code, f"Field {error.namespace}: {error.param}") from e
        raise error from e


def build(cls, namespace=None, **values):
    """
    Construct a payload model, reporting constraint violations as ValidationError.

    Nested payloads may be passed as models or as dicts keyed by field name.
    """
    try:
        return cls(**values)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e, namespace or cls.__name__, cls) from e
