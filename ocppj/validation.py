"""
Structural validation of OCPP payloads.

Payload models declare their constraints with pydantic (Field bounds, strict
JSON types) plus named rules from the process-wide registry below, e.g.

    status: Annotated[RegistrationStatus, rule("registrationStatus16")]

Named rules are registered with register_validation or register_enum before the
models using them are defined. Violations reported by pydantic are converted to
a single ValidationError naming the JSON path of the offending field.
"""

from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

import pydantic
from loguru import logger
from pydantic import AfterValidator, BaseModel, BeforeValidator
from pydantic_core import PydanticCustomError, PydanticKnownError

from ocppj import config
from ocppj.errors import ErrorCode, OcppError

_COMPARISONS = {
    "max": "maximum",
    "min": "minimum",
    "gte": ">=",
    "gt": ">",
    "lte": "<=",
    "lt": "<",
}

# pydantic error type -> (rule, context key holding the bound)
_BOUNDS = {
    "string_too_long": ("max", "max_length"),
    "too_long": ("max", "max_length"),
    "string_too_short": ("min", "min_length"),
    "too_short": ("min", "min_length"),
    "greater_than_equal": ("gte", "ge"),
    "greater_than": ("gt", "gt"),
    "less_than_equal": ("lte", "le"),
    "less_than": ("lt", "lt"),
}

_JSON_TYPES = {
    "string_type": "string",
    "int_type": "integer",
    "int_parsing": "integer",
    "int_from_float": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "list_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "datetime_type": "string",
}


def json_type(value):
    """Name of the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


class ValidationError(Exception):
    """A payload field failed one of its constraints."""

    def __init__(self, namespace, rule, param=None, value=None):
        self.namespace = namespace
        self.rule = rule
        self.param = param
        self.value = value
        super().__init__(self.describe())

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError, namespace: str, model=None):
        """
        Convert the first error reported by pydantic.

        Args:
            exc: pydantic.ValidationError raised while validating a payload
            namespace: prefix of the field path, e.g. Call.Payload
            model: payload model that was validated, used to name fields by
                their JSON keys
        """
        error = exc.errors(include_url=False)[0]
        path = _render_loc(namespace, model, error["loc"])
        error_type = error["type"]
        value = error.get("input")
        ctx = error.get("ctx") or {}
        if error_type == "missing" or (value is None and error["loc"]):
            return cls(path, "required")
        if error_type in _JSON_TYPES or error_type.endswith("_type"):
            expected = _JSON_TYPES.get(error_type, error_type[: -len("_type")])
            return cls(path, "type", expected, value)
        if error_type in _BOUNDS:
            rule, key = _BOUNDS[error_type]
            return cls(path, rule, ctx.get(key), value)
        if error_type == "timestamp_format":
            return cls(path, error_type, error["msg"], value)
        return cls(path, error_type, None, value)

    @property
    def field(self):
        return self.namespace.rsplit(".", 1)[-1]

    @property
    def code(self):
        if self.rule == "required":
            return ErrorCode.OCCURRENCE_CONSTRAINT_VIOLATION
        if self.rule == "type":
            return ErrorCode.TYPE_CONSTRAINT_VIOLATION
        return ErrorCode.PROPERTY_CONSTRAINT_VIOLATION

    def describe(self, feature=None):
        if self.rule == "required":
            description = f"Field {self.namespace} required but not found"
        elif self.rule == "type":
            description = (
                f"Field {self.namespace} must be of type {self.param}, "
                f"but was {json_type(self.value)}"
            )
        elif self.rule in _COMPARISONS:
            description = (
                f"Field {self.namespace} must be {_COMPARISONS[self.rule]} {self.param}, "
                f"but was {_measure(self.value)}"
            )
        else:
            description = (
                f"Field {self.namespace} failed {self.rule} validation, "
                f"value was {_plain(self.value)!r}"
            )
        if feature:
            description = f"{description} for feature {feature}"
        return description

    def to_ocpp_error(self, message_id="", feature=None):
        return OcppError(self.code, self.describe(feature), message_id)


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def _measure(value):
    value = _plain(value)
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value)
    return value


def _render_loc(namespace, model, loc):
    path = namespace
    for item in loc:
        if isinstance(item, int):
            path += f"[{item}]"
            continue
        fields = model.model_fields if model is not None else {}
        info = fields.get(item)
        if info is None:
            name = next((name for name, f in fields.items() if f.alias == item), None)
            info = fields.get(name) if name else None
        if info is not None:
            item = info.alias or item
            model = _nested_model(info.annotation)
        else:
            model = None
        path += f".{item}"
    return path


def _nested_model(annotation):
    args = getattr(annotation, "__args__", None)
    if not args:
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return annotation
        return None
    for arg in args:
        found = _nested_model(arg)
        if found is not None:
            return found
    return None


def _is_uri(value):
    parsed = urlparse(str(value))
    if not (parsed.scheme and (parsed.netloc or parsed.path)):
        raise PydanticCustomError("uri", "value is not a URI")
    return value


def _is_unique(value):
    items = [_plain(item) for item in value]
    try:
        unique = len(set(items)) == len(items)
    except TypeError:
        unique = all(items.count(item) == 1 for item in items)
    if not unique:
        raise PydanticCustomError("unique", "items are not unique")
    return value


# Built-in rules usable directly in annotations
uri = AfterValidator(_is_uri)
unique = AfterValidator(_is_unique)


class Validator:
    """Registry of named validations and the switch for outbound revalidation."""

    def __init__(self, enabled=True):
        self.enabled = enabled
        self._validations = {}
        self._enums = {}

    def register_validation(self, name, predicate):
        """
        Register a named predicate usable with rule().

        Args:
            name: rule name, reported in violations
            predicate: callable taking the field value, returning bool
        """
        if name in self._validations:
            logger.debug(f"Replacing validation {name}")
        self._validations[name] = predicate

    def register_enum(self, name, enum_cls):
        """Register a membership check for the values of a str Enum."""
        allowed = frozenset(member.value for member in enum_cls)
        self.register_validation(name, lambda value: _plain(value) in allowed)
        self._enums[name] = enum_cls

    def is_registered(self, name):
        return name in self._validations

    def rule(self, name):
        """
        Build the pydantic validator for a registered rule.

        Enum rules run before pydantic's own enum check so that an unknown
        value is reported against the rule name; other rules run after the
        field type has been validated.

        Raises:
            ValueError: if no rule with this name is registered
        """
        if not self.is_registered(name):
            raise ValueError(f"undefined validation rule {name!r}")

        def check(value):
            if not self._validations[name](value):
                raise PydanticCustomError(name, "failed {rule} validation", {"rule": name})
            return value

        enum_cls = self._enums.get(name)
        if enum_cls is None:
            return AfterValidator(check)

        def check_member(value):
            if value is None:
                return value
            if not isinstance(value, (str, Enum)):
                raise PydanticKnownError("string_type")
            check(value)
            return value if isinstance(value, enum_cls) else enum_cls(_plain(value))

        return BeforeValidator(check_member)

    def validate(self, obj: Any, namespace: Optional[str] = None):
        """
        Revalidate a payload model built or modified in application code.

        Args:
            obj: payload model instance
            namespace: prefix used when naming fields in errors; defaults to
                the class name

        Raises:
            ValidationError: for the first field that fails a constraint
        """
        if not self.enabled or obj is None:
            return
        try:
            type(obj).model_validate(obj)
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e, namespace or type(obj).__name__, type(obj)) from e


validator = Validator(enabled=config.MESSAGE_VALIDATION)


def register_validation(name, predicate):
    validator.register_validation(name, predicate)


def register_enum(name, enum_cls):
    validator.register_enum(name, enum_cls)


def rule(name):
    return validator.rule(name)


def set_message_validation(enabled):
    """Globally enable or disable revalidation of outbound payloads."""
    validator.enabled = enabled
