"""
OCPP-J runtime for OCPP 1.6J and 2.0.1 central systems and charging stations.
"""

from ocppj.client import Client
from ocppj.errors import (
    ConnectionLostError,
    DuplicateMessageIdError,
    ErrorCode,
    LocalError,
    NotStartedError,
    OcppError,
    QueueFullError,
    RequestTimeoutError,
    UnsupportedActionError,
)
from ocppj.feature import Feature, Profile, Role
from ocppj.messages import V16, V201, Call, CallError, CallResult, Dialect
from ocppj.server import Server
from ocppj.validation import ValidationError, set_message_validation, validator

__version__ = "0.1.0"
