"""
OCPP 2.0.1 Data Transfer functional block.
"""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import Field

from ocppj.feature import FROM_BOTH, Feature, Profile
from ocppj.payload import Payload
from ocppj.v201.types import StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "data"


class DataTransferStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    UNKNOWN_MESSAGE_ID = "UnknownMessageId"
    UNKNOWN_VENDOR_ID = "UnknownVendorId"


register_enum("dataTransferStatus201", DataTransferStatus)


class DataTransferRequest(Payload):
    vendor_id: str = Field(max_length=255)
    message_id: Optional[str] = Field(None, max_length=50)
    data: Any = None


class DataTransferResponse(Payload):
    status: Annotated[DataTransferStatus, rule("dataTransferStatus201")]
    data: Any = None
    status_info: Optional[StatusInfo] = None


DataTransfer = Feature("DataTransfer", DataTransferRequest, DataTransferResponse, FROM_BOTH)

PROFILE = Profile(PROFILE_NAME, [DataTransfer])
