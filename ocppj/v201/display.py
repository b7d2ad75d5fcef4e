"""
OCPP 2.0.1 Display functional block.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import Payload
from ocppj.v201.types import StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "display"


class ClearMessageStatus(str, Enum):
    ACCEPTED = "Accepted"
    UNKNOWN = "Unknown"


register_enum("clearMessageStatus", ClearMessageStatus)


class ClearDisplayRequest(Payload):
    id: int = Field(ge=0)


class ClearDisplayResponse(Payload):
    status: Annotated[ClearMessageStatus, rule("clearMessageStatus")]
    status_info: Optional[StatusInfo] = None


ClearDisplay = Feature("ClearDisplay", ClearDisplayRequest, ClearDisplayResponse, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [ClearDisplay])
