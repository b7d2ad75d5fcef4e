"""
OCPP 1.6 Local Auth List Management profile.
"""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import Payload
from ocppj.v16.types import IdTagInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "localAuthList"


class UpdateType(str, Enum):
    DIFFERENTIAL = "Differential"
    FULL = "Full"


class UpdateStatus(str, Enum):
    ACCEPTED = "Accepted"
    FAILED = "Failed"
    NOT_SUPPORTED = "NotSupported"
    VERSION_MISMATCH = "VersionMismatch"


register_enum("updateType16", UpdateType)
register_enum("updateStatus16", UpdateStatus)


class AuthorizationData(Payload):
    id_tag: str = Field(max_length=20)
    id_tag_info: Optional[IdTagInfo] = None


class GetLocalListVersionRequest(Payload):
    pass


class GetLocalListVersionConfirmation(Payload):
    list_version: int = Field(0, ge=-1)


class SendLocalListRequest(Payload):
    list_version: int = Field(0, ge=0)
    update_type: Annotated[UpdateType, rule("updateType16")]
    local_authorization_list: Optional[List[AuthorizationData]] = None


class SendLocalListConfirmation(Payload):
    status: Annotated[UpdateStatus, rule("updateStatus16")]


GetLocalListVersion = Feature(
    "GetLocalListVersion", GetLocalListVersionRequest, GetLocalListVersionConfirmation, FROM_CSMS
)
SendLocalList = Feature("SendLocalList", SendLocalListRequest, SendLocalListConfirmation, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [GetLocalListVersion, SendLocalList])
