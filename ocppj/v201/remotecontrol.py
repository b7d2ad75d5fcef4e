"""
OCPP 2.0.1 Remote Control functional block.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import Payload
from ocppj.v201.types import IdToken, StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "remoteControl"


class RequestStartStopStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class UnlockStatus(str, Enum):
    UNLOCKED = "Unlocked"
    UNLOCK_FAILED = "UnlockFailed"
    ONGOING_AUTHORIZED_TRANSACTION = "OngoingAuthorizedTransaction"
    UNKNOWN_CONNECTOR = "UnknownConnector"


register_enum("requestStartStopStatus", RequestStartStopStatus)
register_enum("unlockStatus201", UnlockStatus)


class RequestStartTransactionRequest(Payload):
    remote_start_id: int = Field(0, ge=0)
    id_token: IdToken
    evse_id: Optional[int] = Field(None, gt=0)
    group_id_token: Optional[IdToken] = None


class RequestStartTransactionResponse(Payload):
    status: Annotated[RequestStartStopStatus, rule("requestStartStopStatus")]
    transaction_id: Optional[str] = Field(None, max_length=36)
    status_info: Optional[StatusInfo] = None


class RequestStopTransactionRequest(Payload):
    transaction_id: str = Field(max_length=36)


class RequestStopTransactionResponse(Payload):
    status: Annotated[RequestStartStopStatus, rule("requestStartStopStatus")]
    status_info: Optional[StatusInfo] = None


class UnlockConnectorRequest(Payload):
    evse_id: int = Field(0, ge=0)
    connector_id: int = Field(0, ge=0)


class UnlockConnectorResponse(Payload):
    status: Annotated[UnlockStatus, rule("unlockStatus201")]
    status_info: Optional[StatusInfo] = None


RequestStartTransaction = Feature(
    "RequestStartTransaction", RequestStartTransactionRequest, RequestStartTransactionResponse, FROM_CSMS
)
RequestStopTransaction = Feature(
    "RequestStopTransaction", RequestStopTransactionRequest, RequestStopTransactionResponse, FROM_CSMS
)
UnlockConnector = Feature("UnlockConnector", UnlockConnectorRequest, UnlockConnectorResponse, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [RequestStartTransaction, RequestStopTransaction, UnlockConnector])
