"""
OCPP 2.0.1 Reservation functional block.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.v201.types import IdToken, StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "reservation"


class ReserveNowStatus(str, Enum):
    ACCEPTED = "Accepted"
    FAULTED = "Faulted"
    OCCUPIED = "Occupied"
    REJECTED = "Rejected"
    UNAVAILABLE = "Unavailable"


class CancelReservationStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class ConnectorType(str, Enum):
    CCS1 = "cCCS1"
    CCS2 = "cCCS2"
    G105 = "cG105"
    TESLA = "cTesla"
    C_TYPE1 = "cType1"
    C_TYPE2 = "cType2"
    S309_1P_16A = "s309-1P-16A"
    S309_1P_32A = "s309-1P-32A"
    S309_3P_16A = "s309-3P-16A"
    S309_3P_32A = "s309-3P-32A"
    BS1361 = "sBS1361"
    CEE_7_7 = "sCEE-7-7"
    S_TYPE2 = "sType2"
    S_TYPE3 = "sType3"
    OTHER_1PH_MAX_16A = "Other1PhMax16A"
    OTHER_1PH_OVER_16A = "Other1PhOver16A"
    OTHER_3PH = "Other3Ph"
    PAN = "Pan"
    WIRELESS_INDUCTIVE = "wInductive"
    WIRELESS_RESONANT = "wResonant"
    UNDETERMINED = "Undetermined"
    UNKNOWN = "Unknown"


register_enum("reserveNowStatus", ReserveNowStatus)
register_enum("cancelReservationStatus201", CancelReservationStatus)
register_enum("connectorType", ConnectorType)


class ReserveNowRequest(Payload):
    id: int = Field(0, ge=0)
    expiry_date_time: DateTime
    id_token: IdToken
    connector_type: Optional[Annotated[ConnectorType, rule("connectorType")]] = None
    evse_id: Optional[int] = Field(None, ge=0)
    group_id_token: Optional[IdToken] = None


class ReserveNowResponse(Payload):
    status: Annotated[ReserveNowStatus, rule("reserveNowStatus")]
    status_info: Optional[StatusInfo] = None


class CancelReservationRequest(Payload):
    reservation_id: int = Field(0, ge=0)


class CancelReservationResponse(Payload):
    status: Annotated[CancelReservationStatus, rule("cancelReservationStatus201")]
    status_info: Optional[StatusInfo] = None


ReserveNow = Feature("ReserveNow", ReserveNowRequest, ReserveNowResponse, FROM_CSMS)
CancelReservation = Feature(
    "CancelReservation", CancelReservationRequest, CancelReservationResponse, FROM_CSMS
)

PROFILE = Profile(PROFILE_NAME, [ReserveNow, CancelReservation])
