"""
OCPP 1.6 Reservation profile.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.validation import register_enum, rule

PROFILE_NAME = "reservation"


class ReservationStatus(str, Enum):
    ACCEPTED = "Accepted"
    FAULTED = "Faulted"
    OCCUPIED = "Occupied"
    REJECTED = "Rejected"
    UNAVAILABLE = "Unavailable"


class CancelReservationStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


register_enum("reservationStatus16", ReservationStatus)
register_enum("cancelReservationStatus16", CancelReservationStatus)


class ReserveNowRequest(Payload):
    connector_id: int = Field(0, ge=0)
    expiry_date: DateTime
    id_tag: str = Field(max_length=20)
    reservation_id: int = 0
    parent_id_tag: Optional[str] = Field(None, max_length=20)


class ReserveNowConfirmation(Payload):
    status: Annotated[ReservationStatus, rule("reservationStatus16")]


class CancelReservationRequest(Payload):
    reservation_id: int = 0


class CancelReservationConfirmation(Payload):
    status: Annotated[CancelReservationStatus, rule("cancelReservationStatus16")]


ReserveNow = Feature("ReserveNow", ReserveNowRequest, ReserveNowConfirmation, FROM_CSMS)
CancelReservation = Feature(
    "CancelReservation", CancelReservationRequest, CancelReservationConfirmation, FROM_CSMS
)

PROFILE = Profile(PROFILE_NAME, [ReserveNow, CancelReservation])
