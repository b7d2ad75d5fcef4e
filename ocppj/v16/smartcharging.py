"""
OCPP 1.6 Smart Charging profile.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.v16.types import ChargingProfile, ChargingProfilePurposeType, ChargingRateUnitType, ChargingSchedule
from ocppj.validation import register_enum, rule

PROFILE_NAME = "smartCharging"


class ChargingProfileStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    NOT_IMPLEMENTED = "NotImplemented"


class ClearChargingProfileStatus(str, Enum):
    ACCEPTED = "Accepted"
    UNKNOWN = "Unknown"


class GetCompositeScheduleStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


register_enum("chargingProfileStatus16", ChargingProfileStatus)
register_enum("clearChargingProfileStatus16", ClearChargingProfileStatus)
register_enum("compositeScheduleStatus16", GetCompositeScheduleStatus)


class SetChargingProfileRequest(Payload):
    connector_id: int = Field(0, ge=0)
    charging_profile: ChargingProfile = Field(alias="csChargingProfiles")


class SetChargingProfileConfirmation(Payload):
    status: Annotated[ChargingProfileStatus, rule("chargingProfileStatus16")]


class ClearChargingProfileRequest(Payload):
    id: Optional[int] = None
    connector_id: Optional[int] = Field(None, ge=0)
    charging_profile_purpose: Optional[
        Annotated[ChargingProfilePurposeType, rule("chargingProfilePurpose16")]
    ] = None
    stack_level: Optional[int] = Field(None, ge=0)


class ClearChargingProfileConfirmation(Payload):
    status: Annotated[ClearChargingProfileStatus, rule("clearChargingProfileStatus16")]


class GetCompositeScheduleRequest(Payload):
    connector_id: int = Field(0, ge=0)
    duration: int = Field(0, ge=0)
    charging_rate_unit: Optional[Annotated[ChargingRateUnitType, rule("chargingRateUnit16")]] = None


class GetCompositeScheduleConfirmation(Payload):
    status: Annotated[GetCompositeScheduleStatus, rule("compositeScheduleStatus16")]
    connector_id: Optional[int] = Field(None, gt=0)
    schedule_start: Optional[DateTime] = None
    charging_schedule: Optional[ChargingSchedule] = None


SetChargingProfile = Feature(
    "SetChargingProfile", SetChargingProfileRequest, SetChargingProfileConfirmation, FROM_CSMS
)
ClearChargingProfile = Feature(
    "ClearChargingProfile", ClearChargingProfileRequest, ClearChargingProfileConfirmation, FROM_CSMS
)
GetCompositeSchedule = Feature(
    "GetCompositeSchedule", GetCompositeScheduleRequest, GetCompositeScheduleConfirmation, FROM_CSMS
)

PROFILE = Profile(PROFILE_NAME, [SetChargingProfile, ClearChargingProfile, GetCompositeSchedule])
