"""
OCPP 2.0.1 Provisioning functional block.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CHARGING_STATION, FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.v201.types import StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "provisioning"


class RegistrationStatus(str, Enum):
    ACCEPTED = "Accepted"
    PENDING = "Pending"
    REJECTED = "Rejected"


class BootReason(str, Enum):
    APPLICATION_RESET = "ApplicationReset"
    FIRMWARE_UPDATE = "FirmwareUpdate"
    LOCAL_RESET = "LocalReset"
    POWER_UP = "PowerUp"
    REMOTE_RESET = "RemoteReset"
    SCHEDULED_RESET = "ScheduledReset"
    TRIGGERED = "Triggered"
    UNKNOWN = "Unknown"
    WATCHDOG = "Watchdog"


class ResetType(str, Enum):
    IMMEDIATE = "Immediate"
    ON_IDLE = "OnIdle"


class ResetStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    SCHEDULED = "Scheduled"


register_enum("registrationStatus201", RegistrationStatus)
register_enum("bootReason", BootReason)
register_enum("resetType201", ResetType)
register_enum("resetStatus201", ResetStatus)


class ModemType(Payload):
    iccid: Optional[str] = Field(None, max_length=20)
    imsi: Optional[str] = Field(None, max_length=20)


class ChargingStationType(Payload):
    model: str = Field(max_length=20)
    vendor_name: str = Field(max_length=50)
    serial_number: Optional[str] = Field(None, max_length=25)
    firmware_version: Optional[str] = Field(None, max_length=50)
    modem: Optional[ModemType] = None


class BootNotificationRequest(Payload):
    reason: Annotated[BootReason, rule("bootReason")]
    charging_station: ChargingStationType


class BootNotificationResponse(Payload):
    current_time: DateTime
    interval: int = Field(0, ge=0)
    status: Annotated[RegistrationStatus, rule("registrationStatus201")]
    status_info: Optional[StatusInfo] = None


class ResetRequest(Payload):
    type: Annotated[ResetType, rule("resetType201")]
    evse_id: Optional[int] = Field(None, ge=0)


class ResetResponse(Payload):
    status: Annotated[ResetStatus, rule("resetStatus201")]
    status_info: Optional[StatusInfo] = None


BootNotification = Feature(
    "BootNotification", BootNotificationRequest, BootNotificationResponse, FROM_CHARGING_STATION
)
Reset = Feature("Reset", ResetRequest, ResetResponse, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [BootNotification, Reset])
