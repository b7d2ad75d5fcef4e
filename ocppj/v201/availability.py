"""
OCPP 2.0.1 Availability functional block.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CHARGING_STATION, FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.v201.types import EVSE, StatusInfo
from ocppj.validation import register_enum, rule

PROFILE_NAME = "availability"


class OperationalStatus(str, Enum):
    INOPERATIVE = "Inoperative"
    OPERATIVE = "Operative"


class ChangeAvailabilityStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    SCHEDULED = "Scheduled"


class ConnectorStatus(str, Enum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    RESERVED = "Reserved"
    UNAVAILABLE = "Unavailable"
    FAULTED = "Faulted"


register_enum("operationalStatus", OperationalStatus)
register_enum("changeAvailabilityStatus", ChangeAvailabilityStatus)
register_enum("connectorStatus", ConnectorStatus)


class ChangeAvailabilityRequest(Payload):
    operational_status: Annotated[OperationalStatus, rule("operationalStatus")]
    evse: Optional[EVSE] = None


class ChangeAvailabilityResponse(Payload):
    status: Annotated[ChangeAvailabilityStatus, rule("changeAvailabilityStatus")]
    status_info: Optional[StatusInfo] = None


class HeartbeatRequest(Payload):
    pass


class HeartbeatResponse(Payload):
    current_time: DateTime


class StatusNotificationRequest(Payload):
    timestamp: DateTime
    connector_status: Annotated[ConnectorStatus, rule("connectorStatus")]
    evse_id: int = Field(0, ge=0)
    connector_id: int = Field(0, ge=0)


class StatusNotificationResponse(Payload):
    pass


ChangeAvailability = Feature(
    "ChangeAvailability", ChangeAvailabilityRequest, ChangeAvailabilityResponse, FROM_CSMS
)
Heartbeat = Feature("Heartbeat", HeartbeatRequest, HeartbeatResponse, FROM_CHARGING_STATION)
StatusNotification = Feature(
    "StatusNotification", StatusNotificationRequest, StatusNotificationResponse, FROM_CHARGING_STATION
)

PROFILE = Profile(PROFILE_NAME, [ChangeAvailability, Heartbeat, StatusNotification])
