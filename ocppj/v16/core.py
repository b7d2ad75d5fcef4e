"""
OCPP 1.6 Core profile.
"""

from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import Field

from ocppj.feature import FROM_BOTH, FROM_CHARGING_STATION, FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.v16.types import (
    AuthorizationStatus,
    ChargingProfile,
    IdTagInfo,
    MeterValue,
    RemoteStartStopStatus,
)
from ocppj.validation import register_enum, rule, unique

PROFILE_NAME = "core"


class RegistrationStatus(str, Enum):
    ACCEPTED = "Accepted"
    PENDING = "Pending"
    REJECTED = "Rejected"


class AvailabilityType(str, Enum):
    OPERATIVE = "Operative"
    INOPERATIVE = "Inoperative"


class AvailabilityStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    SCHEDULED = "Scheduled"


class ConfigurationStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    REBOOT_REQUIRED = "RebootRequired"
    NOT_SUPPORTED = "NotSupported"


class ClearCacheStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class DataTransferStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    UNKNOWN_MESSAGE_ID = "UnknownMessageId"
    UNKNOWN_VENDOR_ID = "UnknownVendorId"


class ResetType(str, Enum):
    HARD = "Hard"
    SOFT = "Soft"


class ResetStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class ChargePointErrorCode(str, Enum):
    CONNECTOR_LOCK_FAILURE = "ConnectorLockFailure"
    EV_COMMUNICATION_ERROR = "EVCommunicationError"
    GROUND_FAILURE = "GroundFailure"
    HIGH_TEMPERATURE = "HighTemperature"
    INTERNAL_ERROR = "InternalError"
    LOCAL_LIST_CONFLICT = "LocalListConflict"
    NO_ERROR = "NoError"
    OTHER_ERROR = "OtherError"
    OVER_CURRENT_FAILURE = "OverCurrentFailure"
    OVER_VOLTAGE = "OverVoltage"
    POWER_METER_FAILURE = "PowerMeterFailure"
    POWER_SWITCH_FAILURE = "PowerSwitchFailure"
    READER_FAILURE = "ReaderFailure"
    RESET_FAILURE = "ResetFailure"
    UNDER_VOLTAGE = "UnderVoltage"
    WEAK_SIGNAL = "WeakSignal"


class ChargePointStatus(str, Enum):
    AVAILABLE = "Available"
    PREPARING = "Preparing"
    CHARGING = "Charging"
    SUSPENDED_EVSE = "SuspendedEVSE"
    SUSPENDED_EV = "SuspendedEV"
    FINISHING = "Finishing"
    RESERVED = "Reserved"
    UNAVAILABLE = "Unavailable"
    FAULTED = "Faulted"


class Reason(str, Enum):
    DE_AUTHORIZED = "DeAuthorized"
    EMERGENCY_STOP = "EmergencyStop"
    EV_DISCONNECTED = "EVDisconnected"
    HARD_RESET = "HardReset"
    LOCAL = "Local"
    OTHER = "Other"
    POWER_LOSS = "PowerLoss"
    REBOOT = "Reboot"
    REMOTE = "Remote"
    SOFT_RESET = "SoftReset"
    UNLOCK_COMMAND = "UnlockCommand"


class UnlockStatus(str, Enum):
    UNLOCKED = "Unlocked"
    UNLOCK_FAILED = "UnlockFailed"
    NOT_SUPPORTED = "NotSupported"


register_enum("registrationStatus16", RegistrationStatus)
register_enum("availabilityType16", AvailabilityType)
register_enum("availabilityStatus16", AvailabilityStatus)
register_enum("configurationStatus16", ConfigurationStatus)
register_enum("cacheStatus16", ClearCacheStatus)
register_enum("dataTransferStatus16", DataTransferStatus)
register_enum("resetType16", ResetType)
register_enum("resetStatus16", ResetStatus)
register_enum("chargePointErrorCode16", ChargePointErrorCode)
register_enum("chargePointStatus16", ChargePointStatus)
register_enum("reason16", Reason)
register_enum("unlockStatus16", UnlockStatus)


class AuthorizeRequest(Payload):
    id_tag: str = Field(max_length=20)


class AuthorizeConfirmation(Payload):
    id_tag_info: IdTagInfo


class BootNotificationRequest(Payload):
    charge_point_model: str = Field(max_length=20)
    charge_point_vendor: str = Field(max_length=20)
    charge_box_serial_number: Optional[str] = Field(None, max_length=25)
    charge_point_serial_number: Optional[str] = Field(None, max_length=25)
    firmware_version: Optional[str] = Field(None, max_length=50)
    iccid: Optional[str] = Field(None, max_length=20)
    imsi: Optional[str] = Field(None, max_length=20)
    meter_serial_number: Optional[str] = Field(None, max_length=25)
    meter_type: Optional[str] = Field(None, max_length=25)


class BootNotificationConfirmation(Payload):
    current_time: DateTime
    interval: int = Field(0, ge=0)
    status: Annotated[RegistrationStatus, rule("registrationStatus16")]


class ChangeAvailabilityRequest(Payload):
    connector_id: int = Field(0, ge=0)
    type: Annotated[AvailabilityType, rule("availabilityType16")]


class ChangeAvailabilityConfirmation(Payload):
    status: Annotated[AvailabilityStatus, rule("availabilityStatus16")]


class ChangeConfigurationRequest(Payload):
    key: str = Field(max_length=50)
    value: str = Field(max_length=500)


class ChangeConfigurationConfirmation(Payload):
    status: Annotated[ConfigurationStatus, rule("configurationStatus16")]


class ClearCacheRequest(Payload):
    pass


class ClearCacheConfirmation(Payload):
    status: Annotated[ClearCacheStatus, rule("cacheStatus16")]


class DataTransferRequest(Payload):
    vendor_id: str = Field(max_length=255)
    message_id: Optional[str] = Field(None, max_length=50)
    data: Any = None


class DataTransferConfirmation(Payload):
    status: Annotated[DataTransferStatus, rule("dataTransferStatus16")]
    data: Any = None


class ConfigurationKey(Payload):
    key: str = Field(max_length=50)
    readonly: bool = False
    value: Optional[str] = Field(None, max_length=500)


class GetConfigurationRequest(Payload):
    key: Optional[Annotated[List[Annotated[str, Field(max_length=50)]], unique]] = None


class GetConfigurationConfirmation(Payload):
    configuration_key: Optional[List[ConfigurationKey]] = None
    unknown_key: Optional[List[Annotated[str, Field(max_length=50)]]] = None


class HeartbeatRequest(Payload):
    pass


class HeartbeatConfirmation(Payload):
    current_time: DateTime


class MeterValuesRequest(Payload):
    connector_id: int = Field(0, ge=0)
    meter_value: List[MeterValue] = Field(min_length=1)
    transaction_id: Optional[int] = None


class MeterValuesConfirmation(Payload):
    pass


class RemoteStartTransactionRequest(Payload):
    id_tag: str = Field(max_length=20)
    connector_id: Optional[int] = Field(None, gt=0)
    charging_profile: Optional[ChargingProfile] = None


class RemoteStartTransactionConfirmation(Payload):
    status: Annotated[RemoteStartStopStatus, rule("remoteStartStopStatus16")]


class RemoteStopTransactionRequest(Payload):
    transaction_id: int = 0


class RemoteStopTransactionConfirmation(Payload):
    status: Annotated[RemoteStartStopStatus, rule("remoteStartStopStatus16")]


class ResetRequest(Payload):
    type: Annotated[ResetType, rule("resetType16")]


class ResetConfirmation(Payload):
    status: Annotated[ResetStatus, rule("resetStatus16")]


class StartTransactionRequest(Payload):
    connector_id: int = Field(0, gt=0)
    id_tag: str = Field(max_length=20)
    meter_start: int = Field(0, ge=0)
    timestamp: DateTime
    reservation_id: Optional[int] = None


class StartTransactionConfirmation(Payload):
    id_tag_info: IdTagInfo
    transaction_id: int = 0


class StatusNotificationRequest(Payload):
    connector_id: int = Field(0, ge=0)
    error_code: Annotated[ChargePointErrorCode, rule("chargePointErrorCode16")]
    status: Annotated[ChargePointStatus, rule("chargePointStatus16")]
    info: Optional[str] = Field(None, max_length=50)
    timestamp: Optional[DateTime] = None
    vendor_id: Optional[str] = Field(None, max_length=255)
    vendor_error_code: Optional[str] = Field(None, max_length=50)


class StatusNotificationConfirmation(Payload):
    pass


class StopTransactionRequest(Payload):
    meter_stop: int = 0
    timestamp: DateTime
    transaction_id: int = 0
    id_tag: Optional[str] = Field(None, max_length=20)
    reason: Optional[Annotated[Reason, rule("reason16")]] = None
    transaction_data: Optional[List[MeterValue]] = None


class StopTransactionConfirmation(Payload):
    id_tag_info: Optional[IdTagInfo] = None


class UnlockConnectorRequest(Payload):
    connector_id: int = Field(0, gt=0)


class UnlockConnectorConfirmation(Payload):
    status: Annotated[UnlockStatus, rule("unlockStatus16")]


Authorize = Feature("Authorize", AuthorizeRequest, AuthorizeConfirmation, FROM_CHARGING_STATION)
BootNotification = Feature(
    "BootNotification", BootNotificationRequest, BootNotificationConfirmation, FROM_CHARGING_STATION
)
ChangeAvailability = Feature(
    "ChangeAvailability", ChangeAvailabilityRequest, ChangeAvailabilityConfirmation, FROM_CSMS
)
ChangeConfiguration = Feature(
    "ChangeConfiguration", ChangeConfigurationRequest, ChangeConfigurationConfirmation, FROM_CSMS
)
ClearCache = Feature("ClearCache", ClearCacheRequest, ClearCacheConfirmation, FROM_CSMS)
DataTransfer = Feature("DataTransfer", DataTransferRequest, DataTransferConfirmation, FROM_BOTH)
GetConfiguration = Feature(
    "GetConfiguration", GetConfigurationRequest, GetConfigurationConfirmation, FROM_CSMS
)
Heartbeat = Feature("Heartbeat", HeartbeatRequest, HeartbeatConfirmation, FROM_CHARGING_STATION)
MeterValues = Feature("MeterValues", MeterValuesRequest, MeterValuesConfirmation, FROM_CHARGING_STATION)
RemoteStartTransaction = Feature(
    "RemoteStartTransaction", RemoteStartTransactionRequest, RemoteStartTransactionConfirmation, FROM_CSMS
)
RemoteStopTransaction = Feature(
    "RemoteStopTransaction", RemoteStopTransactionRequest, RemoteStopTransactionConfirmation, FROM_CSMS
)
Reset = Feature("Reset", ResetRequest, ResetConfirmation, FROM_CSMS)
StartTransaction = Feature(
    "StartTransaction", StartTransactionRequest, StartTransactionConfirmation, FROM_CHARGING_STATION
)
StatusNotification = Feature(
    "StatusNotification", StatusNotificationRequest, StatusNotificationConfirmation, FROM_CHARGING_STATION
)
StopTransaction = Feature(
    "StopTransaction", StopTransactionRequest, StopTransactionConfirmation, FROM_CHARGING_STATION
)
UnlockConnector = Feature("UnlockConnector", UnlockConnectorRequest, UnlockConnectorConfirmation, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [
    Authorize,
    BootNotification,
    ChangeAvailability,
    ChangeConfiguration,
    ClearCache,
    DataTransfer,
    GetConfiguration,
    Heartbeat,
    MeterValues,
    RemoteStartTransaction,
    RemoteStopTransaction,
    Reset,
    StartTransaction,
    StatusNotification,
    StopTransaction,
    UnlockConnector,
])
