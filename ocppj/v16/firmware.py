"""
OCPP 1.6 Firmware Management profile.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CHARGING_STATION, FROM_CSMS, Feature, Profile
from ocppj.payload import DateTime, Payload
from ocppj.validation import register_enum, rule, uri

PROFILE_NAME = "firmware"


class DiagnosticsStatus(str, Enum):
    IDLE = "Idle"
    UPLOADED = "Uploaded"
    UPLOAD_FAILED = "UploadFailed"
    UPLOADING = "Uploading"


class FirmwareStatus(str, Enum):
    DOWNLOADED = "Downloaded"
    DOWNLOAD_FAILED = "DownloadFailed"
    DOWNLOADING = "Downloading"
    IDLE = "Idle"
    INSTALLATION_FAILED = "InstallationFailed"
    INSTALLING = "Installing"
    INSTALLED = "Installed"


register_enum("diagnosticsStatus16", DiagnosticsStatus)
register_enum("firmwareStatus16", FirmwareStatus)


class GetDiagnosticsRequest(Payload):
    location: Annotated[str, uri]
    retries: Optional[int] = Field(None, ge=0)
    retry_interval: Optional[int] = Field(None, ge=0)
    start_time: Optional[DateTime] = None
    stop_time: Optional[DateTime] = None


class GetDiagnosticsConfirmation(Payload):
    file_name: Optional[str] = Field(None, max_length=255)


class UpdateFirmwareRequest(Payload):
    location: Annotated[str, uri]
    retrieve_date: DateTime
    retries: Optional[int] = Field(None, ge=0)
    retry_interval: Optional[int] = Field(None, ge=0)


class UpdateFirmwareConfirmation(Payload):
    pass


class DiagnosticsStatusNotificationRequest(Payload):
    status: Annotated[DiagnosticsStatus, rule("diagnosticsStatus16")]


class DiagnosticsStatusNotificationConfirmation(Payload):
    pass


class FirmwareStatusNotificationRequest(Payload):
    status: Annotated[FirmwareStatus, rule("firmwareStatus16")]


class FirmwareStatusNotificationConfirmation(Payload):
    pass


GetDiagnostics = Feature("GetDiagnostics", GetDiagnosticsRequest, GetDiagnosticsConfirmation, FROM_CSMS)
UpdateFirmware = Feature("UpdateFirmware", UpdateFirmwareRequest, UpdateFirmwareConfirmation, FROM_CSMS)
DiagnosticsStatusNotification = Feature(
    "DiagnosticsStatusNotification",
    DiagnosticsStatusNotificationRequest,
    DiagnosticsStatusNotificationConfirmation,
    FROM_CHARGING_STATION,
)
FirmwareStatusNotification = Feature(
    "FirmwareStatusNotification",
    FirmwareStatusNotificationRequest,
    FirmwareStatusNotificationConfirmation,
    FROM_CHARGING_STATION,
)

PROFILE = Profile(PROFILE_NAME, [
    GetDiagnostics,
    UpdateFirmware,
    DiagnosticsStatusNotification,
    FirmwareStatusNotification,
])
