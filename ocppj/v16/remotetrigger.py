"""
OCPP 1.6 Remote Trigger profile.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import Field

from ocppj.feature import FROM_CSMS, Feature, Profile
from ocppj.payload import Payload
from ocppj.validation import register_enum, rule

PROFILE_NAME = "remoteTrigger"


class MessageTrigger(str, Enum):
    BOOT_NOTIFICATION = "BootNotification"
    DIAGNOSTICS_STATUS_NOTIFICATION = "DiagnosticsStatusNotification"
    FIRMWARE_STATUS_NOTIFICATION = "FirmwareStatusNotification"
    HEARTBEAT = "Heartbeat"
    METER_VALUES = "MeterValues"
    STATUS_NOTIFICATION = "StatusNotification"


class TriggerMessageStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    NOT_IMPLEMENTED = "NotImplemented"


register_enum("messageTrigger16", MessageTrigger)
register_enum("triggerMessageStatus16", TriggerMessageStatus)


class TriggerMessageRequest(Payload):
    requested_message: Annotated[MessageTrigger, rule("messageTrigger16")]
    connector_id: Optional[int] = Field(None, gt=0)


class TriggerMessageConfirmation(Payload):
    status: Annotated[TriggerMessageStatus, rule("triggerMessageStatus16")]


TriggerMessage = Feature("TriggerMessage", TriggerMessageRequest, TriggerMessageConfirmation, FROM_CSMS)

PROFILE = Profile(PROFILE_NAME, [TriggerMessage])
