"""
Types shared by the OCPP 2.0.1 functional blocks.
"""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import Field

from ocppj.payload import Payload
from ocppj.validation import register_enum, rule


class IdTokenType(str, Enum):
    CENTRAL = "Central"
    EMAID = "eMAID"
    ISO14443 = "ISO14443"
    ISO15693 = "ISO15693"
    KEY_CODE = "KeyCode"
    LOCAL = "Local"
    MAC_ADDRESS = "MacAddress"
    NO_AUTHORIZATION = "NoAuthorization"


register_enum("idTokenType", IdTokenType)


class StatusInfo(Payload):
    reason_code: str = Field(max_length=20)
    additional_info: Optional[str] = Field(None, max_length=512)


class AdditionalInfo(Payload):
    additional_id_token: str = Field(max_length=36)
    type: str = Field(max_length=50)


class IdToken(Payload):
    id_token: str = Field("", max_length=36)
    type: Annotated[IdTokenType, rule("idTokenType")]
    additional_info: Optional[List[AdditionalInfo]] = None


class EVSE(Payload):
    id: int = Field(0, ge=0)
    connector_id: Optional[int] = Field(None, ge=0)
