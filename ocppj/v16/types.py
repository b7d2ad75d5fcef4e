"""
Types shared by the OCPP 1.6 profiles.
"""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import Field

from ocppj.payload import DateTime, Payload
from ocppj.validation import register_enum, rule


class AuthorizationStatus(str, Enum):
    ACCEPTED = "Accepted"
    BLOCKED = "Blocked"
    EXPIRED = "Expired"
    INVALID = "Invalid"
    CONCURRENT_TX = "ConcurrentTx"


class RemoteStartStopStatus(str, Enum):
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class ChargingProfilePurposeType(str, Enum):
    CHARGE_POINT_MAX_PROFILE = "ChargePointMaxProfile"
    TX_DEFAULT_PROFILE = "TxDefaultProfile"
    TX_PROFILE = "TxProfile"


class ChargingProfileKindType(str, Enum):
    ABSOLUTE = "Absolute"
    RECURRING = "Recurring"
    RELATIVE = "Relative"


class RecurrencyKindType(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"


class ChargingRateUnitType(str, Enum):
    WATTS = "W"
    AMPERES = "A"


class ReadingContext(str, Enum):
    INTERRUPTION_BEGIN = "Interruption.Begin"
    INTERRUPTION_END = "Interruption.End"
    OTHER = "Other"
    SAMPLE_CLOCK = "Sample.Clock"
    SAMPLE_PERIODIC = "Sample.Periodic"
    TRANSACTION_BEGIN = "Transaction.Begin"
    TRANSACTION_END = "Transaction.End"
    TRIGGER = "Trigger"


class ValueFormat(str, Enum):
    RAW = "Raw"
    SIGNED_DATA = "SignedData"


class Measurand(str, Enum):
    CURRENT_EXPORT = "Current.Export"
    CURRENT_IMPORT = "Current.Import"
    CURRENT_OFFERED = "Current.Offered"
    ENERGY_ACTIVE_EXPORT_REGISTER = "Energy.Active.Export.Register"
    ENERGY_ACTIVE_IMPORT_REGISTER = "Energy.Active.Import.Register"
    ENERGY_REACTIVE_EXPORT_REGISTER = "Energy.Reactive.Export.Register"
    ENERGY_REACTIVE_IMPORT_REGISTER = "Energy.Reactive.Import.Register"
    ENERGY_ACTIVE_EXPORT_INTERVAL = "Energy.Active.Export.Interval"
    ENERGY_ACTIVE_IMPORT_INTERVAL = "Energy.Active.Import.Interval"
    ENERGY_REACTIVE_EXPORT_INTERVAL = "Energy.Reactive.Export.Interval"
    ENERGY_REACTIVE_IMPORT_INTERVAL = "Energy.Reactive.Import.Interval"
    FREQUENCY = "Frequency"
    POWER_ACTIVE_EXPORT = "Power.Active.Export"
    POWER_ACTIVE_IMPORT = "Power.Active.Import"
    POWER_FACTOR = "Power.Factor"
    POWER_OFFERED = "Power.Offered"
    POWER_REACTIVE_EXPORT = "Power.Reactive.Export"
    POWER_REACTIVE_IMPORT = "Power.Reactive.Import"
    RPM = "RPM"
    SOC = "SoC"
    TEMPERATURE = "Temperature"
    VOLTAGE = "Voltage"


class Phase(str, Enum):
    L1 = "L1"
    L2 = "L2"
    L3 = "L3"
    N = "N"
    L1_N = "L1-N"
    L2_N = "L2-N"
    L3_N = "L3-N"
    L1_L2 = "L1-L2"
    L2_L3 = "L2-L3"
    L3_L1 = "L3-L1"


class Location(str, Enum):
    BODY = "Body"
    CABLE = "Cable"
    EV = "EV"
    INLET = "Inlet"
    OUTLET = "Outlet"


class UnitOfMeasure(str, Enum):
    WH = "Wh"
    KWH = "kWh"
    VARH = "varh"
    KVARH = "kvarh"
    W = "W"
    KW = "kW"
    VA = "VA"
    KVA = "kVA"
    VAR = "var"
    KVAR = "kvar"
    A = "A"
    V = "V"
    CELSIUS = "Celsius"
    CELCIUS = "Celcius"
    FAHRENHEIT = "Fahrenheit"
    K = "K"
    PERCENT = "Percent"


register_enum("authorizationStatus16", AuthorizationStatus)
register_enum("remoteStartStopStatus16", RemoteStartStopStatus)
register_enum("chargingProfilePurpose16", ChargingProfilePurposeType)
register_enum("chargingProfileKind16", ChargingProfileKindType)
register_enum("recurrencyKind16", RecurrencyKindType)
register_enum("chargingRateUnit16", ChargingRateUnitType)
register_enum("readingContext16", ReadingContext)
register_enum("valueFormat16", ValueFormat)
register_enum("measurand16", Measurand)
register_enum("phase16", Phase)
register_enum("location16", Location)
register_enum("unitOfMeasure16", UnitOfMeasure)


class IdTagInfo(Payload):
    status: Annotated[AuthorizationStatus, rule("authorizationStatus16")]
    expiry_date: Optional[DateTime] = None
    parent_id_tag: Optional[str] = Field(None, max_length=20)


class ChargingSchedulePeriod(Payload):
    start_period: int = Field(0, ge=0)
    limit: float = Field(0.0, ge=0)
    number_phases: Optional[int] = Field(None, ge=0)


class ChargingSchedule(Payload):
    charging_rate_unit: Annotated[ChargingRateUnitType, rule("chargingRateUnit16")]
    charging_schedule_period: List[ChargingSchedulePeriod] = Field(min_length=1)
    duration: Optional[int] = Field(None, ge=0)
    start_schedule: Optional[DateTime] = None
    min_charging_rate: Optional[float] = Field(None, ge=0)


class ChargingProfile(Payload):
    charging_profile_id: int = 0
    stack_level: int = Field(0, ge=0)
    charging_profile_purpose: Annotated[ChargingProfilePurposeType, rule("chargingProfilePurpose16")]
    charging_profile_kind: Annotated[ChargingProfileKindType, rule("chargingProfileKind16")]
    charging_schedule: ChargingSchedule
    transaction_id: Optional[int] = None
    recurrency_kind: Optional[Annotated[RecurrencyKindType, rule("recurrencyKind16")]] = None
    valid_from: Optional[DateTime] = None
    valid_to: Optional[DateTime] = None


class SampledValue(Payload):
    value: str
    context: Optional[Annotated[ReadingContext, rule("readingContext16")]] = None
    format: Optional[Annotated[ValueFormat, rule("valueFormat16")]] = None
    measurand: Optional[Annotated[Measurand, rule("measurand16")]] = None
    phase: Optional[Annotated[Phase, rule("phase16")]] = None
    location: Optional[Annotated[Location, rule("location16")]] = None
    unit: Optional[Annotated[UnitOfMeasure, rule("unitOfMeasure16")]] = None


class MeterValue(Payload):
    timestamp: DateTime
    sampled_value: List[SampledValue] = Field(min_length=1)
