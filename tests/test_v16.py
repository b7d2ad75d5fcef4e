"""
Test the OCPP 1.6 profile catalog: payload mapping, enum validations and
feature directions.
"""

import json
from datetime import datetime, timezone
from typing import Annotated

import pytest
from pydantic import create_model

from ocppj.errors import ErrorCode, OcppError
from ocppj.feature import FROM_BOTH, FROM_CHARGING_STATION, FROM_CSMS
from ocppj.payload import Payload, from_json, to_json
from ocppj.validation import ValidationError, rule, validator
from ocppj.v16 import (
    ALL_PROFILES,
    CentralSystem,
    ChargePoint,
    core,
    firmware,
    localauth,
    remotetrigger,
    reservation,
    smartcharging,
    types,
)

from mock_transport import MockClientTransport, MockServerTransport, settle
from samples import sample_payload

NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

ENUM_VALIDATIONS = [
    ("registrationStatus16", core.RegistrationStatus),
    ("availabilityType16", core.AvailabilityType),
    ("availabilityStatus16", core.AvailabilityStatus),
    ("configurationStatus16", core.ConfigurationStatus),
    ("cacheStatus16", core.ClearCacheStatus),
    ("dataTransferStatus16", core.DataTransferStatus),
    ("resetType16", core.ResetType),
    ("resetStatus16", core.ResetStatus),
    ("chargePointErrorCode16", core.ChargePointErrorCode),
    ("chargePointStatus16", core.ChargePointStatus),
    ("reason16", core.Reason),
    ("unlockStatus16", core.UnlockStatus),
    ("authorizationStatus16", types.AuthorizationStatus),
    ("remoteStartStopStatus16", types.RemoteStartStopStatus),
    ("chargingProfilePurpose16", types.ChargingProfilePurposeType),
    ("chargingProfileKind16", types.ChargingProfileKindType),
    ("recurrencyKind16", types.RecurrencyKindType),
    ("chargingRateUnit16", types.ChargingRateUnitType),
    ("readingContext16", types.ReadingContext),
    ("valueFormat16", types.ValueFormat),
    ("measurand16", types.Measurand),
    ("phase16", types.Phase),
    ("location16", types.Location),
    ("unitOfMeasure16", types.UnitOfMeasure),
    ("chargingProfileStatus16", smartcharging.ChargingProfileStatus),
    ("clearChargingProfileStatus16", smartcharging.ClearChargingProfileStatus),
    ("compositeScheduleStatus16", smartcharging.GetCompositeScheduleStatus),
    ("reservationStatus16", reservation.ReservationStatus),
    ("cancelReservationStatus16", reservation.CancelReservationStatus),
    ("messageTrigger16", remotetrigger.MessageTrigger),
    ("triggerMessageStatus16", remotetrigger.TriggerMessageStatus),
    ("diagnosticsStatus16", firmware.DiagnosticsStatus),
    ("firmwareStatus16", firmware.FirmwareStatus),
    ("updateType16", localauth.UpdateType),
    ("updateStatus16", localauth.UpdateStatus),
]


def _holder(rule_name, enum_cls):
    return create_model("Holder", __base__=Payload, value=(Annotated[enum_cls, rule(rule_name)], ...))


@pytest.mark.parametrize("rule_name,enum_cls", ENUM_VALIDATIONS)
def test_enum_validation_is_total(rule_name, enum_cls):
    """Test that every constant passes its validation and other strings fail."""
    holder = _holder(rule_name, enum_cls)
    for member in enum_cls:
        assert from_json(holder, {"value": member.value}).value is member
        validator.validate(holder(value=member.value))
    with pytest.raises(ValidationError) as exc:
        from_json(holder, {"value": "NotAValue"})
    assert exc.value.rule == rule_name
    assert exc.value.code == ErrorCode.PROPERTY_CONSTRAINT_VIOLATION


def _profile():
    return types.ChargingProfile(
        charging_profile_id=7,
        stack_level=1,
        charging_profile_purpose=types.ChargingProfilePurposeType.TX_DEFAULT_PROFILE,
        charging_profile_kind=types.ChargingProfileKindType.RECURRING,
        recurrency_kind=types.RecurrencyKindType.DAILY,
        charging_schedule=types.ChargingSchedule(
            charging_rate_unit=types.ChargingRateUnitType.WATTS,
            charging_schedule_period=[
                types.ChargingSchedulePeriod(start_period=0, limit=11000.0, number_phases=3),
                types.ChargingSchedulePeriod(start_period=3600, limit=7400.0),
            ],
            start_schedule=NOW,
        ),
    )


SAMPLES = [
    (core.BootNotification, core.BootNotificationRequest(
        charge_point_model="Model X", charge_point_vendor="Voltaro", firmware_version="1.2.3",
    )),
    (core.BootNotification, core.BootNotificationConfirmation(
        current_time=NOW, interval=300, status=core.RegistrationStatus.PENDING,
    )),
    (core.Authorize, core.AuthorizeConfirmation(id_tag_info=types.IdTagInfo(
        status=types.AuthorizationStatus.ACCEPTED, expiry_date=NOW, parent_id_tag="PARENT",
    ))),
    (core.GetConfiguration, core.GetConfigurationConfirmation(
        configuration_key=[core.ConfigurationKey(key="HeartbeatInterval", readonly=True, value="300")],
        unknown_key=["Foo"],
    )),
    (core.MeterValues, core.MeterValuesRequest(
        connector_id=1,
        transaction_id=42,
        meter_value=[types.MeterValue(timestamp=NOW, sampled_value=[types.SampledValue(
            value="1234.5",
            context=types.ReadingContext.SAMPLE_PERIODIC,
            measurand=types.Measurand.ENERGY_ACTIVE_IMPORT_REGISTER,
            unit=types.UnitOfMeasure.WH,
        )])],
    )),
    (core.StatusNotification, core.StatusNotificationRequest(
        connector_id=2,
        error_code=core.ChargePointErrorCode.NO_ERROR,
        status=core.ChargePointStatus.CHARGING,
        timestamp=NOW,
    )),
    (core.StopTransaction, core.StopTransactionRequest(
        meter_stop=5000, timestamp=NOW, transaction_id=42, reason=core.Reason.EV_DISCONNECTED,
    )),
    (core.DataTransfer, core.DataTransferRequest(
        vendor_id="acme", message_id="cfg", data={"nested": [1, "two", None]},
    )),
    (smartcharging.SetChargingProfile, smartcharging.SetChargingProfileRequest(
        connector_id=1, charging_profile=_profile(),
    )),
    (smartcharging.GetCompositeSchedule, smartcharging.GetCompositeScheduleConfirmation(
        status=smartcharging.GetCompositeScheduleStatus.ACCEPTED,
        connector_id=1,
        schedule_start=NOW,
        charging_schedule=_profile().charging_schedule,
    )),
    (reservation.ReserveNow, reservation.ReserveNowRequest(
        connector_id=1, expiry_date=NOW, id_tag="TAG1", reservation_id=9,
    )),
    (remotetrigger.TriggerMessage, remotetrigger.TriggerMessageRequest(
        requested_message=remotetrigger.MessageTrigger.METER_VALUES, connector_id=1,
    )),
    (firmware.UpdateFirmware, firmware.UpdateFirmwareRequest(
        location="https://firmware.example.com/v2.bin", retrieve_date=NOW, retries=3,
    )),
    (localauth.SendLocalList, localauth.SendLocalListRequest(
        list_version=2,
        update_type=localauth.UpdateType.FULL,
        local_authorization_list=[localauth.AuthorizationData(
            id_tag="TAG1", id_tag_info=types.IdTagInfo(status=types.AuthorizationStatus.BLOCKED),
        )],
    )),
]


@pytest.mark.parametrize("feature,payload", SAMPLES, ids=lambda value: type(value).__name__)
def test_payload_survives_the_wire(feature, payload):
    """Test that a valid payload decodes back to an equal value."""
    validator.validate(payload)
    wire = json.dumps(to_json(payload))
    decoded = from_json(type(payload), json.loads(wire))

    assert decoded == payload
    assert to_json(decoded) == json.loads(wire)
    assert feature.request_type is type(payload) or feature.response_type is type(payload)


def test_wire_field_names():
    payload = to_json(smartcharging.SetChargingProfileRequest(connector_id=1, charging_profile=_profile()))
    assert set(payload) == {"connectorId", "csChargingProfiles"}
    assert payload["csChargingProfiles"]["chargingSchedule"]["startSchedule"] == "2024-05-01T12:30:00Z"
    assert payload["csChargingProfiles"]["recurrencyKind"] == "Daily"


def test_decode_accepts_timezone_offsets():
    request = from_json(core.StartTransactionRequest, {
        "connectorId": 1,
        "idTag": "TAG1",
        "meterStart": 0,
        "timestamp": "2024-05-01T14:30:00.250+02:00",
    })
    assert request.connector_id == 1
    assert request.timestamp == NOW.replace(microsecond=250000)


def test_decode_rejects_wrong_json_type():
    with pytest.raises(ValidationError) as exc:
        from_json(core.AuthorizeRequest, {"idTag": 5}, namespace="Call.Payload")
    assert exc.value.code == ErrorCode.TYPE_CONSTRAINT_VIOLATION
    assert exc.value.describe() == "Field Call.Payload.idTag must be of type string, but was number"


def test_decode_rejects_fractional_integer():
    with pytest.raises(ValidationError) as exc:
        from_json(core.StartTransactionRequest, {
            "connectorId": 1.5,
            "idTag": "TAG1",
            "meterStart": 0,
            "timestamp": "2024-05-01T12:30:00Z",
        }, namespace="Call.Payload")
    assert exc.value.code == ErrorCode.TYPE_CONSTRAINT_VIOLATION
    assert exc.value.namespace == "Call.Payload.connectorId"


def test_decode_rejects_malformed_timestamp():
    with pytest.raises(OcppError) as exc:
        from_json(core.HeartbeatConfirmation, {"currentTime": "yesterday"}, namespace="CallResult.Payload")
    assert exc.value.code == ErrorCode.FORMAT_VIOLATION
    assert exc.value.description.startswith("Field CallResult.Payload.currentTime:")


def test_decode_rejects_non_object():
    with pytest.raises(OcppError) as exc:
        from_json(core.AuthorizeRequest, ["TAG1"], ErrorCode.FORMATION_VIOLATION)
    assert exc.value.code == ErrorCode.FORMATION_VIOLATION


def test_profiles_have_unique_actions():
    actions = [feature.action for profile in ALL_PROFILES for feature in profile]
    assert len(actions) == len(set(actions))
    assert len(core.PROFILE) == 16


@pytest.mark.parametrize("feature,initiators", [
    (core.BootNotification, FROM_CHARGING_STATION),
    (core.Heartbeat, FROM_CHARGING_STATION),
    (core.DataTransfer, FROM_BOTH),
    (core.RemoteStartTransaction, FROM_CSMS),
    (smartcharging.SetChargingProfile, FROM_CSMS),
    (firmware.FirmwareStatusNotification, FROM_CHARGING_STATION),
    (localauth.GetLocalListVersion, FROM_CSMS),
])
def test_feature_directions(feature, initiators):
    assert feature.initiators == initiators


def test_handler_names():
    assert core.BootNotification.handler_name == "on_boot_notification"
    assert smartcharging.GetCompositeSchedule.handler_name == "on_get_composite_schedule"
    assert firmware.DiagnosticsStatusNotification.handler_name == "on_diagnostics_status_notification"


def _payload_types():
    for profile in ALL_PROFILES:
        for feature in profile:
            yield pytest.param(feature.request_type, id=feature.request_type.__name__)
            yield pytest.param(feature.response_type, id=feature.response_type.__name__)


@pytest.mark.parametrize("payload_type", list(_payload_types()))
def test_every_payload_type_survives_the_wire(payload_type):
    """Test that a payload with every field set decodes back to the same value."""
    payload = sample_payload(payload_type)
    validator.validate(payload)
    wire = json.loads(json.dumps(to_json(payload)))
    decoded = from_json(payload_type, wire)

    assert to_json(decoded) == wire
    assert decoded.model_dump() == payload.model_dump()


class RecordingHandler:
    """Answers nothing; records every on_* handler that gets called."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if not name.startswith("on_"):
            raise AttributeError(name)

        def handle(*args):
            self.calls.append(name)

        return handle


def _one_way_features(initiators):
    return [
        pytest.param(feature, id=feature.action)
        for profile in ALL_PROFILES
        for feature in profile
        if feature.initiators == initiators
    ]


def _call_frame(feature, message_id):
    return json.dumps([2, message_id, feature.action, to_json(sample_payload(feature.request_type))])


@pytest.mark.parametrize("feature", _one_way_features(FROM_CSMS))
async def test_central_system_refuses_its_own_actions(feature):
    transport = MockServerTransport()
    central_system = CentralSystem(transport)
    handler = RecordingHandler()
    for profile in ALL_PROFILES:
        central_system.set_profile_handler(profile.name, handler)
    await central_system.start(8887, "/ocpp/{ws}")
    await transport.connect_peer("cp1")

    await transport.receive("cp1", _call_frame(feature, "w1"))
    await settle()

    frame = json.loads(transport.frames_for("cp1")[-1])
    assert frame[:3] == [4, "w1", "NotSupported"]
    assert handler.calls == []
    await central_system.stop()


@pytest.mark.parametrize("feature", _one_way_features(FROM_CHARGING_STATION))
async def test_charge_point_refuses_its_own_actions(feature):
    transport = MockClientTransport()
    charge_point = ChargePoint("cp1", transport)
    handler = RecordingHandler()
    for profile in ALL_PROFILES:
        charge_point.set_profile_handler(profile.name, handler)
    await charge_point.start("ws://localhost:8887/ocpp")

    await transport.receive(_call_frame(feature, "w1"))
    await settle()

    frame = json.loads(transport.written[-1])
    assert frame[:3] == [4, "w1", "NotSupported"]
    assert handler.calls == []
    await charge_point.stop()
