import json
from typing import Optional

import pytest

from ocppj.errors import ErrorCode, OcppError
from ocppj.feature import Feature, FROM_CSMS, Profile, Role, snake_case
from ocppj.payload import CustomPayload
from ocppj.validation import ValidationError
from ocppj.v16 import ChargePoint, core, reservation

from mock_transport import settle


class LegacyDataTransfer(CustomPayload):
    """DataTransfer request of a vendor sending vendor and body keys."""

    vendor: str
    body: Optional[str] = None

    def parse(self):
        return core.DataTransferRequest(vendor_id=self.vendor, data=self.body)

    @classmethod
    def serialize(cls, payload):
        return cls(vendor=payload.vendor_id, body=payload.data)


class NumericStatus(CustomPayload):
    code: int

    def parse(self):
        if self.code not in (0, 1):
            raise ValueError(f"unknown status code {self.code}")
        status = core.DataTransferStatus.ACCEPTED if self.code == 0 else core.DataTransferStatus.REJECTED
        return core.DataTransferConfirmation(status=status)


class Unparsed(CustomPayload):
    def parse(self):
        return self


def test_snake_case():
    assert snake_case("BootNotification") == "boot_notification"
    assert snake_case("GetCompositeSchedule") == "get_composite_schedule"
    assert snake_case("Heartbeat") == "heartbeat"


def test_role_peer():
    assert Role.CSMS.peer is Role.CHARGING_STATION
    assert Role.CHARGING_STATION.peer is Role.CSMS


def test_profile_lookup():
    assert core.PROFILE.supports("Heartbeat")
    assert core.PROFILE.get("Heartbeat") is core.Heartbeat
    assert core.PROFILE.get("ReserveNow") is None


def test_profile_rejects_duplicate_action():
    with pytest.raises(ValueError):
        Profile("twice", [core.Heartbeat, core.Heartbeat])


def test_feature_builds_payloads():
    request = core.Authorize.new_request(id_tag="TAG1")
    assert isinstance(request, core.AuthorizeRequest)
    response = core.Authorize.new_response(id_tag_info={"status": "Accepted"})
    assert isinstance(response, core.AuthorizeConfirmation)
    assert response.id_tag_info.status == core.AuthorizationStatus.ACCEPTED


def test_feature_reports_invalid_arguments():
    with pytest.raises(ValidationError) as exc:
        core.Authorize.new_request(id_tag="T" * 21)
    assert exc.value.namespace == "Call.Payload.idTag"
    assert exc.value.rule == "max"


def test_endpoint_rejects_duplicate_profile(client_transport):
    cp = ChargePoint("cp1", client_transport, profiles=[core.PROFILE])
    with pytest.raises(ValueError):
        cp.add_profile(core.PROFILE)


def test_endpoint_rejects_action_registered_twice(client_transport):
    clash = Profile("clash", [Feature(
        "Heartbeat", reservation.CancelReservationRequest, core.HeartbeatConfirmation, FROM_CSMS
    )])
    cp = ChargePoint("cp1", client_transport, profiles=[core.PROFILE])
    with pytest.raises(ValueError):
        cp.add_profile(clash)
    assert "clash" not in cp.profiles


def test_handler_for_unknown_profile(client_transport):
    cp = ChargePoint("cp1", client_transport, profiles=[core.PROFILE])
    with pytest.raises(ValueError):
        cp.set_reservation_handler(object())


def test_endpoint_directions(client_transport):
    cp = ChargePoint("cp1", client_transport)
    assert cp.can_send(core.Heartbeat)
    assert not cp.can_receive(core.Heartbeat)
    assert cp.can_receive(core.Reset)
    assert cp.can_send(core.DataTransfer) and cp.can_receive(core.DataTransfer)
    assert cp.get_feature("ReserveNow") is reservation.ReserveNow


def test_custom_request_is_parsed_into_the_standard_payload():
    request = core.DataTransfer.decode_request({"vendor": "acme", "body": "hi"}, custom_type=LegacyDataTransfer)
    assert request == core.DataTransferRequest(vendor_id="acme", data="hi")


def test_custom_request_is_serialized():
    request = core.DataTransferRequest(vendor_id="acme", data="hi")
    assert core.DataTransfer.encode_request(request, LegacyDataTransfer) == {"vendor": "acme", "body": "hi"}


def test_custom_response_parse_failure_is_a_format_error():
    response = core.DataTransfer.decode_response({"code": 0}, custom_type=NumericStatus)
    assert response.status == core.DataTransferStatus.ACCEPTED

    with pytest.raises(OcppError) as exc:
        core.DataTransfer.decode_response({"code": 7}, ErrorCode.FORMATION_VIOLATION, NumericStatus)
    assert exc.value.code == ErrorCode.FORMATION_VIOLATION
    assert exc.value.description == "Invalid payload CallResult.Payload: unknown status code 7"


def test_custom_payload_must_parse_into_the_standard_type():
    with pytest.raises(OcppError) as exc:
        core.DataTransfer.decode_request({}, custom_type=Unparsed)
    assert exc.value.code == ErrorCode.FORMAT_VIOLATION
    assert "Unparsed parsed into Unparsed" in exc.value.description


def test_set_custom_type_checks_arguments(client_transport):
    cp = ChargePoint("cp1", client_transport)
    with pytest.raises(ValueError):
        cp.set_custom_request_type("NoSuchAction", LegacyDataTransfer)
    with pytest.raises(TypeError):
        cp.set_custom_request_type("DataTransfer", core.DataTransferRequest)


async def test_endpoint_exchanges_custom_payloads(client_transport):
    """Test that a registered custom type is used in both directions and can be removed."""
    received = []

    class CoreHandler:
        def on_data_transfer(self, request):
            received.append(request)
            return core.DataTransferConfirmation(status=core.DataTransferStatus.ACCEPTED)

    cp = ChargePoint("cp1", client_transport)
    cp.set_core_handler(CoreHandler())
    cp.set_custom_request_type("DataTransfer", LegacyDataTransfer)
    await cp.start("ws://localhost:9000/ocpp")

    await client_transport.receive('[2,"s1","DataTransfer",{"vendor":"acme","body":"hi"}]')
    assert received == [core.DataTransferRequest(vendor_id="acme", data="hi")]
    assert client_transport.written == ['[3,"s1",{"status":"Accepted"}]']

    cp.send_request(core.DataTransferRequest(vendor_id="acme", data="out"))
    await settle()
    assert json.loads(client_transport.written[-1])[3] == {"vendor": "acme", "body": "out"}

    cp.set_custom_request_type("DataTransfer", None)
    await client_transport.receive('[2,"s2","DataTransfer",{"vendorId":"acme"}]')
    assert received[-1] == core.DataTransferRequest(vendor_id="acme")
    await cp.stop()
