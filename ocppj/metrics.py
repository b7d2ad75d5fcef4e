"""
OpenTelemetry instruments for OCPP traffic.

Endpoints record one data point per inbound and outbound request, labelled
with the peer, the action and, when the request failed, an error category.
The websocket server tracks connected peers and per-message rates. Both use
the global meter provider unless one is passed in, so nothing is exported
until the application configures an SDK.
"""

from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import CallbackOptions, MeterProvider, Observation

from ocppj.errors import ConnectionLostError, ErrorCode, LocalError, OcppError, RequestTimeoutError
from ocppj.validation import ValidationError

REQUESTS_INBOUND = "ocpp_requests_inbound"
REQUESTS_OUTBOUND = "ocpp_requests_outbound"
CHARGE_POINTS_CONNECTED = "websocket_charge_points_connected"
MESSAGE_RATE = "websocket_message_rate"

ATTRIBUTE_CHARGE_POINT_ID = "charge_point_id"
ATTRIBUTE_OCPP_VERSION = "ocpp_version"
ATTRIBUTE_FEATURE = "feature"
ATTRIBUTE_ERROR = "error"
ATTRIBUTE_DIRECTION = "direction"

CHARGE_POINT_ERROR = "charge_point_error"
INTERNAL_ERROR = "internal_error"
NETWORK_ERROR = "network_error"
PAYLOAD_ERROR = "payload_error"
VALIDATION_ERROR = "validation_error"

DIRECTION_INBOUND = "inbound"
DIRECTION_OUTBOUND = "outbound"

_PAYLOAD_CODES = {
    ErrorCode.FORMAT_VIOLATION,
    ErrorCode.FORMATION_VIOLATION,
    ErrorCode.TYPE_CONSTRAINT_VIOLATION,
}
_VALIDATION_CODES = {
    ErrorCode.OCCURRENCE_CONSTRAINT_VIOLATION,
    ErrorCode.PROPERTY_CONSTRAINT_VIOLATION,
    ErrorCode.NOT_IMPLEMENTED,
    ErrorCode.NOT_SUPPORTED,
}
_INTERNAL_CODES = {ErrorCode.INTERNAL_ERROR, ErrorCode.GENERIC_ERROR}


def error_category(error: Optional[Exception]) -> Optional[str]:
    """Map the outcome of a request onto the error attribute, None on success."""
    if error is None:
        return None
    if isinstance(error, ValidationError):
        return VALIDATION_ERROR
    if isinstance(error, (ConnectionLostError, RequestTimeoutError)):
        return NETWORK_ERROR
    if isinstance(error, OcppError):
        if error.code in _PAYLOAD_CODES:
            return PAYLOAD_ERROR
        if error.code in _VALIDATION_CODES:
            return VALIDATION_ERROR
        if error.code in _INTERNAL_CODES:
            return INTERNAL_ERROR
        return CHARGE_POINT_ERROR
    if isinstance(error, LocalError):
        return INTERNAL_ERROR
    return PAYLOAD_ERROR if isinstance(error, (TypeError, ValueError)) else INTERNAL_ERROR


class OcppMetrics:
    """Request counters of one endpoint."""

    def __init__(self, meter_provider: Optional[MeterProvider] = None, ocpp_version: str = ""):
        provider = meter_provider or metrics.get_meter_provider()
        meter = provider.get_meter("ocpp")
        self.ocpp_version = ocpp_version
        self.requests_in = meter.create_histogram(
            REQUESTS_INBOUND, description="Number of inbound requests"
        )
        self.requests_out = meter.create_histogram(
            REQUESTS_OUTBOUND, description="Number of outbound requests"
        )

    def _attributes(self, charge_point_id, feature, error):
        attributes = {
            ATTRIBUTE_CHARGE_POINT_ID: charge_point_id,
            ATTRIBUTE_OCPP_VERSION: self.ocpp_version,
        }
        # The action is unknown when the frame could not be parsed
        if feature:
            attributes[ATTRIBUTE_FEATURE] = feature
        category = error_category(error)
        if category is not None:
            attributes[ATTRIBUTE_ERROR] = category
        return attributes

    def record_inbound(self, charge_point_id: str, feature: str, error: Optional[Exception] = None):
        self.requests_in.record(1, self._attributes(charge_point_id, feature, error))

    def record_outbound(self, charge_point_id: str, feature: str, error: Optional[Exception] = None):
        self.requests_out.record(1, self._attributes(charge_point_id, feature, error))


class WebSocketMetrics:
    """Connection gauge and message rate of a websocket server."""

    def __init__(self, meter_provider: Optional[MeterProvider] = None):
        provider = meter_provider or metrics.get_meter_provider()
        meter = provider.get_meter("websocket")
        self.connected = 0
        meter.create_observable_gauge(
            CHARGE_POINTS_CONNECTED,
            callbacks=[self._observe_connected],
            description="Number of currently connected charge points",
        )
        self.message_rate = meter.create_histogram(MESSAGE_RATE, description="Message rate")

    def _observe_connected(self, options: CallbackOptions):
        yield Observation(self.connected)

    def peer_connected(self):
        self.connected += 1

    def peer_disconnected(self):
        # Only positive values are reported
        if self.connected > 0:
            self.connected -= 1

    def record_message(self, charge_point_id: str, direction: str):
        self.message_rate.record(1, {
            ATTRIBUTE_CHARGE_POINT_ID: charge_point_id,
            ATTRIBUTE_DIRECTION: direction,
        })
