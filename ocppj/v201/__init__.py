"""
OCPP 2.0.1 functional blocks and endpoints.
"""

from ocppj.v201.charging_station import ChargingStation
from ocppj.v201.csms import CSMS
from ocppj.v201.profiles import ALL_PROFILES

SUBPROTOCOL = "ocpp2.0.1"

__all__ = ["ALL_PROFILES", "CSMS", "ChargingStation", "SUBPROTOCOL"]
