"""
OCPP 1.6J profiles and endpoints.
"""

from ocppj.v16.central_system import CentralSystem
from ocppj.v16.charge_point import ChargePoint
from ocppj.v16.profiles import ALL_PROFILES

SUBPROTOCOL = "ocpp1.6"

__all__ = ["ALL_PROFILES", "CentralSystem", "ChargePoint", "SUBPROTOCOL"]
