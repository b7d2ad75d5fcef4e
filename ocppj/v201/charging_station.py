"""
OCPP 2.0.1 Charging Station endpoint.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, Union

from ocppj.client import Client
from ocppj.messages import V201
from ocppj.transport.base import ClientTransport
from ocppj.transport.websocket import WebSocketClient
from ocppj.utils import utc_now
from ocppj.v201 import availability, data, display, provisioning, remotecontrol, reservation
from ocppj.v201.data import DataTransfer, DataTransferResponse
from ocppj.v201.profiles import ALL_PROFILES


class ChargingStation(Client):
    def __init__(
        self,
        id: str,
        transport: Optional[ClientTransport] = None,
        profiles: Iterable = ALL_PROFILES,
        **kwargs,
    ):
        super().__init__(id, transport or WebSocketClient(), V201, profiles, **kwargs)

    def set_provisioning_handler(self, handler):
        self.set_profile_handler(provisioning.PROFILE_NAME, handler)

    def set_availability_handler(self, handler):
        self.set_profile_handler(availability.PROFILE_NAME, handler)

    def set_display_handler(self, handler):
        self.set_profile_handler(display.PROFILE_NAME, handler)

    def set_data_handler(self, handler):
        self.set_profile_handler(data.PROFILE_NAME, handler)

    def set_reservation_handler(self, handler):
        self.set_profile_handler(reservation.PROFILE_NAME, handler)

    def set_remote_control_handler(self, handler):
        self.set_profile_handler(remotecontrol.PROFILE_NAME, handler)

    async def boot_notification(
        self, reason: Union[provisioning.BootReason, str], model: str, vendor_name: str, **kwargs
    ) -> provisioning.BootNotificationResponse:
        """
        Send BootNotification to the CSMS.

        Args:
            reason: BootReason or its string value
            model: charging station model
            vendor_name: charging station vendor
            **kwargs: serial_number, firmware_version, modem

        Returns:
            BootNotificationResponse
        """
        return await self.call(provisioning.BootNotification.new_request(
            reason=reason,
            charging_station=dict(model=model, vendor_name=vendor_name, **kwargs),
        ))

    async def heartbeat(self) -> availability.HeartbeatResponse:
        return await self.call(availability.Heartbeat.new_request())

    async def status_notification(
        self,
        evse_id: int,
        connector_id: int,
        connector_status: Union[availability.ConnectorStatus, str],
        timestamp: Optional[datetime] = None,
    ) -> availability.StatusNotificationResponse:
        return await self.call(availability.StatusNotification.new_request(
            timestamp=timestamp or utc_now(),
            connector_status=connector_status,
            evse_id=evse_id,
            connector_id=connector_id,
        ))

    async def data_transfer(
        self, vendor_id: str, message_id: Optional[str] = None, data: Any = None
    ) -> DataTransferResponse:
        return await self.call(DataTransfer.new_request(
            vendor_id=vendor_id,
            message_id=message_id,
            data=data,
        ))
