"""
OCPP 1.6 Charge Point endpoint.
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional, Union

from ocppj.client import Client
from ocppj.messages import V16
from ocppj.transport.base import ClientTransport
from ocppj.transport.websocket import WebSocketClient
from ocppj.utils import utc_now
from ocppj.v16 import core, firmware, localauth, remotetrigger, reservation, smartcharging
from ocppj.v16.profiles import ALL_PROFILES
from ocppj.v16.types import MeterValue


class ChargePoint(Client):
    def __init__(
        self,
        id: str,
        transport: Optional[ClientTransport] = None,
        profiles: Iterable = ALL_PROFILES,
        **kwargs,
    ):
        super().__init__(id, transport or WebSocketClient(), V16, profiles, **kwargs)

    def set_core_handler(self, handler):
        self.set_profile_handler(core.PROFILE_NAME, handler)

    def set_smart_charging_handler(self, handler):
        self.set_profile_handler(smartcharging.PROFILE_NAME, handler)

    def set_reservation_handler(self, handler):
        self.set_profile_handler(reservation.PROFILE_NAME, handler)

    def set_remote_trigger_handler(self, handler):
        self.set_profile_handler(remotetrigger.PROFILE_NAME, handler)

    def set_firmware_management_handler(self, handler):
        self.set_profile_handler(firmware.PROFILE_NAME, handler)

    def set_local_auth_list_handler(self, handler):
        self.set_profile_handler(localauth.PROFILE_NAME, handler)

    async def boot_notification(
        self, charge_point_model: str, charge_point_vendor: str, **kwargs
    ) -> core.BootNotificationConfirmation:
        """Send BootNotification and return the BootNotificationConfirmation."""
        return await self.call(core.BootNotification.new_request(
            charge_point_model=charge_point_model,
            charge_point_vendor=charge_point_vendor,
            **kwargs,
        ))

    async def heartbeat(self) -> core.HeartbeatConfirmation:
        return await self.call(core.Heartbeat.new_request())

    async def authorize(self, id_tag: str) -> core.AuthorizeConfirmation:
        return await self.call(core.Authorize.new_request(id_tag=id_tag))

    async def status_notification(
        self,
        connector_id: int,
        error_code: Union[core.ChargePointErrorCode, str],
        status: Union[core.ChargePointStatus, str],
        **kwargs,
    ) -> core.StatusNotificationConfirmation:
        return await self.call(core.StatusNotification.new_request(
            connector_id=connector_id,
            error_code=error_code,
            status=status,
            **kwargs,
        ))

    async def start_transaction(
        self,
        connector_id: int,
        id_tag: str,
        meter_start: int,
        timestamp: Optional[datetime] = None,
        reservation_id: int = None,
    ) -> core.StartTransactionConfirmation:
        return await self.call(core.StartTransaction.new_request(
            connector_id=connector_id,
            id_tag=id_tag,
            meter_start=meter_start,
            timestamp=timestamp or utc_now(),
            reservation_id=reservation_id,
        ))

    async def stop_transaction(
        self, meter_stop: int, transaction_id: int, timestamp: Optional[datetime] = None, **kwargs
    ) -> core.StopTransactionConfirmation:
        return await self.call(core.StopTransaction.new_request(
            meter_stop=meter_stop,
            timestamp=timestamp or utc_now(),
            transaction_id=transaction_id,
            **kwargs,
        ))

    async def meter_values(
        self, connector_id: int, meter_value: List[MeterValue], transaction_id: int = None
    ) -> core.MeterValuesConfirmation:
        return await self.call(core.MeterValues.new_request(
            connector_id=connector_id,
            meter_value=meter_value,
            transaction_id=transaction_id,
        ))

    async def data_transfer(
        self, vendor_id: str, message_id: Optional[str] = None, data: Any = None
    ) -> core.DataTransferConfirmation:
        return await self.call(core.DataTransfer.new_request(
            vendor_id=vendor_id,
            message_id=message_id,
            data=data,
        ))

    async def diagnostics_status_notification(
        self, status: Union[firmware.DiagnosticsStatus, str]
    ) -> firmware.DiagnosticsStatusNotificationConfirmation:
        return await self.call(firmware.DiagnosticsStatusNotification.new_request(status=status))

    async def firmware_status_notification(
        self, status: Union[firmware.FirmwareStatus, str]
    ) -> firmware.FirmwareStatusNotificationConfirmation:
        return await self.call(firmware.FirmwareStatusNotification.new_request(status=status))
