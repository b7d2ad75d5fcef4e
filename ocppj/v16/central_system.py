"""
OCPP 1.6 Central System endpoint.
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional, Union

from loguru import logger

from ocppj.messages import V16
from ocppj.server import Server
from ocppj.transport.base import ServerTransport
from ocppj.transport.websocket import WebSocketServer
from ocppj.v16 import core, firmware, localauth, remotetrigger, reservation, smartcharging
from ocppj.v16.profiles import ALL_PROFILES
from ocppj.v16.types import ChargingProfile, ChargingRateUnitType


class CentralSystem(Server):
    """Central System operations for managing charge points."""

    def __init__(
        self,
        transport: Optional[ServerTransport] = None,
        profiles: Iterable = ALL_PROFILES,
        **kwargs,
    ):
        super().__init__(transport or WebSocketServer(), V16, profiles, **kwargs)

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

    async def remote_start_transaction(
        self,
        charge_point_id: str,
        id_tag: str,
        connector_id: int = None,
        charging_profile: Optional[ChargingProfile] = None,
    ) -> core.RemoteStartTransactionConfirmation:
        """
        Send RemoteStartTransaction request to a charge point.

        Args:
            charge_point_id: ID of the target charge point
            id_tag: ID tag to authorize the transaction
            connector_id: Optional specific connector ID
            charging_profile: Optional ChargingProfile

        Returns:
            RemoteStartTransactionConfirmation
        """
        logger.info(
            f"Central System initiating RemoteStartTransaction to {charge_point_id}: "
            f"idTag={id_tag}, connectorId={connector_id}"
        )
        return await self.call(charge_point_id, core.RemoteStartTransaction.new_request(
            id_tag=id_tag,
            connector_id=connector_id,
            charging_profile=charging_profile,
        ))

    async def remote_stop_transaction(
        self, charge_point_id: str, transaction_id: int
    ) -> core.RemoteStopTransactionConfirmation:
        """
        Send RemoteStopTransaction request to a charge point.

        Args:
            charge_point_id: ID of the target charge point
            transaction_id: ID of the transaction to stop

        Returns:
            RemoteStopTransactionConfirmation
        """
        logger.info(
            f"Central System initiating RemoteStopTransaction to {charge_point_id}: "
            f"transactionId={transaction_id}"
        )
        return await self.call(
            charge_point_id, core.RemoteStopTransaction.new_request(transaction_id=transaction_id)
        )

    async def change_availability(
        self,
        charge_point_id: str,
        connector_id: int,
        availability_type: Union[core.AvailabilityType, str],
    ) -> core.ChangeAvailabilityConfirmation:
        """
        Send ChangeAvailability request to a charge point.

        Args:
            charge_point_id: ID of the target charge point
            connector_id: Connector ID (0 for the entire charge point)
            availability_type: AvailabilityType or its string value

        Returns:
            ChangeAvailabilityConfirmation
        """
        logger.info(
            f"Central System initiating ChangeAvailability to {charge_point_id}: "
            f"connectorId={connector_id}, type={availability_type}"
        )
        return await self.call(charge_point_id, core.ChangeAvailability.new_request(
            connector_id=connector_id,
            type=availability_type,
        ))

    async def change_configuration(
        self, charge_point_id: str, key: str, value: str
    ) -> core.ChangeConfigurationConfirmation:
        return await self.call(
            charge_point_id, core.ChangeConfiguration.new_request(key=key, value=value)
        )

    async def get_configuration(
        self, charge_point_id: str, keys: Optional[List[str]] = None
    ) -> core.GetConfigurationConfirmation:
        return await self.call(charge_point_id, core.GetConfiguration.new_request(key=keys))

    async def clear_cache(self, charge_point_id: str) -> core.ClearCacheConfirmation:
        return await self.call(charge_point_id, core.ClearCache.new_request())

    async def reset(
        self, charge_point_id: str, reset_type: Union[core.ResetType, str]
    ) -> core.ResetConfirmation:
        logger.info(f"Central System initiating {reset_type} Reset to {charge_point_id}")
        return await self.call(charge_point_id, core.Reset.new_request(type=reset_type))

    async def unlock_connector(
        self, charge_point_id: str, connector_id: int
    ) -> core.UnlockConnectorConfirmation:
        return await self.call(
            charge_point_id, core.UnlockConnector.new_request(connector_id=connector_id)
        )

    async def data_transfer(
        self,
        charge_point_id: str,
        vendor_id: str,
        message_id: Optional[str] = None,
        data: Any = None,
    ) -> core.DataTransferConfirmation:
        return await self.call(charge_point_id, core.DataTransfer.new_request(
            vendor_id=vendor_id,
            message_id=message_id,
            data=data,
        ))

    async def set_charging_profile(
        self, charge_point_id: str, connector_id: int, charging_profile: ChargingProfile
    ) -> smartcharging.SetChargingProfileConfirmation:
        return await self.call(charge_point_id, smartcharging.SetChargingProfile.new_request(
            connector_id=connector_id,
            charging_profile=charging_profile,
        ))

    async def clear_charging_profile(
        self, charge_point_id: str, **kwargs
    ) -> smartcharging.ClearChargingProfileConfirmation:
        return await self.call(
            charge_point_id, smartcharging.ClearChargingProfile.new_request(**kwargs)
        )

    async def get_composite_schedule(
        self,
        charge_point_id: str,
        connector_id: int,
        duration: int,
        charging_rate_unit: Optional[ChargingRateUnitType] = None,
    ) -> smartcharging.GetCompositeScheduleConfirmation:
        return await self.call(charge_point_id, smartcharging.GetCompositeSchedule.new_request(
            connector_id=connector_id,
            duration=duration,
            charging_rate_unit=charging_rate_unit,
        ))

    async def reserve_now(
        self,
        charge_point_id: str,
        connector_id: int,
        expiry_date: datetime,
        id_tag: str,
        reservation_id: int,
        parent_id_tag: Optional[str] = None,
    ) -> reservation.ReserveNowConfirmation:
        return await self.call(charge_point_id, reservation.ReserveNow.new_request(
            connector_id=connector_id,
            expiry_date=expiry_date,
            id_tag=id_tag,
            reservation_id=reservation_id,
            parent_id_tag=parent_id_tag,
        ))

    async def cancel_reservation(
        self, charge_point_id: str, reservation_id: int
    ) -> reservation.CancelReservationConfirmation:
        return await self.call(
            charge_point_id, reservation.CancelReservation.new_request(reservation_id=reservation_id)
        )

    async def trigger_message(
        self,
        charge_point_id: str,
        requested_message: Union[remotetrigger.MessageTrigger, str],
        connector_id: int = None,
    ) -> remotetrigger.TriggerMessageConfirmation:
        return await self.call(charge_point_id, remotetrigger.TriggerMessage.new_request(
            requested_message=requested_message,
            connector_id=connector_id,
        ))

    async def get_diagnostics(
        self, charge_point_id: str, location: str, **kwargs
    ) -> firmware.GetDiagnosticsConfirmation:
        return await self.call(
            charge_point_id, firmware.GetDiagnostics.new_request(location=location, **kwargs)
        )

    async def update_firmware(
        self, charge_point_id: str, location: str, retrieve_date: datetime, **kwargs
    ) -> firmware.UpdateFirmwareConfirmation:
        return await self.call(charge_point_id, firmware.UpdateFirmware.new_request(
            location=location,
            retrieve_date=retrieve_date,
            **kwargs,
        ))

    async def get_local_list_version(
        self, charge_point_id: str
    ) -> localauth.GetLocalListVersionConfirmation:
        return await self.call(charge_point_id, localauth.GetLocalListVersion.new_request())

    async def send_local_list(
        self,
        charge_point_id: str,
        list_version: int,
        update_type: Union[localauth.UpdateType, str],
        local_authorization_list: Optional[List[localauth.AuthorizationData]] = None,
    ) -> localauth.SendLocalListConfirmation:
        return await self.call(charge_point_id, localauth.SendLocalList.new_request(
            list_version=list_version,
            update_type=update_type,
            local_authorization_list=local_authorization_list,
        ))
