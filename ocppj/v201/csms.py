"""
OCPP 2.0.1 CSMS endpoint.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, Union

from loguru import logger

from ocppj.messages import V201
from ocppj.server import Server
from ocppj.transport.base import ServerTransport
from ocppj.transport.websocket import WebSocketServer
from ocppj.v201 import availability, data, display, provisioning, remotecontrol, reservation
from ocppj.v201.profiles import ALL_PROFILES
from ocppj.v201.types import IdToken, IdTokenType


class CSMS(Server):
    """Charging Station Management System operations for managing charging stations."""

    def __init__(
        self,
        transport: Optional[ServerTransport] = None,
        profiles: Iterable = ALL_PROFILES,
        **kwargs,
    ):
        super().__init__(transport or WebSocketServer(), V201, profiles, **kwargs)

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

    async def reset(
        self, station_id: str, reset_type: Union[provisioning.ResetType, str], evse_id: int = None
    ) -> provisioning.ResetResponse:
        logger.info(f"CSMS initiating {reset_type} Reset to {station_id}")
        return await self.call(station_id, provisioning.Reset.new_request(
            type=reset_type,
            evse_id=evse_id,
        ))

    async def change_availability(
        self,
        station_id: str,
        operational_status: Union[availability.OperationalStatus, str],
        evse_id: int = None,
        connector_id: int = None,
    ) -> availability.ChangeAvailabilityResponse:
        """
        Send ChangeAvailability request to a charging station.

        Args:
            station_id: ID of the target charging station
            operational_status: OperationalStatus or its string value
            evse_id: Optional EVSE, the whole station when omitted
            connector_id: Optional connector of the EVSE

        Returns:
            ChangeAvailabilityResponse
        """
        evse = {"id": evse_id, "connector_id": connector_id} if evse_id is not None else None
        logger.info(
            f"CSMS initiating ChangeAvailability to {station_id}: "
            f"status={operational_status}, evseId={evse_id}"
        )
        return await self.call(station_id, availability.ChangeAvailability.new_request(
            operational_status=operational_status,
            evse=evse,
        ))

    async def clear_display(self, station_id: str, message_id: int) -> display.ClearDisplayResponse:
        return await self.call(station_id, display.ClearDisplay.new_request(id=message_id))

    async def data_transfer(
        self,
        station_id: str,
        vendor_id: str,
        message_id: Optional[str] = None,
        payload: Any = None,
    ) -> data.DataTransferResponse:
        return await self.call(station_id, data.DataTransfer.new_request(
            vendor_id=vendor_id,
            message_id=message_id,
            data=payload,
        ))

    async def reserve_now(
        self,
        station_id: str,
        reservation_id: int,
        expiry_date_time: datetime,
        id_token: IdToken,
        **kwargs,
    ) -> reservation.ReserveNowResponse:
        """
        Send ReserveNow request to a charging station.

        Args:
            station_id: ID of the target charging station
            reservation_id: ID of the reservation
            expiry_date_time: datetime at which the reservation ends
            id_token: IdToken the reservation is made for
            **kwargs: connector_type, evse_id, group_id_token

        Returns:
            ReserveNowResponse
        """
        logger.info(
            f"CSMS initiating ReserveNow to {station_id}: "
            f"id={reservation_id}, expiry={expiry_date_time}"
        )
        return await self.call(station_id, reservation.ReserveNow.new_request(
            id=reservation_id,
            expiry_date_time=expiry_date_time,
            id_token=id_token,
            **kwargs,
        ))

    async def cancel_reservation(
        self, station_id: str, reservation_id: int
    ) -> reservation.CancelReservationResponse:
        return await self.call(
            station_id, reservation.CancelReservation.new_request(reservation_id=reservation_id)
        )

    async def request_start_transaction(
        self,
        station_id: str,
        remote_start_id: int,
        id_token: Union[IdToken, str],
        evse_id: int = None,
    ) -> remotecontrol.RequestStartTransactionResponse:
        """
        Send RequestStartTransaction request to a charging station.

        Args:
            station_id: ID of the target charging station
            remote_start_id: ID matching the TransactionEvent to this request
            id_token: IdToken, or a plain string sent as a Central token
            evse_id: Optional EVSE on which to start

        Returns:
            RequestStartTransactionResponse
        """
        if isinstance(id_token, str):
            id_token = {"id_token": id_token, "type": IdTokenType.CENTRAL}
        logger.info(
            f"CSMS initiating RequestStartTransaction to {station_id}: "
            f"remoteStartId={remote_start_id}, evseId={evse_id}"
        )
        return await self.call(station_id, remotecontrol.RequestStartTransaction.new_request(
            remote_start_id=remote_start_id,
            id_token=id_token,
            evse_id=evse_id,
        ))

    async def request_stop_transaction(
        self, station_id: str, transaction_id: str
    ) -> remotecontrol.RequestStopTransactionResponse:
        logger.info(
            f"CSMS initiating RequestStopTransaction to {station_id}: transactionId={transaction_id}"
        )
        return await self.call(
            station_id, remotecontrol.RequestStopTransaction.new_request(transaction_id=transaction_id)
        )

    async def unlock_connector(
        self, station_id: str, evse_id: int, connector_id: int
    ) -> remotecontrol.UnlockConnectorResponse:
        return await self.call(station_id, remotecontrol.UnlockConnector.new_request(
            evse_id=evse_id,
            connector_id=connector_id,
        ))
