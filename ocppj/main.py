"""
Demo OCPP 1.6 central system.

Run with ``python -m ocppj.main``. Charge points connect to
ws://<host>:<port>/<charge point id> using the ocpp1.6 subprotocol.
"""
import asyncio
import sys

from loguru import logger

from ocppj import config
from ocppj.utils import utc_now
from ocppj.v16 import CentralSystem
from ocppj.v16 import core
from ocppj.v16.types import AuthorizationStatus, IdTagInfo

# Configure logging
logger.remove()
logger.add(sys.stderr, level=config.LOG_LEVEL)
logger.add(
    config.LOG_DIR / "ocppj.log",
    rotation="1 day",
    retention="7 days",
    level=config.LOG_LEVEL,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
)


class CoreHandler:
    """Answers the Core profile requests sent by charge points."""

    def on_boot_notification(self, charge_point_id, request):
        logger.info(
            f"Received boot notification from {charge_point_id}: "
            f"{request.charge_point_vendor} {request.charge_point_model}"
        )
        return core.BootNotificationConfirmation(
            current_time=utc_now(),
            interval=config.DEFAULT_HEARTBEAT_INTERVAL,
            status=core.RegistrationStatus.ACCEPTED,
        )

    def on_heartbeat(self, charge_point_id, request):
        logger.debug(f"Heartbeat from {charge_point_id}")
        return core.HeartbeatConfirmation(current_time=utc_now())

    def on_authorize(self, charge_point_id, request):
        logger.info(f"Authorize request from {charge_point_id} for idTag {request.id_tag}")
        return core.AuthorizeConfirmation(
            id_tag_info=IdTagInfo(status=AuthorizationStatus.ACCEPTED)
        )

    def on_status_notification(self, charge_point_id, request):
        logger.info(
            f"Status notification from {charge_point_id}: "
            f"connector {request.connector_id} is {request.status.value} ({request.error_code.value})"
        )
        return core.StatusNotificationConfirmation()


async def main():
    """Start the central system and serve until interrupted."""
    central_system = CentralSystem()
    central_system.set_core_handler(CoreHandler())
    central_system.set_new_peer_handler(lambda peer_id: logger.info(f"Charge point {peer_id} connected"))
    central_system.set_peer_disconnected_handler(
        lambda peer_id: logger.info(f"Charge point {peer_id} disconnected")
    )

    await central_system.start(config.PORT, config.LISTEN_PATH, config.HOST)
    logger.info(f"OCPP 1.6 central system started on ws://{config.HOST}:{config.PORT}")
    try:
        await asyncio.Future()
    finally:
        await central_system.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Central system stopped by user")
