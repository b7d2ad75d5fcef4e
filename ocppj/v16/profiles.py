from ocppj.v16 import core, firmware, localauth, remotetrigger, reservation, smartcharging

ALL_PROFILES = (
    core.PROFILE,
    smartcharging.PROFILE,
    reservation.PROFILE,
    remotetrigger.PROFILE,
    firmware.PROFILE,
    localauth.PROFILE,
)
