from ocppj.v201 import availability, data, display, provisioning, remotecontrol, reservation

ALL_PROFILES = (
    provisioning.PROFILE,
    availability.PROFILE,
    display.PROFILE,
    data.PROFILE,
    reservation.PROFILE,
    remotecontrol.PROFILE,
)
