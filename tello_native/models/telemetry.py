from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FlightData:
    """
    Flight status report (command id 0x0056).

    Kinematic fields are signed 16-bit; the three status bytes are unpacked
    into booleans at fixed bit positions.
    """

    height: int
    north_speed: int
    east_speed: int
    ground_speed: int
    fly_time: int

    imu_state: bool
    pressure_state: bool
    down_visual_state: bool
    power_state: bool
    battery_state: bool
    gravity_state: bool
    wind_state: bool

    imu_calibration_state: int
    battery_percentage: int
    drone_battery_left: int
    drone_fly_time_left: int

    em_sky: bool
    em_ground: bool
    em_open: bool
    drone_hover: bool
    outage_recording: bool
    battery_low: bool
    battery_lower: bool
    factory_mode: bool

    fly_mode: int
    throw_fly_timer: int
    camera_state: int
    electrical_machinery_state: int

    front_in: bool
    front_out: bool
    front_lsc: bool
    temperature_height: bool


@dataclass(frozen=True)
class WifiInfo:
    strength: int
    disturb: int


@dataclass(frozen=True)
class LightInfo:
    good: int


@dataclass(frozen=True)
class LogMessage:
    id: int
    message: str


@dataclass(frozen=True)
class VersionInfo:
    version: str


@dataclass(frozen=True)
class AltLimitInfo:
    limit: int


@dataclass(frozen=True)
class NoData:
    """Frame without payload."""


@dataclass(frozen=True)
class UnknownData:
    """Well-framed payload of a command id we do not interpret."""

    raw: bytes


PackageData = Union[
    FlightData,
    WifiInfo,
    LightInfo,
    LogMessage,
    VersionInfo,
    AltLimitInfo,
    NoData,
    UnknownData,
]
