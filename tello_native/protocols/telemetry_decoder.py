"""
Payload decoders, selected by command id once the 9-byte header and the
CRC16 trailer have been stripped.

Short or otherwise malformed payloads raise DecodeError instead of reading
past the end of the buffer.
"""

import struct
from typing import Callable, Dict

from tello_native.exceptions import DecodeError
from tello_native.models.telemetry import (
    AltLimitInfo,
    FlightData,
    LightInfo,
    LogMessage,
    PackageData,
    UnknownData,
    VersionInfo,
    WifiInfo,
)
from tello_native.protocols.constants import CommandId

# height, north, east, ground speed, fly time | flags | imu cal | battery % |
# battery left | fly time left | flags | fly mode | throw timer | camera |
# motor state | flags | flags
FLIGHT_DATA_FORMAT = "<5hBBBhhBBBBBBB"
FLIGHT_DATA_LEN = struct.calcsize(FLIGHT_DATA_FORMAT)   # 24

LOG_HEADER_SKIP = 9


def _bit(value: int, pos: int) -> bool:
    return (value >> pos) & 0x1 != 0


def _require(data: bytes, n: int, what: str) -> None:
    if len(data) < n:
        raise DecodeError(f"{what}: need {n} bytes, got {len(data)}")


def decode_flight_data(data: bytes) -> FlightData:
    _require(data, FLIGHT_DATA_LEN, "flight data")
    (height, north, east, ground, fly_time,
     flags1, imu_cal, battery_pct, battery_left, fly_time_left,
     flags2, fly_mode, throw_timer, camera, motor,
     flags3, flags4) = struct.unpack_from(FLIGHT_DATA_FORMAT, data)

    return FlightData(
        height=height,
        north_speed=north,
        east_speed=east,
        ground_speed=ground,
        fly_time=fly_time,
        imu_state=_bit(flags1, 0),
        pressure_state=_bit(flags1, 1),
        down_visual_state=_bit(flags1, 2),
        power_state=_bit(flags1, 3),
        battery_state=_bit(flags1, 4),
        gravity_state=_bit(flags1, 5),
        wind_state=_bit(flags1, 7),
        imu_calibration_state=imu_cal,
        battery_percentage=battery_pct,
        drone_battery_left=battery_left,
        drone_fly_time_left=fly_time_left,
        em_sky=_bit(flags2, 0),
        em_ground=_bit(flags2, 1),
        em_open=_bit(flags2, 2),
        drone_hover=_bit(flags2, 3),
        outage_recording=_bit(flags2, 4),
        battery_low=_bit(flags2, 5),
        battery_lower=_bit(flags2, 6),
        factory_mode=_bit(flags2, 7),
        fly_mode=fly_mode,
        throw_fly_timer=throw_timer,
        camera_state=camera,
        electrical_machinery_state=motor,
        front_in=_bit(flags3, 0),
        front_out=_bit(flags3, 1),
        front_lsc=_bit(flags3, 2),
        temperature_height=_bit(flags4, 0),
    )


def decode_wifi_info(data: bytes) -> WifiInfo:
    _require(data, 2, "wifi info")
    return WifiInfo(strength=data[0], disturb=data[1])


def decode_light_info(data: bytes) -> LightInfo:
    _require(data, 1, "light info")
    return LightInfo(good=data[0])


def decode_version(data: bytes) -> VersionInfo:
    try:
        text = bytes(data[1:]).decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"version is not valid utf-8: {e}") from e
    return VersionInfo(version=text.strip("\x00"))


def decode_alt_limit(data: bytes) -> AltLimitInfo:
    _require(data, 3, "altitude limit")
    (limit,) = struct.unpack_from("<H", data, 1)
    return AltLimitInfo(limit=limit)


def decode_log_message(data: bytes) -> LogMessage:
    _require(data, LOG_HEADER_SKIP + 2, "log header")
    (log_id,) = struct.unpack_from("<H", data, LOG_HEADER_SKIP)
    body = bytes(data[LOG_HEADER_SKIP + 2:])
    end = body.find(b"\x00")
    if end >= 0:
        body = body[:end]
    try:
        message = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"log message is not valid utf-8: {e}") from e
    return LogMessage(id=log_id, message=message)


DECODERS: Dict[CommandId, Callable[[bytes], PackageData]] = {
    CommandId.FLIGHT_MSG: decode_flight_data,
    CommandId.WIFI_MSG: decode_wifi_info,
    CommandId.LIGHT_MSG: decode_light_info,
    CommandId.VERSION_MSG: decode_version,
    CommandId.ALT_LIMIT_MSG: decode_alt_limit,
    CommandId.LOG_HEADER_MSG: decode_log_message,
}


def decode_payload(cmd: CommandId, data: bytes) -> PackageData:
    """Interpret a non-empty payload; unknown ids come back as raw bytes."""
    decoder = DECODERS.get(cmd)
    if decoder is None:
        return UnknownData(raw=bytes(data))
    return decoder(data)
