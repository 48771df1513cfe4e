from enum import IntEnum
from typing import Final

START_OF_PACKET: Final = 0xCC

HEADER_LEN: Final = 9          # marker, length(2), crc8, type, cmd(2), seq(2)
TRAILER_LEN: Final = 2         # crc16
FRAME_OVERHEAD: Final = HEADER_LEN + TRAILER_LEN

DEFAULT_DRONE_IP: Final = "192.168.10.1"
DEFAULT_CONTROL_PORT: Final = 8889
DEFAULT_TELEMETRY_PORT: Final = 8890   # text-mode state records, not decoded here
DEFAULT_VIDEO_PORT: Final = 11111

MAX_DATAGRAM: Final = 1460

CONN_ACK_PREFIX: Final = b"conn_ack:"
CONN_REQ_PREFIX: Final = b"conn_req:"
UNKNOWN_COMMAND_PREFIX: Final = b"unknown command:"


class CommandId(IntEnum):
    """16-bit command ids. Values the firmware sends that are not listed map to UNDEFINED."""

    UNDEFINED = 0x0000
    SSID_MSG = 0x0011
    SSID_CMD = 0x0012
    SSID_PASSWORD_MSG = 0x0013
    SSID_PASSWORD_CMD = 0x0014
    WIFI_REGION_MSG = 0x0015
    WIFI_REGION_CMD = 0x0016
    WIFI_MSG = 0x001A
    VIDEO_ENCODER_RATE_CMD = 0x0020
    VIDEO_DYN_ADJ_RATE_CMD = 0x0021
    EIS_CMD = 0x0024
    VIDEO_START_CMD = 0x0025
    VIDEO_RATE_QUERY = 0x0028
    TAKE_PICTURE_CMD = 0x0030
    VIDEO_MODE_CMD = 0x0031
    VIDEO_RECORD_CMD = 0x0032
    EXPOSURE_CMD = 0x0034
    LIGHT_MSG = 0x0035
    JPEG_QUALITY_MSG = 0x0037
    ERROR1_MSG = 0x0043
    ERROR2_MSG = 0x0044
    VERSION_MSG = 0x0045
    TIME_CMD = 0x0046
    ACTIVATION_TIME_MSG = 0x0047
    LOADER_VERSION_MSG = 0x0049
    STICK_CMD = 0x0050
    TAKEOFF_CMD = 0x0054
    LAND_CMD = 0x0055
    FLIGHT_MSG = 0x0056
    ALT_LIMIT_CMD = 0x0058
    FLIP_CMD = 0x005C
    THROW_AND_GO_CMD = 0x005D
    PALM_LAND_CMD = 0x005E
    FILE_SIZE_CMD = 0x0062
    FILE_DATA_CMD = 0x0063
    FILE_COMPLETE_CMD = 0x0064
    SMART_VIDEO_CMD = 0x0080
    SMART_VIDEO_STATUS_MSG = 0x0081
    LOG_HEADER_MSG = 0x1050
    LOG_DATA_MSG = 0x1051
    LOG_CONFIG_MSG = 0x1052
    BOUNCE_CMD = 0x1053
    CALIBRATE_CMD = 0x1054
    LOW_BAT_THRESHOLD_CMD = 0x1055
    ALT_LIMIT_MSG = 0x1056
    LOW_BAT_THRESHOLD_MSG = 0x1057
    ATT_LIMIT_CMD = 0x1058
    ATT_LIMIT_MSG = 0x1059

    @classmethod
    def _missing_(cls, value):
        return cls.UNDEFINED


class PacketType(IntEnum):
    """Opaque per-command header byte, copied verbatim into the frame."""

    X48 = 0x48
    X50 = 0x50
    X60 = 0x60
    X68 = 0x68
    X70 = 0x70


class FlipDirection(IntEnum):
    FORWARD = 0
    LEFT = 1
    BACK = 2
    RIGHT = 3
    FORWARD_LEFT = 4
    BACK_LEFT = 5
    BACK_RIGHT = 6
    FORWARD_RIGHT = 7


class VideoMode(IntEnum):
    M960X720 = 0     # 4:3, wider field of view
    M1280X720 = 1    # 16:9, zoomed and crisper
