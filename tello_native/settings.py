import logging
import os
from dataclasses import dataclass
from typing import Optional

import dotenv

from tello_native.protocols.constants import (
    DEFAULT_CONTROL_PORT,
    DEFAULT_DRONE_IP,
    DEFAULT_VIDEO_PORT,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, normally read from the environment / a .env file."""

    drone_ip: str = DEFAULT_DRONE_IP
    control_port: int = DEFAULT_CONTROL_PORT
    local_port: int = DEFAULT_CONTROL_PORT
    video_port: int = DEFAULT_VIDEO_PORT
    video_read_timeout: float = 1.0
    verify_crc: bool = False
    debug_packets: bool = False
    poll_rate: float = 35.0

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> "Settings":
        if load_dotenv:
            dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
        return cls(
            drone_ip=os.getenv("TELLO_DRONE_IP", DEFAULT_DRONE_IP),
            control_port=int(os.getenv("TELLO_CONTROL_PORT", DEFAULT_CONTROL_PORT)),
            local_port=int(os.getenv("TELLO_LOCAL_PORT", DEFAULT_CONTROL_PORT)),
            video_port=int(os.getenv("TELLO_VIDEO_PORT", DEFAULT_VIDEO_PORT)),
            video_read_timeout=float(os.getenv("TELLO_VIDEO_READ_TIMEOUT", "1.0")),
            verify_crc=_env_flag("TELLO_VERIFY_CRC"),
            debug_packets=_env_flag("TELLO_DEBUG_PACKETS"),
            poll_rate=float(os.getenv("TELLO_POLL_RATE", "35.0")),
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Basic stdlib logging setup. Set LOG_LEVEL=DEBUG to see per-packet logs."""
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
    )
