"""Client for the binary UDP protocol of the Ryze/DJI Tello."""

from tello_native.exceptions import DecodeError, ReceiverTakenError, TelloError
from tello_native.models.messages import (
    ConnectedResponse,
    Message,
    Package,
    Response,
    UnknownCommandResponse,
)
from tello_native.models.odometry import Odometry
from tello_native.models.rc_state import RCState
from tello_native.models.video_frame import VideoFrame
from tello_native.protocols.constants import CommandId, FlipDirection, PacketType, VideoMode
from tello_native.services.drone import Drone
from tello_native.services.message_pump import MessagePump
from tello_native.settings import Settings, configure_logging

__version__ = "0.1.0"

__all__ = [
    "CommandId",
    "ConnectedResponse",
    "DecodeError",
    "Drone",
    "FlipDirection",
    "Message",
    "MessagePump",
    "Odometry",
    "Package",
    "PacketType",
    "RCState",
    "ReceiverTakenError",
    "Response",
    "Settings",
    "TelloError",
    "UnknownCommandResponse",
    "VideoFrame",
    "VideoMode",
    "configure_logging",
]
