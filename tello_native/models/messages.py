from dataclasses import dataclass
from typing import Union

from tello_native.models.telemetry import PackageData
from tello_native.models.video_frame import VideoFrame
from tello_native.protocols.constants import CommandId


@dataclass(frozen=True)
class Package:
    """A binary frame received on the command socket, header stripped."""

    cmd: CommandId
    size: int
    sequence: int
    data: PackageData


@dataclass(frozen=True)
class ConnectedResponse:
    """`conn_ack:` reply to a connect request."""

    text: str


@dataclass(frozen=True)
class UnknownCommandResponse:
    """`unknown command:` reply naming the rejected id."""

    command: CommandId


Response = Union[ConnectedResponse, UnknownCommandResponse]

# Everything Drone.poll() can hand back
Message = Union[Package, ConnectedResponse, UnknownCommandResponse, VideoFrame]
