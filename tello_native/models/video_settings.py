import time
from dataclasses import dataclass, field

from tello_native.protocols.constants import VideoMode


@dataclass
class VideoSettings:
    port: int = 0
    enabled: bool = False
    mode: VideoMode = VideoMode.M960X720
    level: int = 1
    encoding_rate: int = 4
    last_video_poll: float = field(default_factory=time.time)
