"""
The Tello protocol engine.

There is no background thread: the caller drives everything by invoking
`poll()` at 20 Hz or faster (35 Hz gives smooth video). Each poll

  1. re-sends the RC stick state every 33 ms (the vehicle hover-holds
     without a steady stick heartbeat),
  2. while video is enabled, requests a key frame every second and tries to
     pull one reassembled frame from the video socket,
  3. otherwise reads one datagram from the command socket, performs the
     protocol housekeeping it requires (log acks, time sync, the metadata
     queries after the third flight status) and returns it.

All command methods are fire-and-forget and return True when the datagram
was handed to the OS.
"""

import logging
import struct
import threading
import time
from datetime import datetime
from typing import Optional

from tello_native.exceptions import DecodeError
from tello_native.models.drone_meta import DroneMeta
from tello_native.models.messages import ConnectedResponse, Message, Package
from tello_native.models.odometry import Odometry
from tello_native.models.rc_state import RCState, pack_stick_axes, stick_axes_bytes
from tello_native.models.telemetry import LogMessage
from tello_native.models.video_settings import VideoSettings
from tello_native.protocols.constants import (
    CONN_REQ_PREFIX,
    DEFAULT_CONTROL_PORT,
    DEFAULT_DRONE_IP,
    DEFAULT_VIDEO_PORT,
    CommandId,
    FlipDirection,
    PacketType,
    VideoMode,
)
from tello_native.protocols.packet import UdpCommand, decode_message
from tello_native.protocols.tello_protocol_adapter import TelloProtocolAdapter
from tello_native.protocols.tello_video_protocol import TelloVideoProtocolAdapter
from tello_native.settings import Settings

logger = logging.getLogger(__name__)


class Drone:
    """Client for the binary Tello protocol (the one the official app speaks)."""

    STICK_INTERVAL = 0.033          # seconds between stick heartbeats
    KEY_FRAME_INTERVAL = 1.0        # seconds between I-frame requests
    METADATA_QUERY_AT = 3           # flight status count that triggers the queries
    TAKE_OFF_HEIGHT = 100           # optimistic z estimate after take-off

    def __init__(
        self,
        drone_ip: str = DEFAULT_DRONE_IP,
        control_port: int = DEFAULT_CONTROL_PORT,
        local_port: int = DEFAULT_CONTROL_PORT,
        *,
        video_read_timeout: float = 1.0,
        verify_crc: bool = False,
        debug_packets: bool = False,
    ) -> None:
        self.protocol = TelloProtocolAdapter(
            drone_ip, control_port, local_port, debug=debug_packets,
        )
        self.video_protocol: Optional[TelloVideoProtocolAdapter] = None
        self.video_read_timeout = video_read_timeout
        self.verify_crc = verify_crc

        self.video = VideoSettings()
        self.rc_state = RCState()
        self.drone_meta = DroneMeta()
        self.odometry = Odometry()

        self.status_counter = 0
        self._last_stick_ts = time.time()
        self._poll_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Drone":
        settings = settings or Settings.from_env()
        return cls(
            settings.drone_ip,
            settings.control_port,
            settings.local_port,
            video_read_timeout=settings.video_read_timeout,
            verify_crc=settings.verify_crc,
            debug_packets=settings.debug_packets,
        )

    # ────────── connection ────────── #
    def connect(self, video_port: int = DEFAULT_VIDEO_PORT) -> bool:
        """
        Ask the vehicle to start talking to us and to stream video to
        `video_port`, and bind the local video socket there.
        """
        request = CONN_REQ_PREFIX + struct.pack("<H", video_port)
        self.video.port = video_port
        self.start_video()

        with self._poll_lock:
            if self.video_protocol is None or self.video_protocol.video_port != video_port:
                if self.video_protocol is not None:
                    self.video_protocol.stop()
                    self.video_protocol = None
                try:
                    self.video_protocol = TelloVideoProtocolAdapter(video_port,
                                                                    self.video_read_timeout)
                except OSError as e:
                    logger.warning("[tello] cannot bind video port %d: %s", video_port, e)
                    return False

        logger.info("[tello] connect request sent (video port %d)", video_port)
        return self.protocol.send_raw(request)

    def send(self, command: UdpCommand) -> bool:
        return self.protocol.send(command)

    def stop(self) -> None:
        # waits for an in-flight poll() so sockets are not closed under it
        with self._poll_lock:
            if self.video_protocol is not None:
                self.video_protocol.stop()
                self.video_protocol = None
            self.protocol.stop()

    # ────────── poll loop ────────── #
    def poll(self) -> Optional[Message]:
        with self._poll_lock:
            now = time.time()

            if now - self._last_stick_ts >= self.STICK_INTERVAL:
                self.send_stick(*self.rc_state.get_stick_parameter())
                self._last_stick_ts = now

            if self.video.enabled:
                if now - self.video.last_video_poll >= self.KEY_FRAME_INTERVAL:
                    self.poll_key_frame()
                if self.video_protocol is not None:
                    frame = self.video_protocol.receive_frame()
                    if frame is not None:
                        return frame

            data = self.protocol.receive()
            if data is None:
                return None
            try:
                msg = decode_message(data, verify_crc=self.verify_crc)
            except DecodeError as e:
                logger.debug("[tello] dropped datagram: %s", e)
                return None

            self._handle_message(msg)
            return msg

    def _handle_message(self, msg: Message) -> None:
        if isinstance(msg, ConnectedResponse):
            logger.info("[tello] connected: %r", msg.text)
            self.status_counter = 0
            return
        if not isinstance(msg, Package):
            return

        if isinstance(msg.data, LogMessage):
            self.drone_meta.update(msg.data)
            self.send_ack_log(msg.data.id)
        elif msg.cmd == CommandId.TIME_CMD:
            self.send_date_time()
        elif msg.cmd == CommandId.FLIGHT_MSG:
            self.drone_meta.update(msg.data)
            self.status_counter += 1
            if self.status_counter == self.METADATA_QUERY_AT:
                self._query_metadata()
        else:
            self.drone_meta.update(msg.data)

    def _query_metadata(self) -> None:
        logger.info("[tello] link is up, querying vehicle settings")
        self.get_version()
        self.set_video_bitrate(4)
        self.get_alt_limit()
        self.get_battery_threshold()
        self.get_att_angle()
        self.get_region()
        self.set_exposure(2)

    def send_ack_log(self, log_id: int) -> bool:
        cmd = UdpCommand.with_zero_sequence(CommandId.LOG_HEADER_MSG, PacketType.X50)
        cmd.write_u16(log_id)
        return self.send(cmd)

    # ────────── flight commands ────────── #
    def start_engines(self) -> None:
        self.rc_state.start_engines()

    def take_off(self) -> bool:
        self.odometry.z += self.TAKE_OFF_HEIGHT
        return self.send(UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68))

    def throw_and_go(self) -> bool:
        cmd = UdpCommand(CommandId.THROW_AND_GO_CMD, PacketType.X48)
        cmd.write_u8(0)
        return self.send(cmd)

    def land(self) -> bool:
        cmd = UdpCommand(CommandId.LAND_CMD, PacketType.X68)
        cmd.write_u8(0x00)
        return self.send(cmd)

    def stop_land(self) -> bool:
        cmd = UdpCommand(CommandId.LAND_CMD, PacketType.X68)
        cmd.write_u8(0x00)
        return self.send(cmd)

    def palm_land(self) -> bool:
        cmd = UdpCommand(CommandId.PALM_LAND_CMD, PacketType.X68)
        cmd.write_u8(0)
        return self.send(cmd)

    def flip(self, direction: FlipDirection) -> bool:
        cmd = UdpCommand.with_zero_sequence(CommandId.FLIP_CMD, PacketType.X70)
        cmd.write_u8(int(direction))
        return self.send(cmd)

    def bounce(self) -> bool:
        cmd = UdpCommand(CommandId.BOUNCE_CMD, PacketType.X68)
        cmd.write_u8(0x30)
        return self.send(cmd)

    def bounce_stop(self) -> bool:
        cmd = UdpCommand(CommandId.BOUNCE_CMD, PacketType.X68)
        cmd.write_u8(0x31)
        return self.send(cmd)

    # ────────── settings / queries ────────── #
    def get_version(self) -> bool:
        return self.send(UdpCommand(CommandId.VERSION_MSG, PacketType.X48))

    def get_alt_limit(self) -> bool:
        return self.send(UdpCommand(CommandId.ALT_LIMIT_MSG, PacketType.X68))

    def set_alt_limit(self, limit: int) -> bool:
        cmd = UdpCommand(CommandId.ALT_LIMIT_CMD, PacketType.X68)
        cmd.write_u8(limit)
        cmd.write_u8(0)
        return self.send(cmd)

    def get_att_angle(self) -> bool:
        return self.send(UdpCommand(CommandId.ATT_LIMIT_MSG, PacketType.X68))

    def set_att_angle(self, limit: float = 10.0) -> bool:
        # upper half of the float32 attitude limit
        raw = struct.pack("<f", limit)
        cmd = UdpCommand(CommandId.ATT_LIMIT_CMD, PacketType.X68)
        cmd.write_u8(0)
        cmd.write_u8(0)
        cmd.write(raw[2:4])
        return self.send(cmd)

    def get_battery_threshold(self) -> bool:
        return self.send(UdpCommand(CommandId.LOW_BAT_THRESHOLD_MSG, PacketType.X68))

    def set_battery_threshold(self, threshold: int) -> bool:
        cmd = UdpCommand(CommandId.LOW_BAT_THRESHOLD_CMD, PacketType.X68)
        cmd.write_u8(threshold)
        return self.send(cmd)

    def get_region(self) -> bool:
        return self.send(UdpCommand(CommandId.WIFI_REGION_CMD, PacketType.X48))

    # ────────── sticks & time ────────── #
    def send_stick(self, pitch: float, nick: float, roll: float, yaw: float, fast: bool) -> bool:
        """
        pitch  up / down         -1 … 1
        nick   forward / back    -1 … 1
        roll   right / left      -1 … 1
        yaw    cw / ccw          -1 … 1
        """
        cmd = UdpCommand.with_zero_sequence(CommandId.STICK_CMD, PacketType.X60)
        cmd.write(stick_axes_bytes(pack_stick_axes(pitch, nick, roll, yaw, fast)))
        return self.send(self.add_time(cmd))

    def send_date_time(self) -> bool:
        return self.send(self.add_date_time(UdpCommand(CommandId.TIME_CMD, PacketType.X50)))

    @staticmethod
    def add_time(command: UdpCommand, now: Optional[datetime] = None) -> UdpCommand:
        now = now or datetime.now()
        command.write_u8(now.hour)
        command.write_u8(now.minute)
        command.write_u8(now.second)
        command.write_u16(now.microsecond // 1000)
        return command

    @staticmethod
    def add_date_time(command: UdpCommand, now: Optional[datetime] = None) -> UdpCommand:
        now = now or datetime.now()
        command.write_u8(0)
        for value in (now.year, now.month, now.day, now.hour, now.minute, now.second,
                      now.microsecond // 1000):
            command.write_u16(value)
        return command

    # ────────── video ────────── #
    def start_video(self) -> bool:
        """Request the SPS/PPS info for the video stream; also serves as key-frame request."""
        self.video.enabled = True
        self.video.last_video_poll = time.time()
        return self.send(UdpCommand.with_zero_sequence(CommandId.VIDEO_START_CMD, PacketType.X60))

    def poll_key_frame(self) -> bool:
        return self.start_video()

    def set_video_mode(self, mode: VideoMode) -> bool:
        """960x720 (4:3, wider) or 1280x720 (16:9, crisper)."""
        self.video.mode = VideoMode(mode)
        cmd = UdpCommand.with_zero_sequence(CommandId.VIDEO_START_CMD, PacketType.X68)
        cmd.write_u8(int(mode))
        return self.send(cmd)

    def set_exposure(self, level: int) -> bool:
        """Camera exposure level 0, 1 or 2."""
        self.video.level = level
        cmd = UdpCommand(CommandId.EXPOSURE_CMD, PacketType.X48)
        cmd.write_u8(level)
        return self.send(cmd)

    def set_video_bitrate(self, rate: int) -> bool:
        self.video.encoding_rate = rate
        cmd = UdpCommand(CommandId.VIDEO_ENCODER_RATE_CMD, PacketType.X68)
        cmd.write_u8(rate)
        return self.send(cmd)

    def take_picture(self) -> bool:
        return self.send(UdpCommand(CommandId.TAKE_PICTURE_CMD, PacketType.X68))
