import logging
import socket
import threading
from typing import Optional

from tello_native.models.tello_video_model import TelloVideoModel
from tello_native.models.video_frame import VideoFrame
from tello_native.protocols.constants import DEFAULT_VIDEO_PORT, MAX_DATAGRAM

logger = logging.getLogger(__name__)


class TelloVideoProtocolAdapter:
    """
    Owns the dedicated video socket and pulls whole frames out of it.

    The first read of a cycle is non-blocking. Once a datagram starting a
    frame has been accepted the socket is switched to blocking reads (bounded
    by `read_timeout`) until the frame completes, desyncs or a read fails.
    """

    def __init__(self, video_port: int = DEFAULT_VIDEO_PORT, read_timeout: float = 1.0) -> None:
        self.video_port = video_port
        self.read_timeout = read_timeout
        self.model = TelloVideoModel()
        self._sock_lock = threading.Lock()
        self._sock = self.create_receiver_socket()
        logger.info("[tello-video] video socket on *:%d", self.port)

    def create_receiver_socket(self) -> socket.socket:
        """UDP socket bound to the local video port."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("0.0.0.0", self.video_port))
        sock.setblocking(False)
        return sock

    @property
    def port(self) -> int:
        return self._sock.getsockname()[1]

    def receive_frame(self) -> Optional[VideoFrame]:
        with self._sock_lock:
            try:
                self._sock.setblocking(False)
                datagram = self._sock.recv(MAX_DATAGRAM)
            except OSError:
                return None

            frame = self.model.ingest_datagram(datagram)
            if not self.model.in_progress:
                return frame

            try:
                self._sock.settimeout(self.read_timeout)
                while self.model.in_progress:
                    datagram = self._sock.recv(MAX_DATAGRAM)
                    frame = self.model.ingest_datagram(datagram)
                    if frame is not None:
                        return frame
                return None
            except OSError as e:
                logger.debug("[tello-video] read failed mid-frame: %s", e)
                self.model.abort()
                return None
            finally:
                self._restore_nonblocking()

    def _restore_nonblocking(self) -> None:
        try:
            self._sock.setblocking(False)
        except OSError:
            # closed while a frame was being read
            pass

    def stop(self) -> None:
        logger.info("[tello-video] stopping video adapter")
        with self._sock_lock:
            try:
                self._sock.close()
            except OSError:
                pass
