import logging
from typing import Optional

from tello_native.models.video_frame import VideoFrame

logger = logging.getLogger(__name__)


class TelloVideoModel:
    """
    Reassembles H.264 access units from the Tello video stream.

    Every datagram starts with two bytes:

        payload[0]  … frame id, 8 bit, wraps
        payload[1]  … sub-packet sequence inside the frame
        payload[2:] … codec bytes

    • A frame must start at sequence 0; joining mid-frame discards the slice.
    • A frame is complete once a sub-packet with sequence >= 120 arrives.
    • A differing frame id mid-frame drops everything accumulated so far.
    • Frame ids below 100 that are smaller than the previous one count as a
      wrap; the exported id is `frame_id + 255 * overflow`.
    """

    HEADER_LEN = 2
    COMPLETE_SEQUENCE = 120
    WRAP_THRESHOLD = 100

    def __init__(self) -> None:
        self.last_frame_id = 0
        self.frame_overflow = 0
        self._active_fid: Optional[int] = None
        self._buffer = bytearray()

        # stats
        self.frames_ok = 0
        self.frames_dropped = 0

    @property
    def in_progress(self) -> bool:
        return self._active_fid is not None

    # ------------------------------------------------------------------ #
    def ingest_datagram(self, datagram: bytes) -> Optional[VideoFrame]:
        if len(datagram) < self.HEADER_LEN:
            logger.debug("[tello-video] runt datagram (%d bytes) ignored", len(datagram))
            if self.in_progress:
                self.abort()
            return None
        return self.ingest_chunk(
            stream_id=datagram[0],
            chunk_id=datagram[1],
            payload=datagram[self.HEADER_LEN:],
        )

    def ingest_chunk(self, *, stream_id: int, chunk_id: int, payload: bytes) -> Optional[VideoFrame]:
        """
        Feed one sub-packet. Returns a VideoFrame when the frame completes,
        None otherwise (more data needed, or the partial frame was dropped).
        """
        if not self.in_progress:
            self._track_frame_id(stream_id)
            if chunk_id != 0:
                # joined mid-frame
                return None
            self._active_fid = stream_id
            self._buffer = bytearray(payload)
            return None

        if stream_id != self._active_fid:
            logger.debug("[tello-video] frame %d interrupted by %d, dropping %d bytes",
                         self._active_fid, stream_id, len(self._buffer))
            self.frames_dropped += 1
            self._reset()
            return None

        self._buffer += payload
        if chunk_id < self.COMPLETE_SEQUENCE:
            return None

        frame = VideoFrame(self._active_fid + 255 * self.frame_overflow, self._buffer)
        self.frames_ok += 1
        logger.debug("[tello-video] frame %d OK (%d bytes)", frame.frame_id, frame.size)
        self._reset()
        return frame

    def abort(self) -> None:
        """Discard a partial frame (read failure on the socket)."""
        if self.in_progress:
            self.frames_dropped += 1
        self._reset()

    # ------------------------------------------------------------------ #
    def _track_frame_id(self, frame_id: int) -> None:
        if frame_id < self.WRAP_THRESHOLD and frame_id < self.last_frame_id:
            self.frame_overflow += 1
        self.last_frame_id = frame_id

    def _reset(self) -> None:
        self._active_fid = None
        self._buffer = bytearray()
