import time


class VideoFrame:
    """A reassembled H.264 access unit received on the video socket."""

    def __init__(self, frame_id, data, format_type="h264", timestamp=None):
        self.frame_id = frame_id
        self.data = bytes(data)
        self.format = format_type
        self.timestamp = timestamp or time.time()
        self.size = len(self.data)

    def __eq__(self, other):
        if not isinstance(other, VideoFrame):
            return NotImplemented
        return self.frame_id == other.frame_id and self.data == other.data

    def __repr__(self):
        return f"VideoFrame(id={self.frame_id}, format={self.format}, size={self.size})"
