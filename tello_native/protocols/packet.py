"""
Framing for the binary Tello protocol.

Frame layout (little-endian):

    [0]      0xCC                 start marker
    [1:3]    (payload_len+11)<<3  length, low 3 bits reserved
    [3]      crc8(frame[0:3])
    [4]      packet type
    [5:7]    command id
    [7:9]    sequence number
    [9:-2]   payload
    [-2:]    crc16(frame[:-2])
"""

import struct
import threading

from tello_native.exceptions import DecodeError
from tello_native.models.messages import (
    ConnectedResponse,
    Message,
    Package,
    UnknownCommandResponse,
)
from tello_native.models.telemetry import NoData
from tello_native.protocols.constants import (
    CONN_ACK_PREFIX,
    FRAME_OVERHEAD,
    HEADER_LEN,
    START_OF_PACKET,
    TRAILER_LEN,
    UNKNOWN_COMMAND_PREFIX,
    CommandId,
    PacketType,
)
from tello_native.protocols.crc import crc16, crc8
from tello_native.protocols.telemetry_decoder import decode_payload

# id follows the prefix after one separator byte
UNKNOWN_COMMAND_ID_OFFSET = len(UNKNOWN_COMMAND_PREFIX) + 1


class SequenceCounter:
    """16-bit sequence numbers, starting at 1 and wrapping at 0xFFFF."""

    def __init__(self, start: int = 1):
        self._next = start & 0xFFFF
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next = (self._next + 1) & 0xFFFF
            return value

    def peek(self) -> int:
        with self._lock:
            return self._next


class UdpCommand:
    """An outbound command: header fields plus a payload built with the write_* helpers."""

    def __init__(self, cmd: CommandId, pkt_type: PacketType, zero_sequence: bool = False):
        # raw id goes on the wire; ids missing from CommandId show up as UNDEFINED in logs only
        self.cmd_id = int(cmd) & 0xFFFF
        self.cmd = CommandId(self.cmd_id)
        self.pkt_type = PacketType(pkt_type)
        self.zero_sequence = zero_sequence
        self.payload = bytearray()

    @classmethod
    def with_zero_sequence(cls, cmd: CommandId, pkt_type: PacketType) -> "UdpCommand":
        return cls(cmd, pkt_type, zero_sequence=True)

    def write(self, data: bytes) -> None:
        self.payload += data

    def write_u8(self, value: int) -> None:
        self.payload.append(value & 0xFF)

    def write_u16(self, value: int) -> None:
        self.payload += struct.pack("<H", value & 0xFFFF)

    def write_u64(self, value: int) -> None:
        self.payload += struct.pack("<Q", value & 0xFFFFFFFFFFFFFFFF)

    def to_bytes(self, sequence: int) -> bytes:
        """Serialize with an explicit sequence number (ignored for zero-sequence commands)."""
        if self.zero_sequence:
            sequence = 0

        frame = bytearray()
        frame.append(START_OF_PACKET)
        frame += struct.pack("<H", ((len(self.payload) + FRAME_OVERHEAD) << 3) & 0xFFFF)
        frame.append(crc8(frame))
        frame.append(int(self.pkt_type))
        frame += struct.pack("<H", self.cmd_id)
        frame += struct.pack("<H", sequence & 0xFFFF)
        frame += self.payload
        frame += struct.pack("<H", crc16(frame))
        return bytes(frame)

    def __repr__(self):
        return (f"UdpCommand(cmd={self.cmd.name}(0x{self.cmd_id:04x}), "
                f"type=0x{int(self.pkt_type):02x}, "
                f"zero_seq={self.zero_sequence}, payload={self.payload.hex(' ')})")


def encode_command(command: UdpCommand, counter: SequenceCounter) -> bytes:
    """Frame `command`, drawing a sequence number from `counter` unless it is zero-sequence."""
    sequence = 0 if command.zero_sequence else counter.next()
    return command.to_bytes(sequence)


def decode_message(data: bytes, verify_crc: bool = False) -> Message:
    """
    Classify one datagram received on the command socket.

    Raises DecodeError for anything that is neither a binary frame nor one
    of the two ASCII replies.
    """
    data = bytes(data)
    if not data:
        raise DecodeError("invalid package: empty datagram")

    if data[0] == START_OF_PACKET:
        return _decode_frame(data, verify_crc)

    if data.startswith(CONN_ACK_PREFIX):
        return ConnectedResponse(text=data.decode("utf-8", errors="replace"))

    if data.startswith(UNKNOWN_COMMAND_PREFIX):
        if len(data) < UNKNOWN_COMMAND_ID_OFFSET + 2:
            raise DecodeError("invalid package: truncated unknown command reply")
        (cmd,) = struct.unpack_from("<H", data, UNKNOWN_COMMAND_ID_OFFSET)
        return UnknownCommandResponse(command=CommandId(cmd))

    raise DecodeError(f"invalid package {data[:5]!r}")


def _decode_frame(data: bytes, verify_crc: bool) -> Package:
    if len(data) < HEADER_LEN:
        raise DecodeError(f"invalid package: header needs {HEADER_LEN} bytes, got {len(data)}")

    length, _crc8, _pkt_type, cmd_raw, sequence = struct.unpack_from("<HBBHH", data, 1)
    size = (length >> 3) - FRAME_OVERHEAD
    if size < 0:
        raise DecodeError(f"invalid package: length field 0x{length:04x} below frame overhead")

    if verify_crc:
        _verify_crc16(data, HEADER_LEN + size)

    cmd = CommandId(cmd_raw)
    if size == 0:
        return Package(cmd=cmd, size=0, sequence=sequence, data=NoData())

    end = HEADER_LEN + size
    if len(data) < end:
        raise DecodeError(f"invalid package: {cmd.name} announces {size} payload bytes, "
                          f"got {len(data) - HEADER_LEN}")
    payload = data[HEADER_LEN:end]
    return Package(cmd=cmd, size=size, sequence=sequence, data=decode_payload(cmd, payload))


def _verify_crc16(data: bytes, body_len: int) -> None:
    if len(data) < body_len + TRAILER_LEN:
        raise DecodeError("invalid package: missing crc16 trailer")
    (received,) = struct.unpack_from("<H", data, body_len)
    expected = crc16(data[:body_len])
    if received != expected:
        raise DecodeError(f"crc16 mismatch: got 0x{received:04x}, expected 0x{expected:04x}")
