"""Tests for frame encoding and datagram classification."""

import struct
import threading

import pytest

from tello_native.exceptions import DecodeError
from tello_native.models.messages import ConnectedResponse, Package, UnknownCommandResponse
from tello_native.models.telemetry import NoData, UnknownData, WifiInfo
from tello_native.protocols.constants import CommandId, PacketType
from tello_native.protocols.crc import crc8
from tello_native.protocols.packet import (
    SequenceCounter,
    UdpCommand,
    decode_message,
    encode_command,
)

from conftest import parse_frame


class TestUdpCommand:
    """Outbound framing."""

    def test_takeoff_matches_capture(self):
        """Take-off with sequence 0x01e4 matches a captured frame."""
        cmd = UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68)
        assert cmd.to_bytes(0x01E4) == bytes.fromhex("cc58007c685400e401c216")

    def test_land_matches_capture(self):
        """Land with one zero payload byte matches a captured frame."""
        cmd = UdpCommand(CommandId.LAND_CMD, PacketType.X68)
        cmd.write_u8(0x00)
        assert cmd.to_bytes(0x01E5) == bytes.fromhex("cc600027685500e50100bac7")

    def test_length_field(self):
        """Length field is (payload + 11) << 3 and the frame is that long."""
        cmd = UdpCommand(CommandId.STICK_CMD, PacketType.X60)
        cmd.write(bytes(11))
        frame = cmd.to_bytes(7)
        (length,) = struct.unpack_from("<H", frame, 1)
        assert length == (11 + 11) << 3
        assert len(frame) == 22

    def test_header_crc_depends_only_on_length(self):
        """Same payload length gives the same header checksum."""
        a = UdpCommand(CommandId.FLIP_CMD, PacketType.X70)
        a.write_u8(1)
        b = UdpCommand(CommandId.EXPOSURE_CMD, PacketType.X48)
        b.write_u8(2)
        fa, fb = a.to_bytes(1), b.to_bytes(999)
        assert fa[3] == fb[3] == crc8(fa[:3])

    def test_zero_sequence_ignores_argument(self):
        """Zero-sequence commands always carry sequence 0."""
        cmd = UdpCommand.with_zero_sequence(CommandId.VIDEO_START_CMD, PacketType.X60)
        assert parse_frame(cmd.to_bytes(1234))["seq"] == 0

    def test_write_helpers_little_endian(self):
        """u16 and u64 are written little-endian."""
        cmd = UdpCommand(CommandId.TIME_CMD, PacketType.X50)
        cmd.write_u16(0x1234)
        cmd.write_u64(1)
        assert bytes(cmd.payload) == b"\x34\x12" + b"\x01" + bytes(7)

    def test_unlisted_command_id_encoded_verbatim(self):
        """Ids missing from CommandId still go on the wire unchanged."""
        cmd = UdpCommand(0x0099, PacketType.X68)
        frame = cmd.to_bytes(1)
        assert frame[5:7] == b"\x99\x00"
        assert cmd.cmd_id == 0x0099
        assert "0x0099" in repr(cmd)

    def test_unlisted_command_id_checksummed(self):
        """Such frames carry a valid checksum and decode as UNDEFINED."""
        frame = UdpCommand(0x0099, PacketType.X68).to_bytes(1)
        assert decode_message(frame, verify_crc=True).cmd == CommandId.UNDEFINED
        assert frame != UdpCommand(CommandId.UNDEFINED, PacketType.X68).to_bytes(1)


class TestSequenceCounter:
    """Sequence numbering for outbound commands."""

    def test_starts_at_one_and_increments(self):
        """First frames carry 1, 2, 3."""
        counter = SequenceCounter()
        seqs = [parse_frame(encode_command(UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68),
                                           counter))["seq"] for _ in range(3)]
        assert seqs == [1, 2, 3]

    def test_zero_sequence_does_not_consume(self):
        """Zero-sequence frames leave the counter untouched."""
        counter = SequenceCounter()
        encode_command(UdpCommand.with_zero_sequence(CommandId.STICK_CMD, PacketType.X60), counter)
        assert counter.peek() == 1

    def test_wraps_at_16_bits(self):
        """0xFFFF is followed by 0."""
        counter = SequenceCounter(start=0xFFFF)
        assert counter.next() == 0xFFFF
        assert counter.next() == 0

    def test_unique_across_threads(self):
        """Concurrent callers never share a number."""
        counter = SequenceCounter()
        seen = []
        lock = threading.Lock()

        def worker():
            local = [counter.next() for _ in range(500)]
            with lock:
                seen.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(seen) == len(set(seen)) == 2000


class TestDecodeMessage:
    """Inbound classification."""

    def test_frame_roundtrip(self):
        """A framed wifi report decodes to a Package."""
        cmd = UdpCommand(CommandId.WIFI_MSG, PacketType.X48)
        cmd.write(bytes([90, 3]))
        msg = decode_message(cmd.to_bytes(42))
        assert msg == Package(cmd=CommandId.WIFI_MSG, size=2, sequence=42,
                              data=WifiInfo(strength=90, disturb=3))

    def test_empty_payload_is_no_data(self):
        """Size zero yields NoData."""
        msg = decode_message(UdpCommand(CommandId.TIME_CMD, PacketType.X50).to_bytes(3))
        assert msg.size == 0
        assert msg.data == NoData()

    def test_uninterpreted_command_keeps_raw_bytes(self):
        """Unknown payload ids come back verbatim."""
        cmd = UdpCommand(CommandId.JPEG_QUALITY_MSG, PacketType.X48)
        cmd.write(b"\x01\x02")
        assert decode_message(cmd.to_bytes(1)).data == UnknownData(raw=b"\x01\x02")

    def test_unlisted_command_id_maps_to_undefined(self):
        """Ids outside the table decode as UNDEFINED."""
        frame = bytearray(UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68).to_bytes(1))
        frame[5:7] = struct.pack("<H", 0x7777)
        assert decode_message(bytes(frame)).cmd == CommandId.UNDEFINED

    def test_conn_ack(self):
        """conn_ack text becomes a ConnectedResponse."""
        assert decode_message(b"conn_ack:\x67\x2b") == ConnectedResponse(text="conn_ack:g+")

    def test_unknown_command_reply(self):
        """The rejected id is read after the prefix and one separator byte."""
        data = b"unknown command:" + b" " + struct.pack("<H", 0x0054)
        assert decode_message(data) == UnknownCommandResponse(command=CommandId.TAKEOFF_CMD)

    def test_truncated_unknown_command_reply(self):
        """Missing id raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_message(b"unknown command: ")

    @pytest.mark.parametrize("data", [b"", b"hello", b"\xcc\x58"])
    def test_invalid_datagrams(self, data):
        """Garbage, empty and short frames are rejected."""
        with pytest.raises(DecodeError):
            decode_message(data)

    def test_length_below_overhead(self):
        """A length field smaller than the framing overhead is rejected."""
        frame = bytearray(UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68).to_bytes(1))
        frame[1:3] = struct.pack("<H", 5 << 3)
        with pytest.raises(DecodeError):
            decode_message(bytes(frame))

    def test_truncated_payload(self):
        """A payload shorter than announced is rejected."""
        cmd = UdpCommand(CommandId.WIFI_MSG, PacketType.X48)
        cmd.write(bytes([90, 3]))
        with pytest.raises(DecodeError):
            decode_message(cmd.to_bytes(1)[:10])

    def test_crc_not_checked_by_default(self):
        """A bad trailer passes unless verification is on."""
        frame = bytearray(UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68).to_bytes(1))
        frame[-1] ^= 0xFF
        assert decode_message(bytes(frame)).cmd == CommandId.TAKEOFF_CMD
        with pytest.raises(DecodeError):
            decode_message(bytes(frame), verify_crc=True)

    def test_crc_verification_accepts_good_frame(self):
        """Correct trailers pass verification."""
        frame = UdpCommand(CommandId.TAKEOFF_CMD, PacketType.X68).to_bytes(1)
        assert decode_message(frame, verify_crc=True).sequence == 1
