"""Tests for the Tello checksums."""

from tello_native.protocols.crc import crc16, crc8


class TestCrc8:
    """Header checksum over the first three frame bytes."""

    def test_takeoff_header(self):
        """Length 0x58 header yields 0x7c."""
        assert crc8(bytes([0xCC, 0x58, 0x00])) == 0x7C

    def test_land_header(self):
        """Length 0x60 header yields 0x27."""
        assert crc8(bytes([0xCC, 0x60, 0x00])) == 0x27

    def test_accepts_bytearray(self):
        """Mutable buffers are accepted."""
        assert crc8(bytearray([0xCC, 0x58, 0x00])) == 0x7C

    def test_result_fits_in_a_byte(self):
        """Any input gives an 8-bit value."""
        assert 0 <= crc8(b"\xff" * 40) <= 0xFF


class TestCrc16:
    """Frame checksum over everything before the trailer."""

    def test_takeoff_frame(self):
        """Known take-off frame body."""
        body = bytes.fromhex("cc58007c685400e401")
        assert crc16(body) == 0x16C2

    def test_land_frame(self):
        """Known land frame body."""
        body = bytes.fromhex("cc600027685500e50100")
        assert crc16(body) == 0xC7BA

    def test_single_bit_change_detected(self):
        """Flipping one payload bit changes the checksum."""
        body = bytearray.fromhex("cc600027685500e50100")
        before = crc16(body)
        body[-1] ^= 0x01
        assert crc16(body) != before
