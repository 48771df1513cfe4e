"""
Checksums used by the Tello flight controller.

Both are reflected CRCs with non-standard seeds, computed bit by bit:

  crc8   poly 0x31 (reflected 0x8C),     seed 0x77   - the 3 leading header bytes
  crc16  poly 0x1021 (reflected 0x8408), seed 0x3692 - the whole frame
"""

CRC8_POLY = 0x8C
CRC8_SEED = 0x77
CRC16_POLY = 0x8408
CRC16_SEED = 0x3692


def _reflected_crc(data: bytes, poly: int, seed: int) -> int:
    crc = seed
    for byte in bytes(data):
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
    return crc


def crc8(data: bytes) -> int:
    return _reflected_crc(data, CRC8_POLY, CRC8_SEED) & 0xFF


def crc16(data: bytes) -> int:
    return _reflected_crc(data, CRC16_POLY, CRC16_SEED) & 0xFFFF
