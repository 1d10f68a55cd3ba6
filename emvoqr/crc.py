"""CRC16-CCITT implementation."""
from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF


def checksum(data: bytes) -> int:
    """Compute CRC16-CCITT (poly 0x1021, init 0xFFFF) over raw octets."""

    crc = CRC16_INIT
    for octet in data:
        crc ^= octet << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ CRC16_POLY
            else:
                crc <<= 1
            crc &= 0xFFFF
    return crc


def to_utf8(data: str) -> bytes:
    """UTF-8 encode ``data``, replacing lone surrogates with U+FFFD."""

    # utf-16 round trip joins split surrogate pairs and replaces unpaired halves
    well_formed = data.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
    return well_formed.encode("utf-8")


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT for EMV payload strings as 4 uppercase hex digits."""

    return f"{checksum(to_utf8(data)):04X}"
