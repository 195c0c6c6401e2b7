"""
CRC-16/CCITT-FALSE checksum engine.

The merchant-presented QR standard protects every payload with a 16-bit
CRC carried in the final field (tag 63). The checksum is computed over
every character preceding the checksum value, including the ``6304``
tag/length prefix.

Parameters:
- polynomial 0x1021
- initial register 0xFFFF
- no input or output reflection
- no final XOR

IMPORTANT:
- Python integers are unbounded. The register MUST be masked to 16 bits
  after every shift, not only on return.
"""

from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC16_MASK = 0xFFFF


def crc16_ccitt_false_int(data: str) -> int:
    """Return the CRC-16/CCITT-FALSE register for ``data`` as an integer."""
    crc = CRC16_INIT

    for ch in data:
        crc ^= (ord(ch) << 8) & CRC16_MASK

        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ CRC16_POLY) & CRC16_MASK
            else:
                crc = (crc << 1) & CRC16_MASK

    return crc & CRC16_MASK


def crc16_ccitt_false(data: str) -> str:
    """
    Compute the payload checksum as 4 uppercase hexadecimal digits.

    Each character contributes its code point as one byte. Payloads are
    ASCII by definition; characters outside 0-255 are not meaningful
    here and are rejected upstream by the integrity checks.

    Examples:
        >>> crc16_ccitt_false("")
        'FFFF'
        >>> crc16_ccitt_false("123456789")
        '29B1'
    """
    return f"{crc16_ccitt_false_int(data):04X}"
