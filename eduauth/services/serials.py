# eduauth/services/serials.py
"""
7-character certificate serials.

A serial is the sequence number in base-36 (uppercase, zero-padded to six
characters) followed by one check character: the payload digits weighted
positionally by 7,3,1,7,3,1, summed, mod 36. The check catches most single
character transcription errors; it says nothing about whether a serial was
ever issued.
"""
from __future__ import annotations

import string

from eduauth.core.errors import InvalidFormat, SerialOverflowError

ALPHABET = string.digits + string.ascii_uppercase
WEIGHTS = (7, 3, 1, 7, 3, 1)
PAYLOAD_WIDTH = len(WEIGHTS)
SERIAL_LENGTH = PAYLOAD_WIDTH + 1
MAX_SEQUENCE = 36 ** PAYLOAD_WIDTH - 1

_ALLOWED = frozenset(ALPHABET + string.ascii_lowercase)

def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(ALPHABET[r])
    return "".join(reversed(digits))

def normalize_serial(serial: str) -> str:
    return (serial or "").strip().upper()

def checksum_char(payload: str) -> str:
    total = sum(int(ch, 36) * w for ch, w in zip(payload, WEIGHTS))
    return ALPHABET[total % 36]

def encode_serial(sequence_number: int) -> str:
    if sequence_number < 0:
        raise ValueError("sequence number must be non-negative")
    if sequence_number > MAX_SEQUENCE:
        raise SerialOverflowError(details={"sequence_number": sequence_number, "max": MAX_SEQUENCE})
    payload = _to_base36(sequence_number).rjust(PAYLOAD_WIDTH, "0")
    return payload + checksum_char(payload)

def validate_serial(serial: str) -> bool:
    """Structural check: 7 alphanumerics whose last one matches the checksum."""
    if not isinstance(serial, str) or len(serial) != SERIAL_LENGTH:
        return False
    # str.isalnum aceita dígitos unicode; aqui só ASCII
    if not all(ch in _ALLOWED for ch in serial):
        return False
    normalized = serial.upper()
    payload, check = normalized[:PAYLOAD_WIDTH], normalized[PAYLOAD_WIDTH]
    return checksum_char(payload) == check

def decode_serial(serial: str) -> int:
    normalized = normalize_serial(serial)
    if not validate_serial(normalized):
        raise InvalidFormat(details={"serial": serial})
    return int(normalized[:PAYLOAD_WIDTH], 36)
