"""CRC utilities used to pick a codeword out of a decoded list."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def _poly_to_bits(poly: str) -> np.ndarray:
    if not poly:
        raise ValueError("CRC polynomial string must be non-empty")
    value = int(poly, 16)
    if value.bit_length() < 2:
        raise ValueError("Polynomial degree must be positive")
    return np.array([(value >> i) & 1 for i in reversed(range(value.bit_length()))], dtype=np.int8)


def _remainder(bits: np.ndarray, poly_bits: np.ndarray) -> np.ndarray:
    """Long division over GF(2); ``bits`` already carries the trailing register."""

    degree = poly_bits.size - 1
    buffer = bits.copy()
    for i in range(buffer.size - degree):
        if buffer[i]:
            buffer[i : i + degree + 1] ^= poly_bits
    return buffer[-degree:]


def attach_crc(msg_bits: np.ndarray, poly: str) -> np.ndarray:
    """Return ``msg_bits`` followed by its CRC parity bits."""

    msg_bits = np.asarray(msg_bits)
    if msg_bits.ndim != 1:
        raise ValueError("msg_bits must be a 1D array")
    msg_bits = msg_bits.astype(np.int8) & 1
    poly_bits = _poly_to_bits(poly)
    padded = np.concatenate([msg_bits, np.zeros(poly_bits.size - 1, dtype=np.int8)])
    return np.concatenate([msg_bits, _remainder(padded, poly_bits)])


def check_crc(msg_with_crc: np.ndarray, poly: str) -> bool:
    """True if ``msg_with_crc`` leaves a zero remainder."""

    msg_with_crc = np.asarray(msg_with_crc)
    if msg_with_crc.ndim != 1:
        raise ValueError("msg_with_crc must be a 1D array")
    poly_bits = _poly_to_bits(poly)
    if msg_with_crc.size <= poly_bits.size - 1:
        raise ValueError("Message too short for the provided CRC polynomial")
    return not _remainder(msg_with_crc.astype(np.int8) & 1, poly_bits).any()


def select_candidate(candidates: Sequence[np.ndarray], poly: str) -> dict:
    """Pick the first candidate passing the CRC; fall back to the first one."""

    if len(candidates) == 0:
        raise ValueError("candidates must be non-empty")
    best_index = 0
    crc_pass = False
    for idx, bits in enumerate(candidates):
        if check_crc(bits, poly):
            best_index = idx
            crc_pass = True
            break
    return {
        "best_index": best_index,
        "best_bits": candidates[best_index],
        "crc_pass": crc_pass,
    }


__all__ = ["attach_crc", "check_crc", "select_candidate"]
