"""Central configuration defaults for tanner_bp."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import List


@dataclass
class DecoderConfig:
    N: int = 96
    K: int = 40
    dv: int = 3
    dc: int = 6
    max_iterations: int = 40
    list_sizes: List[int] = field(default_factory=lambda: [1, 2, 4, 8])
    crc_poly: str = "0x17"  # CRC-4 (x^4 + x^2 + x + 1)
    crc_bits: int = 4
    ebno_sweep: List[float] = field(default_factory=lambda: [1.0, 4.0, 0.5])
    seed: int = 0


DEFAULTS = DecoderConfig()


def get_config() -> DecoderConfig:
    """Return a copy of the default configuration."""

    return copy.deepcopy(DEFAULTS)
