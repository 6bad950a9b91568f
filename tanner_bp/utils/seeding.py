"""Deterministic seeding helpers."""

from __future__ import annotations

import os
import random
from typing import Union

import numpy as np

SeedLike = Union[int, np.random.Generator, None]


def seed_all(seed: int) -> None:
    """Seed Python and NumPy global RNGs."""

    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return ``seed`` unchanged if it is a Generator, else a Generator seeded with it."""

    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


__all__ = ["seed_all", "make_rng", "SeedLike"]
