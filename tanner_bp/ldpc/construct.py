"""Random regular Tanner graph construction."""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from ..utils.seeding import SeedLike, make_rng
from .errors import InvalidDegreeConfiguration
from .graph import Edge, TannerGraph

logger = logging.getLogger(__name__)


def _check_degrees(length: int, variable_degree: int, check_degree: int) -> None:
    if length <= 0:
        raise ValueError("code length must be positive")
    if variable_degree <= 0 or check_degree <= 0:
        raise InvalidDegreeConfiguration("node degrees must be positive")
    if length * variable_degree % check_degree != 0:
        raise InvalidDegreeConfiguration(
            f"N*dv = {length * variable_degree} is not divisible by dc = {check_degree}"
        )


def create_random_edges(
    length: int,
    variable_degree: int,
    check_degree: int,
    rng: SeedLike = None,
) -> List[Edge]:
    """Pair ``length * variable_degree`` shuffled variable sockets with check sockets.

    Every variable node ends up with exactly ``variable_degree`` edges and every
    check node with exactly ``check_degree``. Repeated pairs are kept.
    """

    _check_degrees(length, variable_degree, check_degree)
    rng = make_rng(rng)

    sockets = np.arange(length * variable_degree) // variable_degree
    rng.shuffle(sockets)
    checks = np.arange(sockets.size) // check_degree
    return [Edge(int(v), int(c)) for v, c in zip(sockets, checks)]


def construct_code(
    code_length: int,
    information_bit_size: int,
    variable_degree: int,
    check_degree: int,
    rng: SeedLike = None,
    *,
    strict: bool = False,
) -> TannerGraph:
    """Build a random (dv, dc)-regular code of length ``code_length``.

    Bits ``[0, K)`` carry information and ``[K, N - M)`` are frozen, where
    ``M = N * dv / dc`` is the number of checks. Positions from ``N - M`` on are
    left unlabeled. With ``strict`` a ``K`` above ``N - M`` is rejected.
    """

    _check_degrees(code_length, variable_degree, check_degree)
    if information_bit_size < 0:
        raise ValueError("information_bit_size must be non-negative")
    if information_bit_size > code_length:
        raise ValueError("information_bit_size cannot exceed code_length")

    num_checks = code_length * variable_degree // check_degree
    original_info_bit_size = code_length - num_checks
    if information_bit_size > original_info_bit_size:
        if strict:
            raise InvalidDegreeConfiguration(
                f"K = {information_bit_size} exceeds design dimension {original_info_bit_size}"
            )
        logger.warning(
            "K=%d exceeds design dimension %d; no bits will be frozen",
            information_bit_size,
            original_info_bit_size,
        )

    information = range(information_bit_size)
    frozen = range(information_bit_size, original_info_bit_size)
    edges = create_random_edges(code_length, variable_degree, check_degree, rng)

    logger.debug(
        "constructed (%d,%d)-regular graph: N=%d checks=%d info=%d frozen=%d",
        variable_degree,
        check_degree,
        code_length,
        num_checks,
        len(information),
        len(frozen),
    )
    return TannerGraph(code_length, edges, information, frozen, num_checks=num_checks)


__all__ = ["construct_code", "create_random_edges"]
