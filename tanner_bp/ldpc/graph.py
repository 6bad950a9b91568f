"""Tanner graph model: variable nodes, check nodes and the edge list.

Each node keeps its adjacent edges in a fixed local-slot order (ascending
global edge id) and stores the latest incoming message per slot in a
pre-allocated array. Slots are resolved once when the graph is built.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Edge:
    variable_node_index: int
    check_node_index: int


def ambiguous_bit_count(list_size: int) -> int:
    """Return ``floor(log2(list_size))``."""

    if list_size < 1:
        raise ValueError("list_size must be >= 1")
    return int(list_size).bit_length() - 1


def _group_edges(node_of_edge: np.ndarray, num_nodes: int) -> List[np.ndarray]:
    if num_nodes == 0:
        return []
    order = np.argsort(node_of_edge, kind="stable")
    counts = np.bincount(node_of_edge, minlength=num_nodes)
    return np.split(order, np.cumsum(counts)[:-1])


class VariableNode:
    """One transmitted symbol position."""

    def __init__(self, edges: np.ndarray, is_frozen: bool = False) -> None:
        self.edges = np.asarray(edges, dtype=np.int64)
        self.incoming = np.zeros(self.edges.size, dtype=np.float64)
        self.channel_llr = 0.0
        self.is_frozen = bool(is_frozen)

    @property
    def degree(self) -> int:
        return int(self.edges.size)

    def set_is_frozen(self, frozen: bool) -> None:
        self.is_frozen = bool(frozen)

    def set_channel_llr(self, llr: float) -> None:
        self.channel_llr = float(llr)

    def receive(self, messages: np.ndarray) -> None:
        self.incoming[:] = messages

    def clear(self) -> None:
        self.channel_llr = 0.0
        self.incoming.fill(0.0)

    def initial_message(self) -> float:
        """Message sent before any check node has spoken (+inf when frozen)."""

        if self.is_frozen:
            return math.inf
        return self.channel_llr

    def calc_message(self, exclude: Optional[int] = None) -> float:
        """Channel LLR plus every incoming message except slot ``exclude``.

        The first infinite message met (in slot order) is returned as is.
        """

        if self.is_frozen:
            return math.inf
        total = self.channel_llr
        for slot, message in enumerate(self.incoming):
            if slot == exclude:
                continue
            if math.isinf(message):
                return float(message)
            total += message
        return float(total)

    def calc_messages(self) -> np.ndarray:
        """Outgoing message for every slot at once, each excluding its own input."""

        if self.is_frozen:
            return np.full(self.degree, np.inf)
        incoming = self.incoming
        infinite = np.flatnonzero(np.isinf(incoming))
        if infinite.size == 0:
            return self.channel_llr + (incoming.sum() - incoming)

        first = infinite[0]
        out = np.full(self.degree, incoming[first])
        if infinite.size > 1:
            out[first] = incoming[infinite[1]]
        else:
            out[first] = self.channel_llr + np.delete(incoming, first).sum()
        return out

    def marginalize(self) -> float:
        return self.calc_message(None)


class CheckNode:
    """One parity constraint."""

    def __init__(self, edges: np.ndarray) -> None:
        self.edges = np.asarray(edges, dtype=np.int64)
        self.incoming = np.zeros(self.edges.size, dtype=np.float64)

    @property
    def degree(self) -> int:
        return int(self.edges.size)

    def receive(self, messages: np.ndarray) -> None:
        self.incoming[:] = messages

    def clear(self) -> None:
        self.incoming.fill(0.0)

    def calc_message(self, exclude: Optional[int] = None) -> float:
        """``2 * atanh`` of the product of ``tanh(m / 2)`` over all other slots.

        Infinite inputs contribute their sign only.
        """

        product = 1.0
        for slot, message in enumerate(self.incoming):
            if slot == exclude:
                continue
            if math.isinf(message):
                if message < 0:
                    product = -product
                continue
            product *= math.tanh(message / 2.0)
        if abs(product) >= 1.0:
            return math.copysign(math.inf, product)
        return 2.0 * math.atanh(product)

    def calc_messages(self) -> np.ndarray:
        """Outgoing message for every slot at once (prefix/suffix products)."""

        if self.degree == 0:
            return np.zeros(0, dtype=np.float64)
        incoming = self.incoming
        factors = np.where(np.isinf(incoming), np.sign(incoming), np.tanh(incoming / 2.0))
        left = np.concatenate(([1.0], np.cumprod(factors[:-1])))
        right = np.concatenate((np.cumprod(factors[::-1][:-1])[::-1], [1.0]))
        with np.errstate(divide="ignore"):
            return 2.0 * np.arctanh(left * right)


class TannerGraph:
    """Bipartite graph of a linear block code plus its information/frozen partition."""

    def __init__(
        self,
        code_length: int,
        edges: Sequence[Edge],
        information_bit_indexes: Iterable[int],
        frozen_bit_indexes: Iterable[int],
        num_checks: Optional[int] = None,
    ) -> None:
        if code_length <= 0:
            raise ValueError("code_length must be positive")
        self.code_length = int(code_length)
        self.edges: Tuple[Edge, ...] = tuple(edges)
        self.information_bit_indexes = np.asarray(list(information_bit_indexes), dtype=np.int64)
        self.frozen_bit_indexes = np.asarray(list(frozen_bit_indexes), dtype=np.int64)

        for name, idx in (
            ("information_bit_indexes", self.information_bit_indexes),
            ("frozen_bit_indexes", self.frozen_bit_indexes),
        ):
            if np.any(idx < 0) or np.any(idx >= self.code_length):
                raise ValueError(f"{name} out of range")
            if np.unique(idx).size != idx.size:
                raise ValueError(f"{name} contains duplicates")
        if np.intersect1d(self.information_bit_indexes, self.frozen_bit_indexes).size:
            raise ValueError("information and frozen bit indexes must be disjoint")

        self._var_idx = np.array([e.variable_node_index for e in self.edges], dtype=np.int64)
        self._chk_idx = np.array([e.check_node_index for e in self.edges], dtype=np.int64)
        if np.any(self._var_idx < 0) or np.any(self._var_idx >= self.code_length):
            raise ValueError("edge variable node index out of range")
        if num_checks is None:
            num_checks = int(self._chk_idx.max()) + 1 if self._chk_idx.size else 0
        if np.any(self._chk_idx < 0) or np.any(self._chk_idx >= num_checks):
            raise ValueError("edge check node index out of range")

        self.variable_nodes = [VariableNode(e) for e in _group_edges(self._var_idx, self.code_length)]
        self.check_nodes = [CheckNode(e) for e in _group_edges(self._chk_idx, num_checks)]
        for index in self.frozen_bit_indexes:
            self.variable_nodes[index].set_is_frozen(True)

    @classmethod
    def from_edges(
        cls,
        code_length: int,
        edges: Iterable[Tuple[int, int]],
        frozen_bit_indexes: Iterable[int] = (),
        information_bit_indexes: Optional[Iterable[int]] = None,
        num_checks: Optional[int] = None,
    ) -> "TannerGraph":
        """Build from ``(variable, check)`` pairs; info bits default to all non-frozen ones."""

        frozen = sorted(int(i) for i in frozen_bit_indexes)
        if information_bit_indexes is None:
            frozen_set = set(frozen)
            information_bit_indexes = [i for i in range(code_length) if i not in frozen_set]
        edge_list = [Edge(int(v), int(c)) for v, c in edges]
        return cls(code_length, edge_list, information_bit_indexes, frozen, num_checks=num_checks)

    @classmethod
    def from_parity_check(
        cls,
        H: np.ndarray,
        frozen_bit_indexes: Iterable[int] = (),
        information_bit_indexes: Optional[Iterable[int]] = None,
    ) -> "TannerGraph":
        """Build from a binary parity-check matrix (one edge per nonzero entry)."""

        H = np.asarray(H)
        if H.ndim != 2:
            raise ValueError("H must be 2D")
        if not np.all((H == 0) | (H == 1)):
            raise ValueError("H must be binary")
        rows, cols = np.nonzero(H)
        return cls.from_edges(
            H.shape[1],
            zip(cols.tolist(), rows.tolist()),
            frozen_bit_indexes=frozen_bit_indexes,
            information_bit_indexes=information_bit_indexes,
            num_checks=H.shape[0],
        )

    @property
    def num_checks(self) -> int:
        return len(self.check_nodes)

    def edge_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(variable_index, check_index)`` arrays indexed by edge id."""

        return self._var_idx.copy(), self._chk_idx.copy()

    def variable_degrees(self) -> np.ndarray:
        return np.array([node.degree for node in self.variable_nodes], dtype=np.int64)

    def check_degrees(self) -> np.ndarray:
        return np.array([node.degree for node in self.check_nodes], dtype=np.int64)

    def clear(self) -> None:
        for node in self.variable_nodes:
            node.clear()
        for node in self.check_nodes:
            node.clear()

    def real_code_length(self) -> int:
        return self.code_length - int(self.frozen_bit_indexes.size)

    def rate(self) -> float:
        return self.information_bit_indexes.size / self.real_code_length()

    def list_rate(self, list_size: int) -> float:
        ambiguous = ambiguous_bit_count(list_size)
        return (self.information_bit_indexes.size - ambiguous) / self.real_code_length()


__all__ = [
    "Edge",
    "VariableNode",
    "CheckNode",
    "TannerGraph",
    "ambiguous_bit_count",
]
