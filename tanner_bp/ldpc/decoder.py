"""Hard-decision and list decoding on top of the BP engine."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable

import numpy as np

from ..utils.seeding import SeedLike, make_rng
from .crc import select_candidate
from .engine import DECODE_ITERATIONS, execute_message_passing
from .graph import TannerGraph, ambiguous_bit_count

ChannelOutputs = Union[Sequence[float], np.ndarray]


class DecodeMode(Enum):
    SINGLE = "single"
    CODEWORD = "codeword"
    LIST = "list"


@runtime_checkable
class SoftDecoder(Protocol):
    def decode(self, channel_outputs: ChannelOutputs) -> np.ndarray: ...

    def decode_codeword(self, channel_outputs: ChannelOutputs) -> np.ndarray: ...

    def list_decode(self, channel_outputs: ChannelOutputs, list_size: int) -> List[np.ndarray]: ...


def hard_decision(llr: float, rng: np.random.Generator) -> int:
    """Positive LLR -> 0, negative -> 1, exactly zero -> fair coin from ``rng``."""

    if llr > 0:
        return 0
    if llr < 0:
        return 1
    return int(rng.integers(0, 2))


class BPDecoder:
    """Belief-propagation decoder bound to one Tanner graph.

    Decoding mutates the graph's node state, so one instance must not be
    shared between concurrent decodes.
    """

    def __init__(
        self,
        graph: TannerGraph,
        rng: SeedLike = None,
        max_iterations: int = DECODE_ITERATIONS,
    ) -> None:
        self.graph = graph
        self.rng = make_rng(rng)
        self.max_iterations = max_iterations
        self.last_result: Optional[dict] = None

    def _run(self, channel_outputs: ChannelOutputs) -> None:
        self.last_result = execute_message_passing(
            self.graph, channel_outputs, max_iterations=self.max_iterations
        )

    def _decide(self, indexes: np.ndarray) -> np.ndarray:
        nodes = self.graph.variable_nodes
        return np.array(
            [hard_decision(nodes[i].marginalize(), self.rng) for i in indexes],
            dtype=np.int8,
        )

    def decode(self, channel_outputs: ChannelOutputs) -> np.ndarray:
        """Return the hard decision on the information bits."""

        self._run(channel_outputs)
        return self._decide(self.graph.information_bit_indexes)

    def decode_codeword(self, channel_outputs: ChannelOutputs) -> np.ndarray:
        """Return the hard decision on all ``N`` positions."""

        self._run(channel_outputs)
        return self._decide(np.arange(self.graph.code_length))

    def list_decode(self, channel_outputs: ChannelOutputs, list_size: int) -> List[np.ndarray]:
        """Return ``2**floor(log2(list_size))`` candidates built by flipping weak bits.

        Candidate 0 is the plain hard decision. Then, for each of the least
        reliable information bits in turn, every candidate so far is copied
        with that bit flipped and appended. Flip positions index the
        information-bit vector. The list is not re-ranked.
        """

        ambiguous = ambiguous_bit_count(list_size)
        info = self.graph.information_bit_indexes
        if ambiguous > info.size:
            raise ValueError(
                f"list_size {list_size} needs {ambiguous} ambiguous bits but only {info.size} are available"
            )

        self._run(channel_outputs)
        nodes = self.graph.variable_nodes
        marginals = np.array([nodes[i].marginalize() for i in info], dtype=np.float64)
        order = np.argsort(np.abs(marginals), kind="stable")

        candidates = [self._decide(info)]
        for position in order[:ambiguous]:
            flipped = []
            for candidate in candidates:
                inverted = candidate.copy()
                inverted[position] = 1 - inverted[position]
                flipped.append(inverted)
            candidates.extend(flipped)
        return candidates

    def list_decode_crc(self, channel_outputs: ChannelOutputs, list_size: int, crc_poly: str) -> dict:
        """List-decode, then keep the first candidate that passes ``crc_poly``."""

        candidates = self.list_decode(channel_outputs, list_size)
        result = select_candidate(candidates, crc_poly)
        result["candidates"] = candidates
        return result

    def __call__(
        self,
        channel_outputs: ChannelOutputs,
        mode: DecodeMode = DecodeMode.SINGLE,
        list_size: int = 1,
    ):
        if mode is DecodeMode.SINGLE:
            return self.decode(channel_outputs)
        if mode is DecodeMode.CODEWORD:
            return self.decode_codeword(channel_outputs)
        if mode is DecodeMode.LIST:
            return self.list_decode(channel_outputs, list_size)
        raise ValueError(f"Unsupported decode mode: {mode}")

    def rate(self) -> float:
        return self.graph.rate()

    def list_rate(self, list_size: int) -> float:
        return self.graph.list_rate(list_size)

    def real_code_length(self) -> int:
        return self.graph.real_code_length()


__all__ = ["BPDecoder", "DecodeMode", "SoftDecoder", "hard_decision"]
