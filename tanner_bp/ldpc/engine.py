"""Flooding sum-product (belief propagation) over a Tanner graph."""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from .errors import InputSizeMismatch
from .graph import TannerGraph

logger = logging.getLogger(__name__)

DECODE_ITERATIONS = 40


def is_satisfy_all_checks(graph: TannerGraph) -> bool:
    """Return True when the hard decision on every marginal meets every parity check.

    A marginal that is exactly zero counts as unresolved and fails the test.
    """

    marginals = np.array([node.marginalize() for node in graph.variable_nodes])
    if np.any(marginals == 0):
        return False
    estimates = (marginals < 0).astype(np.int64)
    var_idx, chk_idx = graph.edge_arrays()
    parity = np.bincount(chk_idx, weights=estimates[var_idx], minlength=graph.num_checks)
    return not np.any(parity.astype(np.int64) % 2)


def _send_to_checks(graph: TannerGraph, v2c: np.ndarray) -> None:
    for node in graph.check_nodes:
        node.receive(v2c[node.edges])


def _send_to_variables(graph: TannerGraph, c2v: np.ndarray) -> None:
    for node in graph.variable_nodes:
        node.receive(c2v[node.edges])


def execute_message_passing(
    graph: TannerGraph,
    channel_outputs: Union[Sequence[float], np.ndarray],
    max_iterations: int = DECODE_ITERATIONS,
) -> dict:
    """Run BP on ``graph`` in place, stopping early once all checks are satisfied.

    Returns ``{"iters_used", "converged"}``. Running out of iterations is not
    an error; the graph simply holds its latest beliefs.
    """

    llr = np.asarray(channel_outputs, dtype=np.float64)
    if llr.ndim != 1:
        raise ValueError("channel_outputs must be 1D")
    if llr.size != graph.code_length:
        raise InputSizeMismatch(
            f"expected {graph.code_length} channel outputs, got {llr.size}"
        )
    if max_iterations < 0:
        raise ValueError("max_iterations must be non-negative")

    graph.clear()
    for node, value in zip(graph.variable_nodes, llr):
        node.set_channel_llr(value)

    num_edges = len(graph.edges)
    v2c = np.zeros(num_edges, dtype=np.float64)
    c2v = np.zeros(num_edges, dtype=np.float64)

    for node in graph.variable_nodes:
        v2c[node.edges] = node.initial_message()
    _send_to_checks(graph, v2c)

    converged = False
    iters_used = 0
    for it in range(1, max_iterations + 1):
        iters_used = it
        for node in graph.check_nodes:
            c2v[node.edges] = node.calc_messages()
        _send_to_variables(graph, c2v)

        for node in graph.variable_nodes:
            v2c[node.edges] = node.calc_messages()
        _send_to_checks(graph, v2c)

        if is_satisfy_all_checks(graph):
            converged = True
            break

    logger.debug("message passing: iters_used=%d converged=%s", iters_used, converged)
    return {"iters_used": iters_used, "converged": converged}


__all__ = ["DECODE_ITERATIONS", "execute_message_passing", "is_satisfy_all_checks"]
