import logging

import numpy as np
import pytest

from tanner_bp.ldpc import (
    InvalidDegreeConfiguration,
    construct_code,
    create_random_edges,
)


@pytest.mark.parametrize("N,dv,dc", [(12, 3, 6), (20, 3, 4), (96, 3, 6), (15, 2, 5)])
def test_degree_regularity(N, dv, dc):
    graph = construct_code(N, 1, dv, dc, rng=np.random.default_rng(N))
    assert graph.num_checks == N * dv // dc
    assert len(graph.edges) == N * dv
    assert np.all(graph.variable_degrees() == dv)
    assert np.all(graph.check_degrees() == dc)


def test_invalid_degree_configuration():
    with pytest.raises(InvalidDegreeConfiguration):
        construct_code(5, 2, 3, 4)
    with pytest.raises(InvalidDegreeConfiguration):
        create_random_edges(5, 3, 4)


def test_information_and_frozen_partition():
    graph = construct_code(12, 3, 3, 6, rng=0)
    np.testing.assert_array_equal(graph.information_bit_indexes, [0, 1, 2])
    np.testing.assert_array_equal(graph.frozen_bit_indexes, [3, 4, 5])
    assert [node.is_frozen for node in graph.variable_nodes] == [False] * 3 + [True] * 3 + [False] * 6
    assert graph.real_code_length() == 9
    assert graph.rate() == pytest.approx(3 / 9)


def test_information_size_above_design_dimension(caplog):
    with caplog.at_level(logging.WARNING, logger="tanner_bp.ldpc.construct"):
        graph = construct_code(12, 8, 3, 6, rng=0)
    assert graph.frozen_bit_indexes.size == 0
    assert graph.information_bit_indexes.size == 8
    assert "exceeds design dimension" in caplog.text

    with pytest.raises(InvalidDegreeConfiguration):
        construct_code(12, 8, 3, 6, rng=0, strict=True)


def test_same_seed_same_graph():
    a = construct_code(24, 4, 3, 6, rng=11)
    b = construct_code(24, 4, 3, 6, rng=11)
    assert a.edges == b.edges


def test_edges_pair_sockets_in_order():
    edges = create_random_edges(8, 3, 4, rng=np.random.default_rng(5))
    checks = [e.check_node_index for e in edges]
    assert checks == [k // 4 for k in range(24)]
    counts = np.bincount([e.variable_node_index for e in edges], minlength=8)
    assert np.all(counts == 3)
