import numpy as np
import pytest

from tanner_bp.ldpc import (
    BPDecoder,
    DecodeMode,
    InputSizeMismatch,
    SoftDecoder,
    TannerGraph,
    construct_code,
    hard_decision,
)


class _ConstantRng:
    """Stand-in generator whose coin flips always land on ``bit``."""

    def __init__(self, bit):
        self.bit = bit
        self.calls = 0

    def integers(self, low, high):
        self.calls += 1
        return self.bit


def _single_check_graph():
    # One check over all six positions, positions 2..5 frozen.
    return TannerGraph.from_edges(
        6,
        [(v, 0) for v in range(6)],
        frozen_bit_indexes=[2, 3, 4, 5],
        information_bit_indexes=[0, 1],
    )


def _awgn_llr(rng, n, sigma):
    received = 1.0 + rng.normal(0.0, sigma, size=n)
    return 2.0 * received / sigma**2


def test_hard_decision():
    rng = _ConstantRng(1)
    assert hard_decision(2.5, rng) == 0
    assert hard_decision(-0.1, rng) == 1
    assert rng.calls == 0
    assert hard_decision(0.0, rng) == 1
    assert hard_decision(0.0, _ConstantRng(0)) == 0


def test_hard_decision_tie_is_fair_coin():
    rng = np.random.default_rng(0)
    draws = [hard_decision(0.0, rng) for _ in range(2000)]
    assert 0.45 < np.mean(draws) < 0.55


def test_strong_positive_outputs_decode_to_zero():
    decoder = BPDecoder(_single_check_graph(), rng=0)
    np.testing.assert_array_equal(decoder.decode(np.full(6, 5.0)), [0, 0])


def test_parity_constraint_favours_stronger_evidence():
    decoder = BPDecoder(_single_check_graph(), rng=0)
    llr = np.array([-5.0, 3.0, 5.0, 5.0, 5.0, 5.0])
    np.testing.assert_array_equal(decoder.decode(llr), [1, 1])


def test_unconstrained_information_bits_follow_channel():
    # Checks only tie frozen positions together.
    graph = TannerGraph.from_edges(
        6,
        [(2, 0), (3, 0), (4, 1), (5, 1)],
        frozen_bit_indexes=[2, 3, 4, 5],
    )
    decoder = BPDecoder(graph, rng=0)
    np.testing.assert_array_equal(decoder.decode([5.0] * 6), [0, 0])
    np.testing.assert_array_equal(decoder.decode([-5.0] + [5.0] * 5), [1, 0])


def test_zero_channel_uses_injected_tie_break():
    graph = construct_code(12, 6, 3, 6, rng=1)
    decoder = BPDecoder(graph)
    decoder.rng = _ConstantRng(1)
    np.testing.assert_array_equal(decoder.decode(np.zeros(12)), np.ones(6))
    decoder.rng = _ConstantRng(0)
    np.testing.assert_array_equal(decoder.decode(np.zeros(12)), np.zeros(6))


def test_decode_is_idempotent():
    rng = np.random.default_rng(21)
    graph = construct_code(48, 20, 3, 6, rng=rng)
    llr = _awgn_llr(rng, 48, 0.9)
    first = BPDecoder(graph, rng=5).decode(llr)
    second = BPDecoder(graph, rng=5).decode(llr)
    np.testing.assert_array_equal(first, second)


def test_high_snr_all_zero_codeword():
    rng = np.random.default_rng(7)
    graph = construct_code(96, 40, 3, 6, rng=rng)
    decoder = BPDecoder(graph, rng=rng)
    decoded = decoder.decode(_awgn_llr(rng, 96, 0.4))
    assert decoded.shape == (40,)
    assert not decoded.any()
    assert decoder.last_result["converged"]


def test_decode_codeword_covers_every_position():
    graph = _single_check_graph()
    decoder = BPDecoder(graph, rng=0)
    codeword = decoder.decode_codeword([-5.0, 3.0, -5.0, 5.0, 5.0, 5.0])
    assert codeword.shape == (6,)
    np.testing.assert_array_equal(codeword[2:], [0, 0, 0, 0])


def test_call_dispatches_on_mode():
    decoder = BPDecoder(_single_check_graph(), rng=0)
    llr = np.full(6, 5.0)
    np.testing.assert_array_equal(decoder(llr), decoder.decode(llr))
    assert decoder(llr, mode=DecodeMode.CODEWORD).shape == (6,)
    assert len(decoder(llr, mode=DecodeMode.LIST, list_size=2)) == 2


def test_decode_rejects_wrong_length():
    decoder = BPDecoder(_single_check_graph())
    with pytest.raises(InputSizeMismatch):
        decoder.decode(np.ones(5))


def test_rate_queries_delegate_to_graph():
    decoder = BPDecoder(_single_check_graph())
    assert decoder.real_code_length() == 2
    assert decoder.rate() == pytest.approx(1.0)
    assert decoder.list_rate(2) == pytest.approx(0.5)


def test_bp_decoder_satisfies_soft_decoder():
    decoder = BPDecoder(_single_check_graph())
    assert isinstance(decoder, SoftDecoder)
