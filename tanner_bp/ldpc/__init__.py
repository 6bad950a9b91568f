"""Tanner-graph BP decoding: graph model, constructor, engine, list decoder."""

from .errors import InvalidDegreeConfiguration, InputSizeMismatch
from .graph import Edge, VariableNode, CheckNode, TannerGraph, ambiguous_bit_count
from .construct import construct_code, create_random_edges
from .engine import DECODE_ITERATIONS, execute_message_passing, is_satisfy_all_checks
from .decoder import BPDecoder, DecodeMode, SoftDecoder, hard_decision
from .crc import attach_crc, check_crc, select_candidate

__all__ = [
    "InvalidDegreeConfiguration",
    "InputSizeMismatch",
    "Edge",
    "VariableNode",
    "CheckNode",
    "TannerGraph",
    "ambiguous_bit_count",
    "construct_code",
    "create_random_edges",
    "DECODE_ITERATIONS",
    "execute_message_passing",
    "is_satisfy_all_checks",
    "BPDecoder",
    "DecodeMode",
    "SoftDecoder",
    "hard_decision",
    "attach_crc",
    "check_crc",
    "select_candidate",
]
