"""Exceptions raised by graph construction and decoding."""

from __future__ import annotations


class InvalidDegreeConfiguration(ValueError):
    """Code length and node degrees cannot form a regular Tanner graph."""


class InputSizeMismatch(ValueError):
    """Channel output length differs from the code length."""


__all__ = ["InvalidDegreeConfiguration", "InputSizeMismatch"]
