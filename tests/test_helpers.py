"""Tests for shared numeric helpers."""

import math

import pytest

from churnstream.utils import clamp, clamp01, round_half_up, safe_divide


@pytest.mark.parametrize("value,digits,expected", [
    (1.125, 2, 1.13),
    (0.0625, 3, 0.063),
    (2.5, 0, 3.0),
    (56.666666, 2, 56.67),
    (1.005, 2, 1.0),
    (-1.125, 2, -1.13),
    (0.0, 2, 0.0),
])
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected


def test_round_half_up_passes_non_finite_through():
    assert math.isnan(round_half_up(float("nan"), 2))
    assert round_half_up(float("inf"), 2) == float("inf")


def test_safe_divide():
    assert safe_divide(3, 4) == 0.75
    assert safe_divide(3, 0) == 0.0
    assert safe_divide(3, 0, default=-1.0) == -1.0


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp01(0.4) == 0.4
    assert clamp01(1.7) == 1.0
