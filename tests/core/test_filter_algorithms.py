"""Tests for the per-pixel helpers shared by every executor."""

import numpy as np
import pytest

from iEnhance.core.filters.algorithms import (
    box_blur_estimate,
    clamp_channel,
    range_weighted_average,
)


def _snapshot(buffer):
    return buffer.as_array().astype(np.float64)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-64.0, 0),
        (-0.4, 0),
        (12.4, 12),
        (127.5, 128),
        (236.0, 236),
        (254.5, 255),
        (333.3, 255),
        (1e20, 255),
        (-1e20, 0),
        (float("nan"), 0),
    ],
)
def test_clamp_channel_rounds_half_up_and_clamps(value, expected):
    assert clamp_channel(value) == expected


def test_box_blur_estimate_on_uniform_region_returns_the_colour(make_buffer):
    buffer = make_buffer(3, 3, (10, 20, 30, 255))
    r, g, b = box_blur_estimate(_snapshot(buffer), 3, 1, 1, 1)
    assert (r, g, b) == pytest.approx((10.0, 20.0, 30.0))


def test_box_blur_estimate_averages_each_channel_independently(make_buffer):
    buffer = make_buffer(3, 3, (0, 0, 0, 255))
    pixels = buffer.as_array()
    pixels[(1 * 3 + 1) * 4 : (1 * 3 + 1) * 4 + 3] = (255, 90, 0)

    r, g, b = box_blur_estimate(_snapshot(buffer), 3, 1, 1, 1)

    assert r == pytest.approx(255 / 9)
    assert g == pytest.approx(10.0)
    assert b == pytest.approx(0.0)


def test_range_weighted_average_of_uniform_region(make_buffer):
    buffer = make_buffer(5, 5, (128, 128, 128, 255))
    r, g, b, weight_sum = range_weighted_average(_snapshot(buffer), 5, 2, 2, 2, 15.0)

    assert (r, g, b) == pytest.approx((128.0, 128.0, 128.0))
    assert weight_sum == pytest.approx(25.0)


def test_range_weighted_average_suppresses_dissimilar_neighbours(make_buffer):
    buffer = make_buffer(3, 3, (0, 0, 0, 255))
    pixels = buffer.as_array()
    center = (1 * 3 + 1) * 4
    pixels[center : center + 3] = (255, 255, 255)

    r, _, _, weight_sum = range_weighted_average(_snapshot(buffer), 3, 1, 1, 1, 15.0)

    # The black neighbours sit ~441 units away, so exp(-441/15) makes them vanish.
    assert r == pytest.approx(255.0, abs=1e-6)
    assert weight_sum == pytest.approx(1.0, abs=1e-6)


@pytest.mark.parametrize("threshold", [0.3, 3.0, 15.0, 30.0])
@pytest.mark.parametrize("radius", [1, 2])
def test_range_weighted_weight_sum_is_at_least_one(random_buffer, radius, threshold):
    buffer = random_buffer(9, 7, seed=radius * 100 + int(threshold * 10))
    original = _snapshot(buffer)

    for y in range(radius, buffer.height - radius):
        for x in range(radius, buffer.width - radius):
            _, _, _, weight_sum = range_weighted_average(
                original, buffer.width, x, y, radius, threshold
            )
            assert weight_sum >= 1.0
