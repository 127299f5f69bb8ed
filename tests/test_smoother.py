"""Tests for the adaptive smoother."""

import numpy as np
import pytest

from stellar_ar.orientation import HorizontalDirection
from stellar_ar.smoother import (
    AdaptiveSmoother,
    SmootherState,
    SmoothingBands,
    smoothing_factor,
    step,
)


def seeded(azimuth, altitude):
    smoother = AdaptiveSmoother()
    smoother.update(HorizontalDirection(azimuth, altitude))
    return smoother


def test_first_update_returns_raw_unchanged():
    smoother = AdaptiveSmoother()
    raw = HorizontalDirection(123.456, -12.5)
    result = smoother.update(raw)
    assert result == raw
    assert smoother.initialized


def test_reset_reseeds():
    smoother = seeded(10, 0)
    smoother.update(HorizontalDirection(50, 0))
    smoother.reset()
    assert not smoother.initialized
    assert smoother.direction is None
    result = smoother.update(HorizontalDirection(200, 20))
    assert result == HorizontalDirection(200, 20)


def test_wraparound_moves_forward_through_north():
    smoother = seeded(350, 0)
    result = smoother.update(HorizontalDirection(10, 0))
    # +20° shortest path, fast motion factor 0.4
    assert smoother.last_factor == 0.4
    assert result.azimuth == pytest.approx(358.0)


def test_wraparound_moves_backward_through_north():
    smoother = seeded(10, 0)
    result = smoother.update(HorizontalDirection(350, 0))
    assert result.azimuth == pytest.approx(2.0)


def test_near_pole_damping():
    smoother = seeded(100, 90)
    result = smoother.update(HorizontalDirection(160, 88))
    assert smoother.last_factor == 0.05
    assert abs(result.azimuth - 100) <= 60 * 0.05 + 1e-9
    assert result.altitude == pytest.approx(90 - 2 * 0.05)


def test_approach_band_factor():
    smoother = seeded(0, -82)
    smoother.update(HorizontalDirection(30, -70))
    assert smoother.last_factor == 0.10


def test_motion_adaptive_factors_increase():
    smoother = seeded(0, 0)
    factors = []
    target = 0.0
    for delta in (2.0, 7.0, 15.0):
        target = smoother.direction.azimuth + delta
        smoother.update(HorizontalDirection(target % 360, 0))
        factors.append(smoother.last_factor)
    assert factors == [0.2, 0.3, 0.4]


def test_altitude_delta_drives_factor():
    smoother = seeded(0, 0)
    smoother.update(HorizontalDirection(0, 12))
    assert smoother.last_factor == 0.4
    assert smoother.direction.altitude == pytest.approx(4.8)


def test_smoothing_factor_band_edges():
    assert smoothing_factor(85.0, 0, 0) == 0.10
    assert smoothing_factor(85.01, 0, 0) == 0.05
    assert smoothing_factor(-90.0, 0, 0) == 0.05
    assert smoothing_factor(80.0, 0, 0) == 0.2
    assert smoothing_factor(80.5, 0, 0) == 0.10
    assert smoothing_factor(0, 10.0, 0) == 0.3
    assert smoothing_factor(0, 5.0, 0) == 0.2
    assert smoothing_factor(0, -10.5, 0) == 0.4


def test_custom_bands():
    bands = SmoothingBands(slow_factor=0.5)
    assert smoothing_factor(0, 1, 1, bands) == 0.5


def test_step_is_pure():
    state = SmootherState()
    state1, k1 = step(state, HorizontalDirection(10, 5))
    assert not state.initialized
    assert k1 == 1.0
    state2, k2 = step(state1, HorizontalDirection(20, 5))
    assert state1.direction == HorizontalDirection(10, 5)
    assert k2 == 0.3
    assert state2.direction.azimuth == pytest.approx(13.0)


def test_azimuth_stays_normalized_on_random_walk():
    rng = np.random.default_rng(7)
    smoother = AdaptiveSmoother()
    for az, alt in zip(rng.uniform(0, 360, 500), rng.uniform(-90, 90, 500)):
        result = smoother.update(HorizontalDirection(float(az), float(alt)))
        assert 0 <= result.azimuth < 360
