"""
Adaptive exponential smoothing of the viewing direction.

A single smoothing constant makes the view oscillate when looking near
the zenith or nadir: there a small physical tilt swings the azimuth by
a large amount. The filter damps hard inside a band around the poles and
otherwise adapts its strength to the speed of motion.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .orientation import HorizontalDirection, normalize_360, wrap_180


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmoothingBands:
    """Smoothing factors and the bands that select them."""
    pole_band: Tuple[float, float] = (85.0, 95.0)       # |altitude| range, open interval
    pole_factor: float = 0.05
    approach_band: Tuple[float, float] = (80.0, 100.0)
    approach_factor: float = 0.10
    fast_threshold: float = 10.0    # Degrees per sample
    fast_factor: float = 0.4
    medium_threshold: float = 5.0
    medium_factor: float = 0.3
    slow_factor: float = 0.2


DEFAULT_BANDS = SmoothingBands()


@dataclass(frozen=True)
class SmootherState:
    """Running estimate of the smoothed direction."""
    direction: Optional[HorizontalDirection] = None

    @property
    def initialized(self) -> bool:
        return self.direction is not None


def smoothing_factor(previous_altitude: float, delta_azimuth: float,
                     delta_altitude: float,
                     bands: SmoothingBands = DEFAULT_BANDS) -> float:
    """
    Select the smoothing factor for one update.

    Args:
        previous_altitude: Smoothed altitude before this update (degrees)
        delta_azimuth: Wrapped azimuth difference raw - smoothed (degrees)
        delta_altitude: Altitude difference raw - smoothed (degrees)
        bands: Factor table

    Returns:
        Factor k in (0, 1]
    """
    tilt = abs(previous_altitude)

    low, high = bands.pole_band
    if low < tilt < high:
        return bands.pole_factor

    low, high = bands.approach_band
    if low < tilt < high:
        return bands.approach_factor

    rate = max(abs(delta_azimuth), abs(delta_altitude))
    if rate > bands.fast_threshold:
        return bands.fast_factor
    elif rate > bands.medium_threshold:
        return bands.medium_factor
    return bands.slow_factor


def step(state: SmootherState, raw: HorizontalDirection,
         bands: SmoothingBands = DEFAULT_BANDS) -> Tuple[SmootherState, float]:
    """
    Pure state transition of the smoother.

    The first sample after a reset seeds the state unchanged (factor 1.0).

    Returns:
        (new_state, factor)
    """
    if not state.initialized:
        return SmootherState(direction=raw.copy()), 1.0

    current = state.direction
    d_az = wrap_180(raw.azimuth - current.azimuth)
    d_alt = raw.altitude - current.altitude

    k = smoothing_factor(current.altitude, d_az, d_alt, bands)

    smoothed = HorizontalDirection(
        azimuth=normalize_360(current.azimuth + d_az * k),
        altitude=current.altitude + d_alt * k,
    )
    return replace(state, direction=smoothed), k


class AdaptiveSmoother:
    """
    Stateful wrapper around step().

    Owns exactly one smoothed direction; reset() returns it to the
    uninitialized state when tracking is re-enabled.
    """

    def __init__(self, bands: Optional[SmoothingBands] = None):
        self.bands = bands or DEFAULT_BANDS
        self.state = SmootherState()
        self.last_factor: Optional[float] = None

    def reset(self):
        """Drop the running estimate; the next update seeds it."""
        self.state = SmootherState()
        self.last_factor = None

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    @property
    def direction(self) -> Optional[HorizontalDirection]:
        """Current smoothed direction, None before the first update."""
        return self.state.direction

    def update(self, raw: HorizontalDirection) -> HorizontalDirection:
        """
        Feed one raw direction.

        Args:
            raw: Unsmoothed direction from the orientation transform

        Returns:
            Smoothed direction after this update
        """
        self.state, self.last_factor = step(self.state, raw, self.bands)
        return self.state.direction
