"""
Bearing indicator towards a selected target.

Computes whether an on-screen pointer should be shown and the angle it
should be rotated to, given the current viewing direction and a target
in horizontal coordinates.
"""

import math
import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .orientation import HorizontalDirection, wrap_180


logger = logging.getLogger(__name__)

# Targets closer than this are already in the field of view
DEFAULT_FOV_THRESHOLD = 15.0

# Minimum seconds between two target provider pulls
DEFAULT_REFRESH_INTERVAL = 0.2


@dataclass
class BearingResult:
    """Indicator state for the view sink."""
    visible: bool
    angle_deg: Optional[float] = None       # Screen rotation of the pointer
    distance_deg: Optional[float] = None    # Angular separation from the target

    @classmethod
    def hidden(cls, distance_deg: Optional[float] = None) -> "BearingResult":
        return cls(visible=False, angle_deg=None, distance_deg=distance_deg)


def compute_bearing(current: HorizontalDirection,
                    target: Optional[HorizontalDirection],
                    fov_threshold: float = DEFAULT_FOV_THRESHOLD) -> BearingResult:
    """
    Bearing from the current view to a target.

    Args:
        current: Smoothed viewing direction
        target: Target direction, or None when nothing is selected
        fov_threshold: Separation in degrees below which the pointer is hidden

    Returns:
        BearingResult; angle_deg is atan2(d_az, d_alt) in degrees
    """
    if target is None:
        return BearingResult.hidden()

    d_az = wrap_180(target.azimuth - current.azimuth)
    d_alt = target.altitude - current.altitude
    distance = math.sqrt(d_az * d_az + d_alt * d_alt)

    if distance < fov_threshold:
        return BearingResult.hidden(distance)

    # Pointer rotation: 0 = up, positive = clockwise
    angle = math.degrees(math.atan2(d_az, d_alt))
    return BearingResult(visible=True, angle_deg=angle, distance_deg=distance)


class TargetPoller:
    """
    Rate-limited pull of the current target.

    The provider is asked at most once per min_interval seconds. A target
    pinned with set_target() is kept until a poll returns a target or
    clear() is called.
    """

    def __init__(self, provider=None,
                 min_interval: float = DEFAULT_REFRESH_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            provider: TargetProvider or None for manual targets only
            min_interval: Minimum seconds between provider pulls
            clock: Monotonic time source in seconds
        """
        self.provider = provider
        self.min_interval = min_interval
        self.clock = clock

        self._target: Optional[HorizontalDirection] = None
        self._pinned = False
        self._last_refresh: Optional[float] = None

    @property
    def target(self) -> Optional[HorizontalDirection]:
        return self._target

    def reset(self):
        """Force a refresh on the next call to current()."""
        self._last_refresh = None

    def set_target(self, target: Optional[HorizontalDirection]):
        """Pin a target chosen by the caller."""
        self._target = target.copy() if target is not None else None
        self._pinned = target is not None

    def clear(self):
        self._target = None
        self._pinned = False

    def due(self, now: float) -> bool:
        return self._last_refresh is None or now - self._last_refresh > self.min_interval

    def current(self, now: Optional[float] = None) -> Optional[HorizontalDirection]:
        """
        Target snapshot, refreshed from the provider when due.

        Args:
            now: Timestamp in clock units (default: clock())

        Returns:
            Target direction or None
        """
        if now is None:
            now = self.clock()

        if self.provider is not None and self.due(now):
            self._last_refresh = now
            self._refresh()

        return self._target

    def _refresh(self):
        try:
            target = self.provider.get_target()
        except Exception as e:
            logger.warning(f"Error updating target: {e}")
            target = None

        if target is not None:
            if target != self._target:
                logger.debug(f"Target at az={target.azimuth:.1f}°, alt={target.altitude:.1f}°")
            self._target = target
            self._pinned = False
        elif self._target is not None and not self._pinned:
            logger.debug("Target no longer available")
            self._target = None
