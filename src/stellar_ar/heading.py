"""
Heading source selection.

Decides which value is fed into the orientation transform as alpha.
The policy is chosen once at construction for the target platform.
"""

import math
import logging
from enum import Enum
from typing import Optional

from .orientation import OrientationSample, coerce_angle, normalize_360


logger = logging.getLogger(__name__)


def is_reading(value) -> bool:
    """True if a channel holds a finite number."""
    if value is None:
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


class HeadingPolicy(Enum):
    """How the heading channel is resolved for a platform."""
    ALPHA = "alpha"                 # Use alpha, or the tracked absolute compass heading
    COMPASS_HINT = "compass_hint"   # Prefer the platform compass heading hint


class HeadingSelector:
    """
    Resolves the alpha channel for the orientation transform.

    Keeps the last absolute compass heading seen on a separate absolute
    stream, used when the primary samples are not absolute.
    """

    def __init__(self, policy: HeadingPolicy = HeadingPolicy.ALPHA):
        self.policy = policy
        self.compass_heading: Optional[float] = None

    def reset(self):
        """Forget the tracked compass heading."""
        self.compass_heading = None

    def observe_absolute(self, sample: OrientationSample):
        """Track alpha from an absolute orientation sample."""
        if sample.absolute and is_reading(sample.alpha):
            self.compass_heading = coerce_angle(sample.alpha, "alpha")

    def select(self, sample: OrientationSample) -> float:
        """
        Heading value to use as alpha for this sample.

        Args:
            sample: Raw orientation sample

        Returns:
            Alpha in degrees, counter-clockwise convention
        """
        if self.policy is HeadingPolicy.COMPASS_HINT and is_reading(sample.heading_hint):
            # Hint is clockwise from north, alpha runs counter-clockwise
            return normalize_360(-coerce_angle(sample.heading_hint, "heading_hint"))

        alpha = coerce_angle(sample.alpha, "alpha")
        if sample.absolute:
            return alpha
        if self.compass_heading is not None:
            return self.compass_heading
        return alpha
