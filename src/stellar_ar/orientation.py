"""
Device orientation to horizontal coordinates.

Converts the three Euler angles reported by a device orientation sensor
(alpha = compass, beta = front/back tilt, gamma = left/right tilt) into the
horizontal direction the back camera is looking at.
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np


logger = logging.getLogger(__name__)


def normalize_360(angle: float) -> float:
    """Normalize an angle in degrees into [0, 360)."""
    angle = angle % 360.0
    # -1e-15 % 360 rounds up to 360.0
    if angle >= 360.0:
        angle -= 360.0
    return angle


def wrap_180(delta: float) -> float:
    """
    Shortest-path wrap of an azimuth difference.

    Args:
        delta: Difference of two normalized azimuths in degrees

    Returns:
        Equivalent difference in [-180, 180]
    """
    if delta > 180:
        delta -= 360
    if delta < -180:
        delta += 360
    return delta


def coerce_angle(value, name: str = "angle") -> float:
    """
    Turn a raw sensor channel into a usable angle.

    Missing, non-numeric and non-finite readings become 0 so that
    nothing undefined reaches the trigonometry.
    """
    if value is None:
        return 0.0
    try:
        angle = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Invalid {name} reading {value!r}, using 0")
        return 0.0
    if not math.isfinite(angle):
        logger.debug(f"Non-finite {name} reading {value!r}, using 0")
        return 0.0
    return angle


@dataclass
class OrientationSample:
    """One reading from a device orientation sensor."""
    alpha: Optional[float] = None          # Degrees, rotation about Z (counter-clockwise compass)
    beta: Optional[float] = None           # Degrees, front/back tilt
    gamma: Optional[float] = None          # Degrees, left/right tilt
    absolute: bool = False                 # Alpha is referenced to magnetic north
    heading_hint: Optional[float] = None   # Platform compass heading, clockwise from north
    timestamp: float = 0.0                 # Seconds

    def angles(self) -> tuple[float, float, float]:
        """(alpha, beta, gamma) with missing channels replaced by 0."""
        return (
            coerce_angle(self.alpha, "alpha"),
            coerce_angle(self.beta, "beta"),
            coerce_angle(self.gamma, "gamma"),
        )


@dataclass
class HorizontalDirection:
    """Viewing direction in horizontal coordinates."""
    azimuth: float      # Degrees from North, clockwise (0-360)
    altitude: float     # Degrees above horizon (-90 to +90)

    def copy(self) -> "HorizontalDirection":
        return HorizontalDirection(self.azimuth, self.altitude)

    def to_radians(self) -> tuple[float, float]:
        """(azimuth, altitude) in radians."""
        return math.radians(self.azimuth), math.radians(self.altitude)


def forward_vector(alpha: float, beta: float, gamma: float) -> np.ndarray:
    """
    Camera viewing vector for a device orientation.

    Applies the intrinsic Z-X-Y rotation (alpha, beta, gamma) to the
    reference vector pointing back/up from the device in its face-up pose.

    Args:
        alpha: Rotation about Z in degrees
        beta: Rotation about X in degrees
        gamma: Rotation about Y in degrees

    Returns:
        Unit vector [x, y, z]
    """
    a = math.radians(alpha)
    b = math.radians(beta)
    g = math.radians(gamma)

    ca, sa = math.cos(a), math.sin(a)
    cb, sb = math.cos(b), math.sin(b)
    cg, sg = math.cos(g), math.sin(g)

    x = ca * sg + sa * sb * cg
    y = -ca * cg * sb + sa * sg
    z = cb * cg

    return np.array([x, y, z])


def compute_direction(alpha: Optional[float],
                      beta: Optional[float],
                      gamma: Optional[float]) -> HorizontalDirection:
    """
    Convert device orientation angles to a horizontal direction.

    The heading channel must already be resolved by the caller
    (see heading.HeadingSelector).

    Args:
        alpha: Heading channel in degrees (None is treated as 0)
        beta: Front/back tilt in degrees (None is treated as 0)
        gamma: Left/right tilt in degrees (None is treated as 0)

    Returns:
        HorizontalDirection with azimuth in [0, 360)
    """
    alpha = coerce_angle(alpha, "alpha")
    beta = coerce_angle(beta, "beta")
    gamma = coerce_angle(gamma, "gamma")

    x, y, z = forward_vector(alpha, beta, gamma)

    azimuth = normalize_360(math.degrees(math.atan2(x, y)))
    # Reference axis points south
    azimuth = normalize_360(azimuth + 180.0)

    horiz = math.sqrt(x * x + y * y)
    altitude = -math.degrees(math.atan2(z, horiz))

    return HorizontalDirection(azimuth=azimuth, altitude=altitude)
