"""
Stellarium Remote Control integration.

Steers Stellarium's view and reads its current selection through the
Remote Control plugin HTTP API.

Stellarium must be running with the Remote Control plugin enabled
(default port 8090):
    Configuration (F2) > Plugins > Remote Control > Load at startup
"""

import json
import math
import logging
from typing import Optional

import requests

from .orientation import HorizontalDirection, normalize_360
from .bearing import BearingResult
from .interfaces import ViewSink, TargetProvider


logger = logging.getLogger(__name__)

STELLARIUM_URL = "http://localhost:8090"


def altaz_to_vector(direction: HorizontalDirection) -> tuple[float, float, float]:
    """
    Unit vector of a direction in Stellarium's alt-az frame.

    Stellarium measures the alt-az longitude from south, so
    longitude = 180° - azimuth.
    """
    az_rad, alt_rad = direction.to_radians()
    x = -math.cos(alt_rad) * math.cos(az_rad)
    y = math.cos(alt_rad) * math.sin(az_rad)
    z = math.sin(alt_rad)
    return x, y, z


def vector_to_altaz(vector) -> HorizontalDirection:
    """Inverse of altaz_to_vector."""
    x, y, z = (float(v) for v in vector)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0:
        return HorizontalDirection(0.0, 0.0)
    z = max(-1.0, min(1.0, z / norm))
    azimuth = normalize_360(math.degrees(math.atan2(y, -x)))
    return HorizontalDirection(azimuth=azimuth, altitude=math.degrees(math.asin(z)))


class StellariumClient:
    """Thin wrapper over the Remote Control API."""

    def __init__(self, url: str = STELLARIUM_URL, timeout: float = 0.5,
                 session: Optional[requests.Session] = None):
        """
        Args:
            url: Base URL of the Remote Control plugin
            timeout: Request timeout in seconds
            session: HTTP session (a new one when None)
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _endpoint(self, path: str) -> str:
        return f"{self.url}/api/{path}"

    def status(self) -> Optional[dict]:
        """Server status, None if Stellarium is unreachable."""
        try:
            resp = self.session.get(self._endpoint("main/status"), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Could not connect to Stellarium at {self.url}: {e}")
            return None
        if resp.status_code != 200:
            logger.warning(f"Stellarium status error: {resp.status_code} - {resp.text}")
            return None
        return resp.json()

    def get_view(self) -> Optional[HorizontalDirection]:
        """Current view direction, None if unavailable."""
        try:
            resp = self.session.get(self._endpoint("main/view"), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error getting view: {e}")
            return None
        if resp.status_code != 200:
            return None
        # altAz is a JSON string "[x, y, z]"
        altaz = resp.json().get("altAz")
        if not altaz:
            return None
        return vector_to_altaz(json.loads(altaz))

    def set_view(self, direction: HorizontalDirection) -> bool:
        """Point the view at an alt-az direction."""
        x, y, z = altaz_to_vector(direction)
        data = {"altAz": f"[{x}, {y}, {z}]"}
        try:
            resp = self.session.post(self._endpoint("main/view"), data=data,
                                     timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error moving view: {e}")
            return False
        if resp.status_code != 200:
            logger.warning(f"Error moving view: {resp.status_code} - {resp.text}")
            return False
        return True

    def selected_object(self) -> Optional[dict]:
        """Info of the current selection, None when nothing is selected."""
        try:
            resp = self.session.get(self._endpoint("objects/info"),
                                    params={"format": "json"}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error reading selection: {e}")
            return None
        if resp.status_code != 200:
            # No current selection
            return None
        try:
            return resp.json()
        except ValueError:
            logger.debug(f"Unexpected selection payload: {resp.text[:80]}")
            return None


class StellariumViewSink(ViewSink):
    """
    View sink steering Stellarium.

    Stellarium has no indicator overlay; the bearing is kept on the sink
    and logged when its visibility changes.
    """

    def __init__(self, client: StellariumClient):
        self.client = client
        self.bearing: Optional[BearingResult] = None

    def show_direction(self, direction: HorizontalDirection) -> None:
        self.client.set_view(direction)

    def show_bearing(self, bearing: BearingResult) -> None:
        previous = self.bearing
        self.bearing = bearing
        if previous is not None and previous.visible == bearing.visible:
            return
        if bearing.visible:
            logger.info(f"Target off screen: turn {bearing.angle_deg:+.0f}° "
                        f"({bearing.distance_deg:.1f}° away)")
        else:
            logger.info("Target in view")


class StellariumTargetProvider(TargetProvider):
    """Target provider reading Stellarium's current selection."""

    def __init__(self, client: StellariumClient, apparent: bool = True):
        """
        Args:
            client: Remote Control client
            apparent: Use refraction-corrected coordinates instead of
                the geometric ones
        """
        self.client = client
        self.apparent = apparent

    def get_target(self) -> Optional[HorizontalDirection]:
        info = self.client.selected_object()
        if not info:
            return None

        if self.apparent:
            keys = ("azimuth", "altitude")
        else:
            keys = ("azimuth-geometric", "altitude-geometric")

        try:
            azimuth = float(info[keys[0]])
            altitude = float(info[keys[1]])
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Selection {info.get('name', '?')} has no horizontal coordinates")
            return None

        return HorizontalDirection(azimuth=normalize_360(azimuth), altitude=altitude)
