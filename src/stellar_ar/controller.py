"""
Device orientation controller.

Runs one synchronous pass per orientation sample:

    heading selection -> transform -> smoother -> view sink
                                        -> target poll -> bearing -> view sink

The controller owns the smoother state and the last target refresh time.
Samples must be delivered from a single thread.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Config
from .orientation import OrientationSample, HorizontalDirection, compute_direction
from .heading import HeadingPolicy, HeadingSelector
from .smoother import AdaptiveSmoother, SmoothingBands
from .bearing import BearingResult, TargetPoller, compute_bearing, DEFAULT_FOV_THRESHOLD
from .interfaces import SensorSource, ViewSink, TargetProvider


logger = logging.getLogger(__name__)


@dataclass
class ControllerStatus:
    """Snapshot of the controller for display or logging."""
    enabled: bool
    supported: bool                 # A sensor source is attached and running
    alpha: float
    beta: float
    gamma: float
    direction: Optional[HorizontalDirection]
    target: Optional[HorizontalDirection]
    bearing: Optional[BearingResult]

    @property
    def has_target(self) -> bool:
        return self.target is not None


class OrientationController:
    """
    Drives a view from device orientation samples.

    Typical use:

        controller = OrientationController(sink, target_provider=provider)
        controller.enable(source)
        ...
        controller.disable()
    """

    def __init__(self, sink: ViewSink,
                 target_provider: Optional[TargetProvider] = None,
                 heading_policy: HeadingPolicy = HeadingPolicy.ALPHA,
                 bands: Optional[SmoothingBands] = None,
                 fov_threshold: float = DEFAULT_FOV_THRESHOLD,
                 poller: Optional[TargetPoller] = None):
        """
        Initialize the controller.

        Args:
            sink: View sink receiving directions and bearings
            target_provider: Source of the selected target (optional)
            heading_policy: Heading selection for the platform
            bands: Smoothing factor table (default bands when None)
            fov_threshold: Separation below which the pointer is hidden
            poller: Pre-built target poller, overrides target_provider
        """
        self.sink = sink
        self.heading = HeadingSelector(heading_policy)
        self.smoother = AdaptiveSmoother(bands)
        self.poller = poller or TargetPoller(target_provider)
        self.fov_threshold = fov_threshold

        self.source: Optional[SensorSource] = None
        self.enabled = False

        self.alpha = 0.0
        self.beta = 0.0
        self.gamma = 0.0
        self.raw: Optional[HorizontalDirection] = None
        self.bearing: Optional[BearingResult] = None

    @classmethod
    def from_config(cls, config: Config, sink: ViewSink,
                    target_provider: Optional[TargetProvider] = None) -> "OrientationController":
        """Build a controller from a Config."""
        poller = TargetPoller(
            target_provider,
            min_interval=config.bearing.refresh_interval_s,
        )
        return cls(
            sink,
            heading_policy=config.heading.to_policy(),
            bands=config.smoother.to_bands(),
            fov_threshold=config.bearing.fov_threshold_deg,
            poller=poller,
        )

    def enable(self, source: Optional[SensorSource] = None):
        """
        Start tracking.

        Resets the smoother so that the first sample seeds the view.

        Args:
            source: Sensor source to subscribe to (None when samples are
                pushed through on_sample directly)

        Raises:
            Whatever source.start() raises; the controller stays disabled
        """
        self.smoother.reset()
        self.poller.reset()
        self.bearing = None

        if source is not None:
            # State is committed only once the source has started
            source.start(self.on_sample, on_compass=self.on_compass_heading)
            self.source = source

        self.enabled = True
        logger.info("Device orientation enabled")

    def disable(self):
        """Stop tracking and unsubscribe from the source."""
        self.enabled = False
        if self.source is not None:
            self.source.stop()
            self.source = None

        self.sink.show_bearing(BearingResult.hidden())
        logger.info("Device orientation disabled")

    def on_compass_heading(self, sample: OrientationSample):
        """Track the heading of an absolute compass stream."""
        self.heading.observe_absolute(sample)

    def on_sample(self, sample: OrientationSample) -> Optional[HorizontalDirection]:
        """
        Process one orientation sample.

        Args:
            sample: Raw sensor sample

        Returns:
            Smoothed direction, or None when disabled
        """
        if not self.enabled:
            return None

        self.alpha, self.beta, self.gamma = sample.angles()
        heading = self.heading.select(sample)

        self.raw = compute_direction(heading, self.beta, self.gamma)
        direction = self.smoother.update(self.raw)
        self.sink.show_direction(direction)

        self.update_navigation()
        return direction

    def update_navigation(self, now: Optional[float] = None) -> BearingResult:
        """Refresh the target if due and push the bearing to the sink."""
        direction = self.smoother.direction
        target = self.poller.current(now)

        if direction is None:
            bearing = BearingResult.hidden()
        else:
            bearing = compute_bearing(direction, target, self.fov_threshold)

        if self.bearing is None or bearing.visible != self.bearing.visible:
            logger.debug(f"Bearing indicator {'shown' if bearing.visible else 'hidden'}")

        self.bearing = bearing
        self.sink.show_bearing(bearing)
        return bearing

    def set_target(self, target: Optional[HorizontalDirection]):
        """Manually select a target (None clears it)."""
        if target is None:
            self.poller.clear()
        else:
            self.poller.set_target(target)

    def get_status(self) -> ControllerStatus:
        """Current controller status."""
        return ControllerStatus(
            enabled=self.enabled,
            supported=self.source is not None and self.source.running,
            alpha=self.alpha,
            beta=self.beta,
            gamma=self.gamma,
            direction=self.smoother.direction,
            target=self.poller.target,
            bearing=self.bearing,
        )
