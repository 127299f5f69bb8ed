"""
Collaborator interfaces of the orientation controller.

One implementation of each is chosen when the controller is built;
nothing is probed per sample.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .orientation import OrientationSample, HorizontalDirection
from .bearing import BearingResult


SampleCallback = Callable[[OrientationSample], None]


class SensorSource(ABC):
    """Delivers orientation samples to a single subscriber."""

    @abstractmethod
    def start(self, callback: SampleCallback,
              on_compass: Optional[SampleCallback] = None) -> None:
        """
        Subscribe and begin delivering samples.

        Args:
            callback: Called with every orientation sample
            on_compass: Called with samples of a separate absolute
                compass stream, when the source has one
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering samples and drop the subscription."""

    @property
    @abstractmethod
    def running(self) -> bool:
        """True while samples are being delivered."""


class ViewSink(ABC):
    """Receives the smoothed direction and the bearing indicator state."""

    @abstractmethod
    def show_direction(self, direction: HorizontalDirection) -> None:
        """Point the view at a horizontal direction."""

    @abstractmethod
    def show_bearing(self, bearing: BearingResult) -> None:
        """Update the directional indicator."""


class TargetProvider(ABC):
    """Pull source for the currently selected target."""

    @abstractmethod
    def get_target(self) -> Optional[HorizontalDirection]:
        """Target in horizontal coordinates, or None if nothing is selected."""


class RecordingSink(ViewSink):
    """View sink that keeps everything it is shown."""

    def __init__(self):
        self.directions: list[HorizontalDirection] = []
        self.bearings: list[BearingResult] = []

    def show_direction(self, direction: HorizontalDirection) -> None:
        self.directions.append(direction.copy())

    def show_bearing(self, bearing: BearingResult) -> None:
        self.bearings.append(bearing)

    @property
    def last_direction(self) -> Optional[HorizontalDirection]:
        return self.directions[-1] if self.directions else None

    @property
    def last_bearing(self) -> Optional[BearingResult]:
        return self.bearings[-1] if self.bearings else None


class StaticTargetProvider(TargetProvider):
    """Target provider returning a fixed (or no) target."""

    def __init__(self, target: Optional[HorizontalDirection] = None):
        self.target = target
        self.calls = 0

    def get_target(self) -> Optional[HorizontalDirection]:
        self.calls += 1
        return self.target
