"""
Stellar AR
==========

Augmented reality sky view control from device orientation sensors.

Turns raw orientation samples (alpha, beta, gamma) into a stabilized
viewing direction for a planetarium view such as Stellarium, and computes
a bearing indicator pointing at the selected object.

Main components:
- orientation: Euler angles to horizontal coordinates (azimuth, altitude)
- heading: Platform heading source selection
- smoother: Adaptive exponential smoothing with pole-band damping
- bearing: Bearing indicator and rate-limited target polling
- controller: Per-sample pipeline and enable/disable lifecycle
- stellarium: Stellarium Remote Control view sink and target provider
- sources: Replay, simulated and MAVLink sensor sources
"""

__version__ = "0.1.0"

from .config import Config
from .orientation import (
    OrientationSample,
    HorizontalDirection,
    compute_direction,
    forward_vector,
    normalize_360,
    wrap_180,
)
from .heading import HeadingPolicy, HeadingSelector
from .smoother import AdaptiveSmoother, SmootherState, SmoothingBands, smoothing_factor, step
from .bearing import BearingResult, TargetPoller, compute_bearing
from .interfaces import SensorSource, ViewSink, TargetProvider, RecordingSink, StaticTargetProvider
from .controller import OrientationController, ControllerStatus

__all__ = [
    "Config",
    "OrientationSample",
    "HorizontalDirection",
    "compute_direction",
    "forward_vector",
    "normalize_360",
    "wrap_180",
    "HeadingPolicy",
    "HeadingSelector",
    "AdaptiveSmoother",
    "SmootherState",
    "SmoothingBands",
    "smoothing_factor",
    "step",
    "BearingResult",
    "TargetPoller",
    "compute_bearing",
    "SensorSource",
    "ViewSink",
    "TargetProvider",
    "RecordingSink",
    "StaticTargetProvider",
    "OrientationController",
    "ControllerStatus",
    "__version__",
]
