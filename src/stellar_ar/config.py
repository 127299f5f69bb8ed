"""
Configuration management for the AR orientation controller.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional
import yaml

from .heading import HeadingPolicy
from .smoother import SmoothingBands


@dataclass
class HeadingConfig:
    """Heading source selection."""

    policy: Literal["alpha", "compass_hint"] = "alpha"

    def to_policy(self) -> HeadingPolicy:
        return HeadingPolicy(self.policy)


@dataclass
class SmootherConfig:
    """Adaptive smoothing factors."""

    pole_band: tuple[float, float] = (85.0, 95.0)
    pole_factor: float = 0.05
    approach_band: tuple[float, float] = (80.0, 100.0)
    approach_factor: float = 0.10
    fast_threshold: float = 10.0  # deg/sample
    fast_factor: float = 0.4
    medium_threshold: float = 5.0
    medium_factor: float = 0.3
    slow_factor: float = 0.2

    def to_bands(self) -> SmoothingBands:
        return SmoothingBands(
            pole_band=tuple(self.pole_band),
            pole_factor=self.pole_factor,
            approach_band=tuple(self.approach_band),
            approach_factor=self.approach_factor,
            fast_threshold=self.fast_threshold,
            fast_factor=self.fast_factor,
            medium_threshold=self.medium_threshold,
            medium_factor=self.medium_factor,
            slow_factor=self.slow_factor,
        )


@dataclass
class BearingConfig:
    """Target bearing indicator."""

    fov_threshold_deg: float = 15.0
    refresh_interval_s: float = 0.2


@dataclass
class StellariumConfig:
    """Stellarium Remote Control plugin connection."""

    url: str = "http://localhost:8090"
    timeout_s: float = 0.5
    apparent_coordinates: bool = True  # Use refraction-corrected az/alt of the target


@dataclass
class SourceConfig:
    """Sensor source selection."""

    kind: Literal["replay", "simulated", "mavlink"] = "simulated"
    path: Optional[Path] = None         # Replay file (.csv or .jsonl)
    realtime: bool = False              # Replay with recorded timing
    rate_hz: float = 30.0               # Simulated sample rate
    duration_s: float = 10.0
    jitter_deg: float = 0.5
    seed: Optional[int] = None
    mavlink_port: str = "/dev/ttyACM0"
    mavlink_baud: int = 115200


@dataclass
class Config:
    """Main configuration container."""

    heading: HeadingConfig = field(default_factory=HeadingConfig)
    smoother: SmootherConfig = field(default_factory=SmootherConfig)
    bearing: BearingConfig = field(default_factory=BearingConfig)
    stellarium: StellariumConfig = field(default_factory=StellariumConfig)
    source: SourceConfig = field(default_factory=SourceConfig)

    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "heading" in data:
            config.heading = HeadingConfig(**data["heading"])
            # Fail early on unknown policies
            config.heading.to_policy()
        if "smoother" in data:
            smoother_data = dict(data["smoother"])
            for key in ("pole_band", "approach_band"):
                if key in smoother_data:
                    smoother_data[key] = tuple(smoother_data[key])
            config.smoother = SmootherConfig(**smoother_data)
        if "bearing" in data:
            config.bearing = BearingConfig(**data["bearing"])
        if "stellarium" in data:
            config.stellarium = StellariumConfig(**data["stellarium"])
        if "source" in data:
            src_data = dict(data["source"])
            if src_data.get("path") is not None:
                src_data["path"] = Path(src_data["path"])
            config.source = SourceConfig(**src_data)

        config.verbose = data.get("verbose", False)

        return config

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        import dataclasses

        def convert(obj):
            if dataclasses.is_dataclass(obj):
                return {k: convert(v) for k, v in dataclasses.asdict(obj).items()}
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, tuple):
                return [convert(v) for v in obj]
            elif isinstance(obj, Path):
                return str(obj)
            return obj

        data = convert(self)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
