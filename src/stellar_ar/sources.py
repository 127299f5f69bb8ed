"""
Orientation sample sources.

- ReplaySource: recorded samples from CSV or JSON-lines files
- SimulatedSource: scripted sweep with sensor jitter, no hardware needed
- MavlinkSource: ATTITUDE messages from an ArduPilot flight controller
"""

import csv
import json
import math
import time
import logging
import threading
from abc import abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import numpy as np

from .orientation import OrientationSample, normalize_360
from .interfaces import SensorSource, SampleCallback


logger = logging.getLogger(__name__)

SAMPLE_FIELDS = ["timestamp", "alpha", "beta", "gamma", "absolute", "heading_hint"]


def _parse_float(value) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "" or value.lower() in ("null", "none", "nan"):
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        # Left for coerce_angle to report
        return value


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def sample_from_record(record: dict) -> OrientationSample:
    """Build a sample from a CSV row or JSON object."""
    return OrientationSample(
        alpha=_parse_float(record.get("alpha")),
        beta=_parse_float(record.get("beta")),
        gamma=_parse_float(record.get("gamma")),
        absolute=_parse_bool(record.get("absolute", False)),
        heading_hint=_parse_float(record.get("heading_hint")),
        timestamp=float(_parse_float(record.get("timestamp")) or 0.0),
    )


def load_samples(path: Path) -> List[OrientationSample]:
    """
    Load recorded samples.

    Args:
        path: .csv file with a header row, or .jsonl / .json-lines file

    Returns:
        Samples in file order
    """
    path = Path(path)
    samples = []

    with open(path, "r", newline="") as f:
        if path.suffix.lower() == ".csv":
            for row in csv.DictReader(f):
                samples.append(sample_from_record(row))
        else:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}:{line_no}: invalid JSON sample: {e}") from e
                samples.append(sample_from_record(record))

    logger.info(f"Loaded {len(samples)} samples from {path}")
    return samples


def save_samples(path: Path, samples: Iterable[OrientationSample]) -> int:
    """Write samples as CSV or JSON lines, chosen by file suffix."""
    path = Path(path)
    count = 0

    with open(path, "w", newline="") as f:
        if path.suffix.lower() == ".csv":
            writer = csv.DictWriter(f, fieldnames=SAMPLE_FIELDS)
            writer.writeheader()
            for sample in samples:
                writer.writerow({k: getattr(sample, k) for k in SAMPLE_FIELDS})
                count += 1
        else:
            for sample in samples:
                f.write(json.dumps({k: getattr(sample, k) for k in SAMPLE_FIELDS}) + "\n")
                count += 1

    return count


class SampleSource(SensorSource):
    """
    Finite source pumped from the caller's thread.

    start() only subscribes; pump() delivers the samples.
    """

    def __init__(self, realtime: bool = False):
        self.realtime = realtime
        self._callback: Optional[SampleCallback] = None
        self._on_compass: Optional[SampleCallback] = None

    def start(self, callback: SampleCallback,
              on_compass: Optional[SampleCallback] = None) -> None:
        self._callback = callback
        self._on_compass = on_compass

    def stop(self) -> None:
        self._callback = None
        self._on_compass = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    @abstractmethod
    def samples(self) -> Iterator[OrientationSample]:
        """Samples in delivery order."""

    def pump(self) -> int:
        """
        Deliver samples until exhausted or stopped.

        Returns:
            Number of samples delivered
        """
        delivered = 0
        last_ts = None

        for sample in self.samples():
            if not self.running:
                break

            if self.realtime and last_ts is not None:
                time.sleep(max(0.0, sample.timestamp - last_ts))
            last_ts = sample.timestamp

            if sample.absolute and self._on_compass is not None:
                self._on_compass(sample)
            self._callback(sample)
            delivered += 1

        return delivered


class ReplaySource(SampleSource):
    """Replays samples recorded to a file."""

    def __init__(self, path: Path, realtime: bool = False):
        super().__init__(realtime=realtime)
        self.path = Path(path)
        self._samples: Optional[List[OrientationSample]] = None

    def samples(self) -> Iterator[OrientationSample]:
        if self._samples is None:
            self._samples = load_samples(self.path)
        return iter(self._samples)


class SimulatedSource(SampleSource):
    """
    Simulated handheld device for testing without hardware.

    The device is held upright and turned slowly clockwise while
    nodding up and down; Gaussian jitter mimics sensor noise.
    """

    def __init__(self, rate_hz: float = 30.0, duration_s: float = 10.0,
                 turn_rate_dps: float = 20.0, nod_amplitude_deg: float = 30.0,
                 nod_period_s: float = 8.0, jitter_deg: float = 0.5,
                 seed: Optional[int] = None, realtime: bool = False):
        super().__init__(realtime=realtime)
        self.rate_hz = rate_hz
        self.duration_s = duration_s
        self.turn_rate_dps = turn_rate_dps
        self.nod_amplitude_deg = nod_amplitude_deg
        self.nod_period_s = nod_period_s
        self.jitter_deg = jitter_deg
        self.seed = seed

    def samples(self) -> Iterator[OrientationSample]:
        rng = np.random.default_rng(self.seed)
        n = int(self.duration_s * self.rate_hz)
        t = np.arange(n) / self.rate_hz

        noise = rng.normal(0.0, self.jitter_deg, size=(n, 3)) if self.jitter_deg > 0 else np.zeros((n, 3))

        # Alpha runs counter-clockwise, so a clockwise turn decreases it
        alpha = -self.turn_rate_dps * t + noise[:, 0]
        beta = 90.0 + self.nod_amplitude_deg * np.sin(2 * math.pi * t / self.nod_period_s) + noise[:, 1]
        gamma = noise[:, 2]

        for i in range(n):
            yield OrientationSample(
                alpha=normalize_360(float(alpha[i])),
                beta=float(beta[i]),
                gamma=float(gamma[i]),
                absolute=True,
                timestamp=float(t[i]),
            )


class MavlinkSource(SensorSource):
    """
    Orientation from a MAVLink flight controller (e.g. Orange Cube).

    ATTITUDE messages are read in a background thread and mapped to
    alpha = -yaw, beta = pitch, gamma = roll, all absolute.
    """

    def __init__(self, port: str = "/dev/ttyACM0", baudrate: int = 115200,
                 stream_rate_hz: int = 50):
        """
        Args:
            port: Serial port (e.g. "COM6" on Windows, "/dev/ttyACM0" on Linux)
            baudrate: Baud rate (typically 115200)
            stream_rate_hz: Requested ATTITUDE stream rate
        """
        self.port = port
        self.baudrate = baudrate
        self.stream_rate_hz = stream_rate_hz

        self._connection = None
        self._callback: Optional[SampleCallback] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self, callback: SampleCallback,
              on_compass: Optional[SampleCallback] = None) -> None:
        from pymavlink import mavutil

        connection_string = f"serial:{self.port}:{self.baudrate}"
        logger.info(f"Connecting to flight controller: {connection_string}")

        self._connection = mavutil.mavlink_connection(connection_string)
        self._connection.wait_heartbeat(timeout=10)
        logger.info(f"Heartbeat received from system {self._connection.target_system}")

        self._connection.mav.request_data_stream_send(
            self._connection.target_system,
            self._connection.target_component,
            mavutil.mavlink.MAV_DATA_STREAM_EXTRA1,  # Attitude
            self.stream_rate_hz,
            1,
        )

        self._callback = callback
        self._running = True
        self._thread = threading.Thread(target=self._read_loop, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._running = False
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._connection:
            self._connection.close()
            self._connection = None
        self._callback = None

    @property
    def running(self) -> bool:
        return self._running

    @staticmethod
    def attitude_to_sample(msg) -> OrientationSample:
        """Map an ATTITUDE message (radians, NED) to an orientation sample."""
        yaw = math.degrees(msg.yaw)
        return OrientationSample(
            alpha=normalize_360(-yaw),
            beta=math.degrees(msg.pitch),
            gamma=math.degrees(msg.roll),
            absolute=True,
            timestamp=msg.time_boot_ms / 1000.0,
        )

    def _read_loop(self):
        while self._running and self._connection:
            try:
                msg = self._connection.recv_match(type="ATTITUDE", blocking=True, timeout=0.1)
                if msg is None:
                    continue
                callback = self._callback
                if callback is not None:
                    callback(self.attitude_to_sample(msg))
            except Exception as e:
                if self._running:
                    logger.warning(f"MAVLink read error: {e}")
                    time.sleep(0.1)


def create_source(config) -> SensorSource:
    """
    Build the sensor source described by a SourceConfig.

    Args:
        config: SourceConfig

    Returns:
        SensorSource instance
    """
    if config.kind == "replay":
        if config.path is None:
            raise ValueError("Replay source needs a path")
        return ReplaySource(config.path, realtime=config.realtime)
    if config.kind == "simulated":
        return SimulatedSource(
            rate_hz=config.rate_hz,
            duration_s=config.duration_s,
            jitter_deg=config.jitter_deg,
            seed=config.seed,
            realtime=config.realtime,
        )
    if config.kind == "mavlink":
        return MavlinkSource(port=config.mavlink_port, baudrate=config.mavlink_baud)
    raise ValueError(f"Unknown source kind: {config.kind}")
