"""
Command-line interface for the AR orientation controller.
"""

import sys
import csv
import time
from pathlib import Path
from typing import Optional
import logging

import click

from . import __version__
from .config import Config
from .orientation import OrientationSample, HorizontalDirection, compute_direction
from .heading import HeadingPolicy, HeadingSelector
from .controller import OrientationController
from .interfaces import RecordingSink, StaticTargetProvider
from .sources import ReplaySource, SimulatedSource, SampleSource, create_source, save_samples
from .stellarium import StellariumClient, StellariumViewSink, StellariumTargetProvider


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _load_config(config: Optional[Path], verbose: bool) -> Config:
    try:
        cfg = Config.from_yaml(config) if config else Config()
    except Exception as e:
        click.echo(click.style(f"✗ Invalid configuration: {e}", fg="red"))
        sys.exit(1)

    cfg.verbose = cfg.verbose or verbose
    if cfg.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    return cfg


def _target_option(target_az: Optional[float], target_alt: Optional[float]) -> Optional[HorizontalDirection]:
    if target_az is None and target_alt is None:
        return None
    if target_az is None or target_alt is None:
        raise click.UsageError("--target-az and --target-alt must be given together")
    return HorizontalDirection(azimuth=target_az % 360.0, altitude=target_alt)


@click.group()
@click.version_option(version=__version__)
def main():
    """Stellar AR - Steer a sky view with device orientation."""
    pass


@main.command()
@click.argument("alpha", type=float)
@click.argument("beta", type=float)
@click.argument("gamma", type=float)
@click.option(
    "--heading-hint",
    type=float,
    default=None,
    help="Platform compass heading (degrees clockwise from north)"
)
@click.option(
    "--policy",
    type=click.Choice([p.value for p in HeadingPolicy]),
    default=HeadingPolicy.ALPHA.value,
    help="Heading selection policy"
)
@click.option(
    "--relative",
    is_flag=True,
    help="Treat alpha as non-absolute"
)
def direction(alpha: float, beta: float, gamma: float,
              heading_hint: Optional[float], policy: str, relative: bool):
    """
    Convert one orientation reading to azimuth/altitude.

    ALPHA BETA GAMMA: Device orientation angles in degrees
    """
    sample = OrientationSample(
        alpha=alpha, beta=beta, gamma=gamma,
        absolute=not relative, heading_hint=heading_hint,
    )
    selector = HeadingSelector(HeadingPolicy(policy))
    result = compute_direction(selector.select(sample), *sample.angles()[1:])

    click.echo(f"Azimuth:  {result.azimuth:.2f}°")
    click.echo(f"Altitude: {result.altitude:.2f}°")


@main.command()
@click.argument("samples_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    help="Write smoothed directions to a CSV file"
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration YAML file"
)
@click.option("--target-az", type=float, default=None, help="Target azimuth (degrees)")
@click.option("--target-alt", type=float, default=None, help="Target altitude (degrees)")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output"
)
def replay(samples_path: Path, output: Optional[Path], config: Optional[Path],
           target_az: Optional[float], target_alt: Optional[float], verbose: bool):
    """
    Run recorded samples through the smoother.

    SAMPLES_PATH: Recorded samples (.csv or .jsonl)
    """
    cfg = _load_config(config, verbose)
    target = _target_option(target_az, target_alt)

    sink = RecordingSink()
    provider = StaticTargetProvider(target) if target is not None else None
    controller = OrientationController.from_config(cfg, sink, target_provider=provider)

    source = ReplaySource(samples_path)
    try:
        controller.enable(source)
        count = source.pump()
        controller.disable()
    except ValueError as e:
        click.echo(click.style(f"✗ Error: {e}", fg="red"))
        sys.exit(1)

    click.echo(f"Replayed {count} samples from {samples_path}")

    final = controller.smoother.direction
    if final is not None:
        click.echo(f"  Final azimuth:  {final.azimuth:.2f}°")
        click.echo(f"  Final altitude: {final.altitude:.2f}°")

    if target is not None:
        # The last bearing is the hidden one pushed by disable()
        shown = sum(1 for b in sink.bearings[:-1] if b.visible)
        click.echo(f"  Indicator shown on {shown}/{count} samples")

    if output:
        with open(output, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["index", "azimuth", "altitude"])
            for i, d in enumerate(sink.directions):
                writer.writerow([i, f"{d.azimuth:.4f}", f"{d.altitude:.4f}"])
        click.echo(f"  Output: {output}")


@main.command()
@click.option(
    "-o", "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output file (.csv or .jsonl)"
)
@click.option("--duration", type=float, default=10.0, help="Duration in seconds")
@click.option("--rate", type=float, default=30.0, help="Sample rate in Hz")
@click.option("--jitter", type=float, default=0.5, help="Sensor jitter (degrees, 1 sigma)")
@click.option("--seed", type=int, default=None, help="Random seed")
def simulate(output: Path, duration: float, rate: float, jitter: float, seed: Optional[int]):
    """Record a simulated handheld sweep for later replay."""
    source = SimulatedSource(rate_hz=rate, duration_s=duration, jitter_deg=jitter, seed=seed)
    count = save_samples(output, source.samples())
    click.echo(f"Wrote {count} samples to {output}")


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration YAML file"
)
@click.option(
    "--source",
    "source_kind",
    type=click.Choice(["replay", "simulated", "mavlink"]),
    default=None,
    help="Sensor source (overrides config)"
)
@click.option(
    "--path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Samples file for the replay source"
)
@click.option("--url", type=str, default=None, help="Stellarium Remote Control URL")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output"
)
def run(config: Optional[Path], source_kind: Optional[str], path: Optional[Path],
        url: Optional[str], verbose: bool):
    """Steer Stellarium from a sensor source."""
    cfg = _load_config(config, verbose)

    if source_kind:
        cfg.source.kind = source_kind
    if path:
        cfg.source.path = path
    if url:
        cfg.stellarium.url = url
    if cfg.source.kind in ("replay", "simulated"):
        # Stellarium follows at sensor pace
        cfg.source.realtime = True

    client = StellariumClient(cfg.stellarium.url, timeout=cfg.stellarium.timeout_s)
    status = client.status()
    if status is None:
        click.echo(click.style("✗ Could not connect to Stellarium", fg="red"))
        click.echo("  Make sure Stellarium is running and the Remote Control plugin is enabled")
        sys.exit(1)
    click.echo(click.style("✓ Connected to Stellarium", fg="green"))

    sink = StellariumViewSink(client)
    provider = StellariumTargetProvider(client, apparent=cfg.stellarium.apparent_coordinates)
    controller = OrientationController.from_config(cfg, sink, target_provider=provider)

    try:
        source = create_source(cfg.source)
    except ValueError as e:
        click.echo(click.style(f"✗ Error: {e}", fg="red"))
        sys.exit(1)

    try:
        controller.enable(source)
    except Exception as e:
        click.echo(click.style(f"✗ Could not start sensor source: {e}", fg="red"))
        sys.exit(1)

    try:
        if isinstance(source, SampleSource):
            source.pump()
        else:
            click.echo("Tracking, press Ctrl+C to stop")
            while True:
                time.sleep(0.5)
    except KeyboardInterrupt:
        click.echo("\nStopping...")
    finally:
        controller.disable()


@main.command()
@click.option("--url", type=str, default="http://localhost:8090", help="Stellarium Remote Control URL")
def status(url: str):
    """Show Stellarium connection and current view."""
    client = StellariumClient(url)
    info = client.status()
    if info is None:
        click.echo(click.style("✗ Stellarium not reachable", fg="red"))
        sys.exit(1)

    click.echo(click.style("✓ Connected to Stellarium", fg="green"))
    view = client.get_view()
    if view is not None:
        click.echo(f"  Azimuth:  {view.azimuth:.1f}°")
        click.echo(f"  Altitude: {view.altitude:.1f}°")

    target = StellariumTargetProvider(client).get_target()
    if target is None:
        click.echo("  No object selected")
    else:
        click.echo(f"  Selection: az {target.azimuth:.1f}°, alt {target.altitude:.1f}°")


@main.command()
@click.argument("output", type=click.Path(path_type=Path), default="stellar_ar.yaml")
def init_config(output: Path):
    """
    Create a default configuration file.

    OUTPUT: Path for the config file (default: stellar_ar.yaml)
    """
    config = Config()
    config.to_yaml(output)
    click.echo(f"Created configuration file: {output}")


if __name__ == "__main__":
    main()
