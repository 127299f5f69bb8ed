"""Tests for the command-line interface."""

import csv

from click.testing import CliRunner

from stellar_ar.cli import main
from stellar_ar.config import Config


def test_direction_command():
    result = CliRunner().invoke(main, ["direction", "90", "90", "0"])
    assert result.exit_code == 0
    assert "Azimuth:  270.00°" in result.output
    assert "Altitude: 0.00°" in result.output or "Altitude: -0.00°" in result.output


def test_direction_with_compass_hint():
    result = CliRunner().invoke(
        main, ["direction", "0", "90", "0", "--heading-hint", "45", "--policy", "compass_hint"]
    )
    assert result.exit_code == 0
    assert "Azimuth:  45.00°" in result.output


def test_simulate_then_replay(tmp_path):
    runner = CliRunner()
    samples = tmp_path / "sweep.csv"
    result = runner.invoke(main, ["simulate", "-o", str(samples), "--duration", "2", "--seed", "3"])
    assert result.exit_code == 0
    assert "Wrote 60 samples" in result.output

    output = tmp_path / "smoothed.csv"
    result = runner.invoke(main, [
        "replay", str(samples), "-o", str(output),
        "--target-az", "180", "--target-alt", "0",
    ])
    assert result.exit_code == 0, result.output
    assert "Replayed 60 samples" in result.output
    assert "Indicator shown on" in result.output

    with open(output, newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 60
    assert all(0 <= float(r["azimuth"]) < 360 for r in rows)


def test_replay_requires_both_target_coordinates(tmp_path):
    samples = tmp_path / "s.jsonl"
    samples.write_text('{"alpha": 0, "beta": 90, "gamma": 0}\n')
    result = CliRunner().invoke(main, ["replay", str(samples), "--target-az", "10"])
    assert result.exit_code != 0


def test_replay_bad_config(tmp_path):
    samples = tmp_path / "s.jsonl"
    samples.write_text('{"alpha": 0, "beta": 90, "gamma": 0}\n')
    config = tmp_path / "bad.yaml"
    config.write_text("smoother:\n  bogus: 1\n")
    result = CliRunner().invoke(main, ["replay", str(samples), "-c", str(config)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_init_config(tmp_path):
    path = tmp_path / "stellar_ar.yaml"
    result = CliRunner().invoke(main, ["init-config", str(path)])
    assert result.exit_code == 0
    assert Config.from_yaml(path) == Config()


def test_run_without_stellarium(monkeypatch):
    from stellar_ar import cli

    monkeypatch.setattr(cli.StellariumClient, "status", lambda self: None)
    result = CliRunner().invoke(main, ["run", "--source", "simulated"])
    assert result.exit_code == 1
    assert "Could not connect to Stellarium" in result.output


def test_run_reports_source_start_failure(monkeypatch):
    from stellar_ar import cli

    class BrokenSource(cli.SampleSource):
        def start(self, callback, on_compass=None):
            raise OSError("could not open port /dev/ttyACM0")

        def samples(self):
            return iter([])

    monkeypatch.setattr(cli.StellariumClient, "status", lambda self: {})
    monkeypatch.setattr(cli, "create_source", lambda config: BrokenSource())
    result = CliRunner().invoke(main, ["run", "--source", "mavlink"])
    assert result.exit_code == 1
    assert "Could not start sensor source" in result.output
    assert "/dev/ttyACM0" in result.output
