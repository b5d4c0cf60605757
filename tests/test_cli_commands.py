import json

import numpy as np
import pytest
from typer.testing import CliRunner

from wavedecomp.cli import app
from wavedecomp.generate import SineSignal, generate


def write_signal(tmp_path, second_volume=0.3, noise=False):
    length = 1000
    base = [
        SineSignal.from_intervals(5.0, length, [(100, 500, 1.0), (900, 1000, 1.0)]),
        SineSignal.from_intervals(2.0, length, [(0, 1000, second_volume)]),
    ]
    path = tmp_path / "signal.npy"
    np.save(path, generate(length, base, noise=noise, seed=3))
    return path


def test_generate_writes_signal_and_tables(tmp_path):
    runner = CliRunner()
    out = tmp_path / "demo.npy"
    tables = tmp_path / "tables"
    result = runner.invoke(
        app,
        ["generate", "--output", str(out), "--length", "600", "--no-noise", "--tables", str(tables)],
    )
    assert result.exit_code == 0, result.output
    assert np.load(out).shape == (600,)
    assert "frequencies: 5, 2, 10" in result.stdout
    assert (tables / "repaired-signal.csv").exists()
    assert (tables / "base_harmonics.csv").exists()
    assert (tables / "base_signal_3.csv").exists()


def test_generate_csv_output(tmp_path):
    runner = CliRunner()
    out = tmp_path / "demo.csv"
    result = runner.invoke(app, ["generate", "-o", str(out), "-n", "200", "--seed", "1"])
    assert result.exit_code == 0, result.output
    assert np.loadtxt(out, delimiter=",").shape == (200,)


@pytest.mark.parametrize("noise", [False, True])
@pytest.mark.parametrize("second_volume", [0.3, 0.5])
def test_decompose_outputs(tmp_path, second_volume, noise):
    signal = write_signal(tmp_path, second_volume, noise)
    waves_path = tmp_path / "waves.json"
    presence_path = tmp_path / "presence.csv"
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "decompose",
            str(signal),
            "--freq",
            "5",
            "--freq",
            "2",
            "--output",
            str(waves_path),
            "--presence",
            str(presence_path),
            "--workers",
            "2",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Signal decomposition (3 waves)" in result.stdout
    waves = json.loads(waves_path.read_text())
    assert [w["frequency"] for w in waves] == [5.0, 5.0, 2.0]
    header = presence_path.read_text().splitlines()[0]
    assert header == "presence #1,presence #2"


def test_decompose_frequencies_from_overrides(tmp_path):
    signal = write_signal(tmp_path)
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["--set", "decompose.frequencies=[5]", "--set", "threshold.sigma=3.0", "decompose", str(signal)],
    )
    assert result.exit_code == 0, result.output
    assert "Signal decomposition (2 waves)" in result.stdout


def test_decompose_requires_frequencies(tmp_path):
    signal = write_signal(tmp_path)
    result = CliRunner().invoke(app, ["decompose", str(signal)])
    assert result.exit_code != 0


def test_unknown_override_key(tmp_path):
    signal = write_signal(tmp_path)
    result = CliRunner().invoke(app, ["--set", "threshold.bogus=1", "spectrum", str(signal), "-o", "x.csv"])
    assert result.exit_code != 0


def test_config_file(tmp_path):
    signal = write_signal(tmp_path)
    config = tmp_path / "config.yaml"
    config.write_text("decompose:\n  frequencies: [2]\nlogging:\n  level: WARNING\n")
    result = CliRunner().invoke(app, ["--config", str(config), "decompose", str(signal)])
    assert result.exit_code == 0, result.output
    assert "Signal decomposition (1 waves)" in result.stdout


def test_spectrum_command(tmp_path):
    signal = write_signal(tmp_path)
    out = tmp_path / "spectrum.csv"
    result = CliRunner().invoke(app, ["spectrum", str(signal), "--output", str(out)])
    assert result.exit_code == 0, result.output
    lines = out.read_text().splitlines()
    assert lines[0] == "original,spectrum,repaired"
    assert len(lines) == 1001


def test_bad_signal_file(tmp_path):
    path = tmp_path / "signal.txt"
    path.write_text("1\n")
    result = CliRunner().invoke(app, ["spectrum", str(path), "--output", str(tmp_path / "s.csv")])
    assert result.exit_code != 0


def test_viz_saves_figure(tmp_path):
    signal = write_signal(tmp_path)
    waves_path = tmp_path / "waves.csv"
    runner = CliRunner()
    result = runner.invoke(app, ["decompose", str(signal), "-f", "5", "-o", str(waves_path)])
    assert result.exit_code == 0, result.output

    figure = tmp_path / "signal.png"
    result = runner.invoke(app, ["viz", str(signal), "--waves", str(waves_path), "--save", str(figure)])
    assert result.exit_code == 0, result.output
    assert figure.exists()
