from __future__ import annotations

"""Command line interface for wavedecomp using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging

import numpy as np
import typer
from pydantic import ValidationError

from .config import Settings, load_settings
from .core.decompose import decompose_with_diagnostics, presence_table
from .export import (
    component_table,
    harmonics_table,
    read_waves,
    spectrum_table,
    write_waves,
)
from .generate import demo_base_signals, generate as generate_signal
from .ingest import SignalFormatError, load_signal
from .utils.logging import get_logger

app = typer.Typer(help="Decompose composite signals into base sinusoids")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _load(path: Path) -> np.ndarray:
    try:
        return load_signal(path)
    except (OSError, SignalFormatError) as exc:
        raise typer.BadParameter(f"failed to load signal: {exc}") from exc


def _save_signal(path: Path, data: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".csv":
        np.savetxt(path, data, delimiter=",")
    elif path.suffix == ".npy":
        np.save(path, data)
    else:
        raise typer.BadParameter(f"unsupported output format {path.suffix!r}, expected .npy or .csv")


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. threshold.sigma=3",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if config is not None and not config.exists():
        raise typer.BadParameter(f"configuration file not found: {config}")

    try:
        settings = load_settings(config) if config else Settings()
    except (ValidationError, TypeError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("wavedecomp", settings.logging.level, settings.logging.format)
    ctx.obj = settings


@app.command()
def generate(
    ctx: typer.Context,
    output: Path = typer.Option(..., "--output", "-o", help="Destination .npy or .csv file"),
    length: Optional[int] = typer.Option(None, "--length", "-n"),
    noise: Optional[bool] = typer.Option(None, "--noise/--no-noise"),
    seed: Optional[int] = typer.Option(None, "--seed"),
    tables: Optional[Path] = typer.Option(
        None,
        "--tables",
        file_okay=False,
        dir_okay=True,
        help="Directory receiving spectrum, harmonic and component CSV tables",
    ),
) -> None:
    """Write the three-component demo signal.

    The signal sums base sinusoids with frequency factors 5, 2 and 10 that
    switch on and off at different volumes.  With ``--tables`` the diagnostic
    tables of the signal and of each component are written as well.
    """

    cfg: Settings = ctx.obj
    length = length if length is not None else cfg.generate.length
    noise = noise if noise is not None else cfg.generate.noise
    seed = seed if seed is not None else cfg.generate.seed
    if length <= 0:
        raise typer.BadParameter("length must be positive")

    base_signals = demo_base_signals(length)
    signal = generate_signal(
        length,
        base_signals,
        noise=noise,
        noise_level=cfg.generate.noise_level,
        seed=seed,
    )
    _save_signal(output, signal)
    freqs = ", ".join(f"{s.freq_factor:g}" for s in base_signals)
    typer.echo(f"wrote {length} samples to {output} (frequencies: {freqs})")

    if tables is not None:
        tables.mkdir(parents=True, exist_ok=True)
        method = cfg.spectral.method
        spectrum_table(signal, method=method).write_csv(tables / "repaired-signal.csv")
        harmonics_table(signal, [s.freq_factor for s in base_signals], method=method).write_csv(
            tables / "base_harmonics.csv"
        )
        for index, base in enumerate(base_signals, start=1):
            component_table(signal, base, method=method).write_csv(tables / f"base_signal_{index}.csv")
        typer.echo(f"wrote diagnostic tables to {tables}")


@app.command()
def decompose(
    ctx: typer.Context,
    signal: Path = typer.Argument(..., help="Signal file (.npy, .npz or .csv)"),
    freq: List[float] = typer.Option([], "--freq", "-f", help="Frequency factor to look for (repeatable)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Waves file (.csv or .json)"),
    presence: Optional[Path] = typer.Option(None, "--presence", help="Presence table CSV"),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1),
) -> None:
    """Print the waves of every requested frequency found in ``signal``."""

    cfg: Settings = ctx.obj
    frequencies = list(freq) or list(cfg.decompose.frequencies)
    if not frequencies:
        raise typer.BadParameter("no frequencies given; use --freq or decompose.frequencies")

    data = _load(signal)
    result = decompose_with_diagnostics(data, frequencies, settings=cfg, workers=workers)

    typer.echo(f"Signal decomposition ({len(result.waves)} waves):")
    for wave in result.waves:
        typer.echo(f"  {wave}")

    output = output or (Path(cfg.export.waves) if cfg.export.waves else None)
    if output is not None:
        try:
            write_waves(output, result.waves)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(f"wrote waves to {output}")

    presence = presence or (Path(cfg.export.presence_csv) if cfg.export.presence_csv else None)
    if presence is not None:
        presence_table(result).write_csv(presence)
        typer.echo(f"wrote presence table to {presence}")


@app.command()
def spectrum(
    ctx: typer.Context,
    signal: Path = typer.Argument(..., help="Signal file (.npy, .npz or .csv)"),
    output: Path = typer.Option(..., "--output", "-o", help="Destination CSV"),
) -> None:
    """Write the signal, its amplitude spectrum and the repaired signal."""

    cfg: Settings = ctx.obj
    data = _load(signal)
    table = spectrum_table(data, method=cfg.spectral.method)
    table.write_csv(output)
    typer.echo(f"wrote {table.rows} rows to {output}")


@app.command()
def viz(
    ctx: typer.Context,
    signal: Path = typer.Argument(..., help="Signal file (.npy, .npz or .csv)"),
    waves: Optional[Path] = typer.Option(None, "--waves", help="Waves file to overlay"),
    save: Optional[Path] = typer.Option(None, "--save", help="Save the figure instead of showing it"),
) -> None:
    """Plot ``signal`` with the spans of previously detected waves."""

    from .viz.helpers import save_or_show
    from .viz.plot_signal import plot_signal

    cfg: Settings = ctx.obj
    data = _load(signal)
    detected = read_waves(waves) if waves is not None else []
    fig = plot_signal(data, detected, title=cfg.viz.title)
    save_path = save or cfg.viz.save
    save_or_show(fig, save_path)
    if save_path:
        typer.echo(f"saved figure to {save_path}")


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
