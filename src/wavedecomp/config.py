from __future__ import annotations

"""Configuration utilities for wavedecomp.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the parameters of every pipeline stage
(spectral transform, window prober, threshold policy, interval joiner) as well
as the options of the surrounding tooling such as signal generation, export
and logging.  Instances can be populated from environment variables or from
YAML/JSON files with matching nested keys.
"""

import json
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _split_floats(value: str) -> list[float]:
    return [float(item) for item in value.split(",") if item.strip()]


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class SpectralSettings(SectionModel):
    """Evaluation strategy of the discrete Fourier transform."""

    method: Literal["fft", "direct"] = "fft"


class ProbeSettings(SectionModel):
    """Sliding-window prober options."""

    step: int = Field(default=1, ge=1)
    smooth: bool = True
    span_periods: int = Field(default=4, ge=1)


class ThresholdSettings(SectionModel):
    """Policy turning a presence series into candidate segments."""

    mode: Literal["noise", "relative", "fixed"] = "noise"
    sigma: float = Field(default=2.5, ge=0.0)
    leakage: float = Field(default=0.05, ge=0.0, lt=1.0)
    ratio: float = Field(default=0.5, gt=0.0, le=1.0)
    fixed: float = 0.5
    floor: float = Field(default=0.15, ge=0.0)
    refine: bool = True
    edge_ratio: float = Field(default=0.5, gt=0.0, le=1.0)


class JoinSettings(SectionModel):
    """Interval joiner options."""

    min_duration_periods: int = Field(default=5, ge=0)
    keep_edge_waves: bool = True
    edge_fraction: float = Field(default=0.5, ge=0.0, le=1.0)


class DecomposeSettings(SectionModel):
    """Orchestrator options."""

    frequencies: list[float] = Field(default_factory=list)
    workers: int = Field(default=1, ge=1)

    @field_validator("frequencies", mode="before")
    @classmethod
    def _coerce_float_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _split_floats(value)
        if isinstance(value, (int, float)):
            return [float(value)]
        if isinstance(value, (list, tuple)):
            return [float(item) for item in value]
        return value


class GenerateSettings(SectionModel):
    """Synthetic composite signal options."""

    length: int = Field(default=1000, gt=0)
    noise: bool = True
    noise_level: float = Field(default=0.15, ge=0.0)
    seed: int | None = 0


class ExportSettings(SectionModel):
    """Default output locations of the diagnostic dumps."""

    presence_csv: str | None = None
    waves: str | None = None


class LoggingSettings(SectionModel):
    """Logging verbosity and format."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s:%(name)s:%(message)s"


class VizSettings(SectionModel):
    """Configuration for simple visualisation helpers."""

    title: str = "Signal"
    save: str | None = None


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    spectral: SpectralSettings = Field(default_factory=SpectralSettings)
    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    threshold: ThresholdSettings = Field(default_factory=ThresholdSettings)
    join: JoinSettings = Field(default_factory=JoinSettings)
    decompose: DecomposeSettings = Field(default_factory=DecomposeSettings)
    generate: GenerateSettings = Field(default_factory=GenerateSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    viz: VizSettings = Field(default_factory=VizSettings)

    model_config = SettingsConfigDict(
        env_prefix="WAVEDECOMP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        class LegacyEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LegacyEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)
