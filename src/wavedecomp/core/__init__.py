"""Core algorithms and data structures for wavedecomp."""

from .spectral import (
    forward_transform,
    inverse_transform,
    inverse_transform_single,
    isolate_harmonic,
    magnitude_spectrum,
    phase_spectrum,
    frequency_to_index,
    frequency_to_period,
)
from .filters import (
    CacheConflictError,
    FilteredSignal,
    ReferenceToneCache,
    filter_by_frequency,
    low_pass,
    high_pass,
    quadrature_tone,
)
from .noise import noise_sigma, presence_noise_scale
from .probe import PresenceSeries, analysis_width, probe_presence
from .segment import ThresholdPolicy, find_segments, refine_run, segment_presence
from .join import join_pass, join_waves
from .decompose import DecompositionResult, decompose, decompose_with_diagnostics, presence_table

__all__ = [
    "forward_transform",
    "inverse_transform",
    "inverse_transform_single",
    "isolate_harmonic",
    "magnitude_spectrum",
    "phase_spectrum",
    "frequency_to_index",
    "frequency_to_period",
    "CacheConflictError",
    "FilteredSignal",
    "ReferenceToneCache",
    "filter_by_frequency",
    "low_pass",
    "high_pass",
    "quadrature_tone",
    "noise_sigma",
    "presence_noise_scale",
    "PresenceSeries",
    "analysis_width",
    "probe_presence",
    "ThresholdPolicy",
    "find_segments",
    "refine_run",
    "segment_presence",
    "join_pass",
    "join_waves",
    "DecompositionResult",
    "decompose",
    "decompose_with_diagnostics",
    "presence_table",
]
