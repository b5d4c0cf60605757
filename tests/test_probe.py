import logging

import numpy as np
import pytest

from wavedecomp.config import Settings
from wavedecomp.core.filters import ReferenceToneCache
from wavedecomp.core.noise import noise_sigma, presence_noise_scale
from wavedecomp.core.probe import PresenceSeries, analysis_width, probe_presence


def tone(frequency, length, volume=1.0, start=0, stop=None):
    out = volume * np.sin(np.arange(length) / frequency)
    out[:start] = 0.0
    if stop is not None:
        out[stop:] = 0.0
    return out


def test_presence_reads_in_amplitude_units():
    series = probe_presence(tone(5, 400, volume=1.5), 5)
    assert series.period == 31
    assert series.window_width == 124
    assert len(series) == 400 - 124 + 1
    assert series.smoothed
    interior = series.values[20:-20]
    assert np.allclose(interior, 1.5, rtol=0.05)
    assert np.allclose(series.level[20:-20], 1.5, rtol=0.05)


def test_step_and_positions():
    series = probe_presence(tone(5, 400), 5, step=3, smooth=False)
    assert series.step == 3
    assert len(series) == len(range(0, 400 - 124 + 1, 3))
    assert not series.smoothed
    assert series.window_start(2) == 6
    assert series.position(0) == 62
    assert series.position(2) == 68


def test_settings_provide_defaults():
    settings = Settings()
    settings.probe.step = 2
    settings.probe.smooth = False
    settings.probe.span_periods = 2
    series = probe_presence(tone(5, 200), 5, settings=settings)
    assert series.step == 2
    assert not series.smoothed
    assert series.window_width == 62


def test_analysis_width():
    assert analysis_width(5) == 124
    assert analysis_width(2, 3) == 39
    with pytest.raises(ValueError):
        analysis_width(5, 0)


def test_empty_and_short_signals():
    empty = probe_presence([], 5)
    assert len(empty) == 0
    assert empty.peak == 0.0

    short = probe_presence(tone(5, 10), 5)
    assert len(short) == 1
    assert short.window_width == 10
    assert short.position(0) == 5


def test_silence_has_no_presence():
    series = probe_presence(np.zeros(200), 2)
    assert series.peak == pytest.approx(0.0)
    assert series.noise_scale == 0.0


def test_invalid_step():
    with pytest.raises(ValueError):
        probe_presence(tone(5, 100), 5, step=0)


@pytest.mark.parametrize("other", [2.0, 10.0])
def test_steady_neighbour_does_not_leak(other):
    # a loud steady tone at a neighbouring factor stays a few percent of its volume
    series = probe_presence(tone(5, 1000, volume=3.0), other)
    assert series.peak < 0.05 * 3.0


def test_switching_edges_of_neighbour_are_suppressed():
    # factor 5 switched on over [100, 500) spills a transient into factor 10
    # near each switching edge; it lasts at most one window and is opened away
    x = tone(5, 1000, start=100, stop=500)
    series = probe_presence(x, 10)
    assert series.peak < 0.05


def test_burst_cut_by_the_end_keeps_its_ramp():
    series = probe_presence(tone(5, 1000, start=900), 5, smooth=False)
    # the last window holds 100 of its 124 samples of tone
    assert series.values[-1] > 0.85
    assert series.values[-63] < 0.3


def test_quiet_tone_beside_loud_one():
    x = tone(5, 1000, volume=1.0) + tone(2, 1000, volume=0.3)
    series = probe_presence(x, 2)
    interior = series.values[20:-20]
    assert np.allclose(interior, 0.3, atol=0.05)


def test_noise_scale_tracks_noise():
    rng = np.random.default_rng(3)
    x = rng.normal(scale=0.4, size=4000)
    assert noise_sigma(x) == pytest.approx(0.4, rel=0.1)
    series = probe_presence(x, 2)
    # periodic Hann: sum(w**2) / sum(w)**2 == 3 / (2 * width)
    expected = 0.4 * np.sqrt(6.0 / series.window_width)
    assert series.noise_scale == pytest.approx(expected, rel=0.1)
    assert presence_noise_scale(0.4, np.zeros(4)) == 0.0


def test_noise_sigma_ignores_tones():
    rng = np.random.default_rng(4)
    noise = rng.normal(scale=0.2, size=2000)
    x = noise + tone(5, 2000, volume=3.0) + tone(2, 2000, volume=1.0)
    assert noise_sigma(x) == pytest.approx(noise_sigma(noise), rel=0.1)
    assert noise_sigma([1.0]) == 0.0


def test_shared_cache_is_reused():
    cache = ReferenceToneCache()
    probe_presence(tone(5, 400), 5, cache=cache)
    probe_presence(tone(5, 400) * 2, 5, cache=cache)
    assert len(cache) == 1
    assert ReferenceToneCache.key(5, 124) in cache


def test_cache_conflict_yields_empty_series(caplog):
    cache = ReferenceToneCache()
    cache.insert_tone(5, 124, np.zeros(3))
    with caplog.at_level(logging.WARNING):
        series = probe_presence(tone(5, 400), 5, cache=cache)
    assert isinstance(series, PresenceSeries)
    assert len(series) == 0
    assert "cache conflict" in caplog.text
