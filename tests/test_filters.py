import math
import threading

import numpy as np
import pytest

from wavedecomp.core.filters import (
    CacheConflictError,
    ReferenceToneCache,
    filter_by_frequency,
    high_pass,
    low_pass,
    quadrature_tone,
    reference_tone,
)


def bin_aligned_factor(length, k):
    return length / (2 * math.pi * k)


def test_reference_tone():
    np.testing.assert_allclose(reference_tone(5, 3), np.sin([0.0, 0.2, 0.4]))
    assert reference_tone(5, 0).size == 0
    with pytest.raises(ValueError):
        reference_tone(5, -1)


def test_filter_pure_tone_amplitude():
    n = 256
    f = bin_aligned_factor(n, 8)
    filtered = filter_by_frequency(reference_tone(f, n), f)
    assert filtered.bin_index == 8
    # both spectra hold -0.5j at the tone's bin
    assert filtered.amplitude == pytest.approx(0.25)


def test_filter_empty_signal():
    filtered = filter_by_frequency([], 5)
    assert filtered.spectrum.size == 0
    assert filtered.amplitude == 0.0
    assert filtered.samples.size == 0


def test_filter_with_cache_matches_uncached():
    rng = np.random.default_rng(0)
    x = rng.normal(size=100)
    cache = ReferenceToneCache()
    cached = filter_by_frequency(x, 5, cache=cache)
    plain = filter_by_frequency(x, 5)
    np.testing.assert_allclose(cached.spectrum, plain.spectrum)
    np.testing.assert_allclose(cached.samples, plain.samples)
    assert len(cache) == 1
    assert ReferenceToneCache.key(5, 100) in cache


def test_cache_returns_first_value_across_threads():
    cache = ReferenceToneCache()
    results = []

    def worker():
        results.append(cache.get(5, 64))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 1
    assert all(r is results[0] for r in results)
    assert not results[0].flags.writeable


def test_cache_conflicts():
    cache = ReferenceToneCache()
    cache.get(5, 16)
    with pytest.raises(CacheConflictError):
        cache.insert(5, 16, np.zeros(16))

    cache.insert(2, 16, np.zeros(4))
    with pytest.raises(CacheConflictError) as info:
        cache.get(2, 16)
    assert info.value.key == (2.0, 16)


def test_cache_insert_copies_value():
    cache = ReferenceToneCache()
    value = np.ones(8, dtype=complex)
    cache.insert(3, 8, value)
    assert value.flags.writeable
    value[0] = 5
    assert cache.get(3, 8)[0] == 1


def test_low_and_high_pass_split_components():
    n = 256
    idx = np.arange(n)
    slow = np.sin(2 * np.pi * 4 * idx / n)
    fast = 0.5 * np.sin(2 * np.pi * 40 * idx / n)
    cutoff = bin_aligned_factor(n, 10)

    np.testing.assert_allclose(low_pass(slow + fast, cutoff), slow, atol=1e-9)
    np.testing.assert_allclose(high_pass(slow + fast, cutoff), fast, atol=1e-9)
    assert low_pass([], cutoff).size == 0


def test_quadrature_tone():
    tone = quadrature_tone(5, 4)
    np.testing.assert_allclose(tone.imag, reference_tone(5, 4))
    np.testing.assert_allclose(np.abs(tone), 1.0)
    with pytest.raises(ValueError):
        quadrature_tone(5, -1)


def test_cache_keeps_tones_beside_spectra():
    cache = ReferenceToneCache()
    first = cache.tone(5, 8)
    assert cache.tone(5, 8) is first
    assert not first.flags.writeable
    cache.get(5, 8)
    assert len(cache) == 2

    cache.insert_tone(2, 8, np.zeros(8, dtype=complex))
    with pytest.raises(CacheConflictError):
        cache.insert_tone(2, 8, np.ones(8, dtype=complex))
    cache.insert_tone(3, 8, np.zeros(2, dtype=complex))
    with pytest.raises(CacheConflictError):
        cache.tone(3, 8)
