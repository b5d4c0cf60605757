import math

import numpy as np
import pytest

from wavedecomp.core.spectral import (
    forward_transform,
    frequency_to_index,
    frequency_to_period,
    inverse_transform,
    inverse_transform_single,
    isolate_harmonic,
    magnitude_spectrum,
    phase_spectrum,
)


def bin_aligned_factor(length, k):
    """Frequency factor whose sinusoid completes exactly ``k`` cycles in ``length`` samples."""
    return length / (2 * math.pi * k)


@pytest.mark.parametrize("method", ["fft", "direct"])
def test_round_trip(method):
    rng = np.random.default_rng(1)
    x = rng.normal(size=64)
    repaired = inverse_transform(forward_transform(x, method=method), method=method)
    np.testing.assert_allclose(repaired, x, atol=1e-9)


def test_methods_agree():
    rng = np.random.default_rng(2)
    x = rng.uniform(-1, 1, size=50)
    np.testing.assert_allclose(
        forward_transform(x, method="fft"), forward_transform(x, method="direct"), atol=1e-10
    )


def test_single_bins_sum_to_signal():
    rng = np.random.default_rng(3)
    x = rng.normal(size=24)
    spectrum = forward_transform(x)
    total = sum(inverse_transform_single(spectrum, k) for k in range(x.size))
    np.testing.assert_allclose(total, x, atol=1e-9)


def test_isolate_harmonic_recovers_component():
    n = 256
    idx = np.arange(n)
    f1 = bin_aligned_factor(n, 8)
    f2 = bin_aligned_factor(n, 20)
    first = 1.5 * np.sin(idx / f1 + 0.3)
    second = 0.7 * np.sin(idx / f2)
    spectrum = forward_transform(first + second)

    k = frequency_to_index(f1, n)
    assert k == 8
    np.testing.assert_allclose(isolate_harmonic(spectrum, k), first, atol=1e-9)


def test_normalisation_and_phase():
    n = 32
    idx = np.arange(n)
    spectrum = forward_transform(np.sin(2 * np.pi * 4 * idx / n))
    mags = magnitude_spectrum(spectrum)
    assert mags[4] == pytest.approx(0.5)
    assert mags[28] == pytest.approx(0.5)
    assert phase_spectrum(spectrum)[4] == pytest.approx(-math.pi / 2)


def test_empty_input():
    assert forward_transform([]).size == 0
    assert inverse_transform([]).size == 0


def test_invalid_arguments():
    with pytest.raises(ValueError):
        forward_transform([1.0, 2.0], method="wavelet")
    with pytest.raises(ValueError):
        forward_transform(np.zeros((2, 2)))
    with pytest.raises(IndexError):
        inverse_transform_single(forward_transform([1.0, 2.0]), 2)


def test_frequency_to_period():
    assert frequency_to_period(5) == 31
    assert frequency_to_period(2) == 13
    assert frequency_to_period(-5) == 31
    assert frequency_to_period(0.01) == 1
    with pytest.raises(ValueError):
        frequency_to_period(0)
    with pytest.raises(ValueError):
        frequency_to_period(float("nan"))


def test_frequency_to_index():
    assert frequency_to_index(5, 1000) == 32
    assert frequency_to_index(1000, 100) == 0
    assert frequency_to_index(0.001, 100) == 99
    with pytest.raises(ValueError):
        frequency_to_index(0, 100)
    with pytest.raises(ValueError):
        frequency_to_index(5, 0)
