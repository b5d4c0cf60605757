import numpy as np
import pytest

from wavedecomp.ingest import SignalFormatError, load_signal


def test_load_npy(tmp_path):
    path = tmp_path / "signal.npy"
    np.save(path, np.array([1.0, 2.0, 3.0]))
    np.testing.assert_allclose(load_signal(path), [1.0, 2.0, 3.0])


def test_load_npz_prefers_signal_entry(tmp_path):
    path = tmp_path / "signal.npz"
    np.savez(path, other=np.zeros(2), signal=np.array([4.0, 5.0]))
    np.testing.assert_allclose(load_signal(path), [4.0, 5.0])

    fallback = tmp_path / "fallback.npz"
    np.savez(fallback, samples=np.array([6.0]))
    np.testing.assert_allclose(load_signal(fallback), [6.0])


def test_load_csv_with_and_without_header(tmp_path):
    headered = tmp_path / "headered.csv"
    headered.write_text("value\n1.5\n-2\n\n3e-1\n")
    np.testing.assert_allclose(load_signal(headered), [1.5, -2.0, 0.3])

    plain = tmp_path / "plain.csv"
    plain.write_text("0.0,ignored\n1.0,ignored\n")
    np.testing.assert_allclose(load_signal(plain), [0.0, 1.0])


def test_load_csv_non_numeric_row(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1.0\nfoo\n")
    with pytest.raises(SignalFormatError) as info:
        load_signal(path)
    assert info.value.path == str(path)
    assert "line 2" in str(info.value)


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "signal.txt"
    path.write_text("1\n")
    with pytest.raises(SignalFormatError):
        load_signal(path)


def test_rejects_multidimensional_arrays(tmp_path):
    path = tmp_path / "matrix.npy"
    np.save(path, np.zeros((2, 2)))
    with pytest.raises(ValueError):
        load_signal(path)
