from __future__ import annotations

import numpy as np
import pytest

from motionlink.analysis.fft import Radix2FFT, is_power_of_two
from motionlink.errors import InvalidLengthError


@pytest.mark.parametrize("n", [2, 4, 8, 64, 128, 1024])
def test_transform_matches_numpy(n: int) -> None:
    rng = np.random.default_rng(n)
    real = rng.normal(size=n)
    imag = rng.normal(size=n)
    expected = np.fft.fft(real + 1j * imag)

    fft = Radix2FFT(n)
    fft.transform(real, imag)

    np.testing.assert_allclose(real, expected.real, atol=1e-9)
    np.testing.assert_allclose(imag, expected.imag, atol=1e-9)


def test_transform_is_reusable_without_state_leaks() -> None:
    fft = Radix2FFT(16)
    first = np.sin(np.arange(16.0))
    for _ in range(3):
        real = first.copy()
        imag = np.zeros(16)
        fft.transform(real, imag)
        np.testing.assert_allclose(real + 1j * imag, np.fft.fft(first), atol=1e-12)


def test_constant_input_concentrates_in_dc_bin() -> None:
    real = np.full(8, 2.0)
    imag = np.zeros(8)
    Radix2FFT(8).transform(real, imag)
    assert real[0] == pytest.approx(16.0)
    np.testing.assert_allclose(real[1:], 0.0, atol=1e-12)
    np.testing.assert_allclose(imag, 0.0, atol=1e-12)


@pytest.mark.parametrize("n", [0, 1, 3, 6, 100, 129])
def test_rejects_non_power_of_two_lengths(n: int) -> None:
    with pytest.raises(InvalidLengthError):
        Radix2FFT(n)


def test_rejects_mismatched_buffers() -> None:
    fft = Radix2FFT(8)
    with pytest.raises(InvalidLengthError):
        fft.transform(np.zeros(4), np.zeros(8))
    with pytest.raises(ValueError):
        fft.transform(np.zeros(8, dtype=np.float32), np.zeros(8))


def test_is_power_of_two() -> None:
    assert [n for n in range(20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]
