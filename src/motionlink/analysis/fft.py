"""In-place radix-2 FFT helpers."""

from __future__ import annotations

import numpy as np

from ..errors import InvalidLengthError


def is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def _bit_reverse_permutation(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    perm = np.zeros(n, dtype=np.intp)
    for i in range(n):
        rev = 0
        value = i
        for _ in range(bits):
            rev = (rev << 1) | (value & 1)
            value >>= 1
        perm[i] = rev
    return perm


class Radix2FFT:
    """
    Iterative Cooley-Tukey transform of a fixed power-of-two length.

    Twiddle tables, the bit-reversal permutation and all butterfly work
    buffers are built once in the constructor; :meth:`transform` then runs
    without allocating new arrays.

    Parameters
    ----------
    n:
        Transform length. Must be a power of two and at least 2.
    """

    def __init__(self, n: int) -> None:
        n = int(n)
        if n < 2 or not is_power_of_two(n):
            raise InvalidLengthError(f"FFT length must be a power of two >= 2, got {n}")
        self.n = n
        angles = 2.0 * np.pi * np.arange(n // 2) / n
        self._cos = np.cos(angles)
        self._sin = np.sin(angles)
        self._perm = _bit_reverse_permutation(n)
        self._perm_buf = np.empty(n, dtype=np.float64)
        self._t_re = np.empty(n // 2, dtype=np.float64)
        self._t_im = np.empty(n // 2, dtype=np.float64)
        self._work = np.empty(n // 2, dtype=np.float64)

    def transform(self, real: np.ndarray, imag: np.ndarray) -> None:
        """
        Replace ``(real, imag)`` with their forward discrete Fourier transform.

        Both arrays must be contiguous float64 of length ``n``; they are
        modified in place. The sign convention matches :func:`numpy.fft.fft`.
        """
        n = self.n
        for name, arr in (("real", real), ("imag", imag)):
            if arr.shape != (n,):
                raise InvalidLengthError(f"{name} must have shape ({n},), got {arr.shape}")
            if arr.dtype != np.float64 or not arr.flags.c_contiguous or not arr.flags.writeable:
                raise ValueError(f"{name} must be a writeable contiguous float64 array")

        self._permute(real)
        self._permute(imag)

        size = 2
        while size <= n:
            half = size // 2
            groups = n // size
            step = n // size
            cos = self._cos[::step]
            sin = self._sin[::step]

            re = real.reshape(groups, size)
            im = imag.reshape(groups, size)
            a_re, b_re = re[:, :half], re[:, half:]
            a_im, b_im = im[:, :half], im[:, half:]
            t_re = self._t_re.reshape(groups, half)
            t_im = self._t_im.reshape(groups, half)
            work = self._work.reshape(groups, half)

            # t = b * exp(-2j*pi*k/size)
            np.multiply(b_re, cos, out=t_re)
            np.multiply(b_im, sin, out=work)
            t_re += work
            np.multiply(b_im, cos, out=t_im)
            np.multiply(b_re, sin, out=work)
            t_im -= work

            np.subtract(a_re, t_re, out=b_re)
            np.subtract(a_im, t_im, out=b_im)
            a_re += t_re
            a_im += t_im

            size *= 2

    def _permute(self, arr: np.ndarray) -> None:
        np.take(arr, self._perm, out=self._perm_buf)
        arr[:] = self._perm_buf

