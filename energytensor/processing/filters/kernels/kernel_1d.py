from typing import Iterator, Optional, Sequence

import numpy


class Kernel1D:
    """
    Immutable 1D convolution kernel.

    A kernel is a sequence of taps together with the position of its centre: 'left' is the (non-positive)
    offset of the first tap relative to the centre, 'right' the (non-negative) offset of the last tap.
    Convolving a signal 'f' with the kernel gives:

        out[x] = sum_k taps[k] * f[x - (left + k)]

    so that the derivative kernel [0.5, 0, -0.5] (left=-1) computes the central difference (f[x+1] - f[x-1]) / 2.
    """

    __slots__ = ("_taps", "_left")

    def __init__(self, taps: Sequence[float], left: Optional[int] = None):
        """
        Parameters
        ----------
        taps : kernel coefficients, from the left-most to the right-most tap.
        left : offset of the first tap relative to the kernel centre, defaults to -(len(taps) // 2).
        """
        taps = numpy.array(taps, dtype=numpy.float64)

        if taps.ndim != 1 or taps.size == 0:
            raise ValueError(f"Kernel taps must be a non-empty 1D sequence, got shape {taps.shape}")

        if not numpy.all(numpy.isfinite(taps)):
            raise ValueError("Kernel taps must be finite")

        if left is None:
            left = -(taps.size // 2)
        left = int(left)

        if left > 0 or left + taps.size - 1 < 0:
            raise ValueError(f"Kernel centre must lie within the taps, got left={left} for {taps.size} taps")

        taps.flags.writeable = False
        self._taps = taps
        self._left = left

    @property
    def taps(self) -> numpy.ndarray:
        return self._taps

    @property
    def left(self) -> int:
        return self._left

    @property
    def right(self) -> int:
        return self._left + self._taps.size - 1

    @property
    def radius(self) -> int:
        return max(-self.left, self.right)

    @property
    def size(self) -> int:
        return self._taps.size

    def sum(self) -> float:
        return float(self._taps.sum())

    def centered_taps(self) -> numpy.ndarray:
        """
        Returns the taps zero-padded to an odd length of 2*radius+1 with the kernel centre in the middle.
        The result can be used directly as weights for scipy.ndimage.convolve1d.
        """
        radius = self.radius
        weights = numpy.zeros(2 * radius + 1, dtype=numpy.float64)
        start = radius + self.left
        weights[start : start + self.size] = self._taps
        return weights

    def reversed(self) -> "Kernel1D":
        """Mirrors the kernel about its centre."""
        return Kernel1D(self._taps[::-1], left=-self.right)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[float]:
        return iter(self._taps.tolist())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Kernel1D):
            return NotImplemented
        return self.left == other.left and numpy.array_equal(self.taps, other.taps)

    def __hash__(self) -> int:
        return hash((self.left, self._taps.tobytes()))

    def __repr__(self) -> str:
        return f"Kernel1D(taps={self._taps.tolist()}, left={self.left})"


def explicit_kernel(taps, left: Optional[int] = None) -> Kernel1D:
    """
    Builds a kernel from explicitly given taps. If 'taps' is already a Kernel1D it is returned unchanged.

    Parameters
    ----------
    taps : kernel coefficients or Kernel1D
    left : offset of the first tap relative to the kernel centre, defaults to -(len(taps) // 2)

    Returns
    -------
    Kernel1D

    """
    if isinstance(taps, Kernel1D):
        return taps
    return Kernel1D(taps, left=left)
