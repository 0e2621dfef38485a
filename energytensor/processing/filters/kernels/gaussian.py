import math
from typing import Optional

import numpy

from energytensor.processing.filters.kernels.kernel_1d import Kernel1D


def gaussian_kernel_1d(sigma: float = 1.0, window_ratio: float = 3.0, norm: float = 1.0) -> Kernel1D:
    """
    Computes a sampled 1D Gaussian smoothing kernel.

    Parameters
    ----------
    sigma : Gaussian sigma
    window_ratio : kernel radius in units of sigma
    norm : sum of the kernel taps

    Returns
    -------
    1D Gaussian kernel

    """
    return gaussian_derivative_kernel_1d(sigma=sigma, order=0, window_ratio=window_ratio, norm=norm)


def gaussian_derivative_kernel_1d(
    sigma: float = 1.0, order: int = 1, window_ratio: Optional[float] = None, norm: float = 1.0
) -> Kernel1D:
    """
    Computes a sampled 1D Gaussian derivative kernel of order 0 to 3.

    For order > 0 the DC component is removed and the kernel is scaled so that its response
    to the monomial x**order / order! equals 'norm'. Convolving a ramp of slope 1 with the
    first order kernel therefore gives exactly 1 (for norm=1).

    Parameters
    ----------
    sigma : Gaussian sigma
    order : derivative order, 0 gives a smoothing kernel
    window_ratio : kernel radius in units of sigma, defaults to 3 + order/2
    norm : normalisation constant

    Returns
    -------
    1D Gaussian derivative kernel

    """
    if sigma <= 0:
        raise ValueError(f"Gaussian sigma must be positive, got {sigma}")

    if order not in (0, 1, 2, 3):
        raise ValueError(f"Gaussian derivative order must be within [0, 3], got {order}")

    if window_ratio is None:
        window_ratio = 3.0 + 0.5 * order

    radius = max(int(window_ratio * sigma + 0.5), 1 if order > 0 else 0)
    x = numpy.arange(-radius, radius + 1, dtype=numpy.float64)

    s2 = sigma * sigma
    gaussian = numpy.exp(-0.5 * x * x / s2)
    if order == 0:
        taps = gaussian
    elif order == 1:
        taps = -x / s2 * gaussian
    elif order == 2:
        taps = (x * x / s2 - 1.0) / s2 * gaussian
    else:
        taps = (3.0 * x / (s2 * s2) - x * x * x / (s2 * s2 * s2)) * gaussian

    if order > 0:
        taps = taps - taps.mean()

    # tap k sits at offset x[k], it multiplies the sample at position -x[k] relative to the output:
    moment = numpy.sum(taps * (-x) ** order) / math.factorial(order)
    taps = taps * (norm / moment)

    return Kernel1D(taps, left=-radius)
