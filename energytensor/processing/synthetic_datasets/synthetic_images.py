from typing import Callable, Tuple

import numpy

from energytensor.utils import xpArray
from energytensor.utils.backends import Backend


def _centered_grid(shape: Tuple[int, int], dtype):
    xp = Backend.get_xp_module()
    height, width = shape
    y = xp.arange(height, dtype=dtype) - (height - 1) / 2
    x = xp.arange(width, dtype=dtype) - (width - 1) / 2
    return xp.meshgrid(x, y)


def generate_polynomial_image(
    shape: Tuple[int, int] = (11, 11), function: Callable = None, dtype=numpy.float64
) -> xpArray:
    """
    Generates an image by sampling a function of the centered coordinates (u, v),
    where u runs along x (last axis) and v along y (first axis), and (0, 0) is the image centre.

    Parameters
    ----------
    shape : image shape (height, width)
    function : function f(u, v) evaluated on coordinate arrays, defaults to the ramp f(u, v) = u
    dtype : dtype of the image

    Returns
    -------
    Image of given shape and dtype

    """
    u, v = _centered_grid(shape, dtype)
    if function is None:
        return u.astype(dtype, copy=False)
    return function(u, v).astype(dtype, copy=False)


def generate_ring_image(length: int = 65, frequency: float = 0.25, dtype=numpy.float32) -> xpArray:
    """
    Generates a square image of concentric cosine rings. The image is point symmetric about its centre
    and mirror symmetric about both of its central axes.

    Parameters
    ----------
    length : image side length, odd values give an image centre on a pixel
    frequency : ring frequency in radians per pixel
    dtype : dtype of the image

    Returns
    -------
    Ring image of shape (length, length)

    """
    xp = Backend.get_xp_module()
    u, v = _centered_grid((length, length), numpy.float64)
    radius = xp.sqrt(u * u + v * v)
    return xp.cos(frequency * radius * radius / 4).astype(dtype)
