from energytensor.processing.filters.kernels.kernel_1d import explicit_kernel
from energytensor.processing.utils.real_promote import real_promote
from energytensor.utils import xpArray
from energytensor.utils.backends import Backend


def convolve_separable(
    image: xpArray,
    kernel_x,
    kernel_y,
    mode: str = "mirror",
    cval: float = 0.0,
    internal_dtype=None,
) -> xpArray:
    """
    Convolves a 2D image with one 1D kernel along x (last axis) and another 1D kernel along y (first axis).

    Parameters
    ----------
    image : 2D image of shape (height, width)
    kernel_x : kernel applied along the rows, Kernel1D or sequence of taps
    kernel_y : kernel applied along the columns, Kernel1D or sequence of taps
    mode : border mode, see scipy.ndimage.convolve1d. The default 'mirror' reflects about
        the edge pixel without repeating it: (d c b | a b c d)
    cval : value used outside the image for mode 'constant'
    internal_dtype : dtype for computation and output, defaults to the real promoted dtype of the image.

    Returns
    -------
    Filtered image, same shape as the input.

    """
    if image.ndim != 2:
        raise ValueError(f"Separable convolution expects a 2D image, got {image.ndim} dimensions")

    kernel_x = explicit_kernel(kernel_x)
    kernel_y = explicit_kernel(kernel_y)

    if internal_dtype is None:
        internal_dtype = real_promote(image.dtype)

    image = Backend.to_backend(image, dtype=internal_dtype)
    sp = Backend.get_sp_module(image)

    weights_x = Backend.to_backend(kernel_x.centered_taps(), dtype=internal_dtype)
    weights_y = Backend.to_backend(kernel_y.centered_taps(), dtype=internal_dtype)

    filtered = sp.ndimage.convolve1d(image, weights_x, axis=1, mode=mode, cval=cval)
    filtered = sp.ndimage.convolve1d(filtered, weights_y, axis=0, mode=mode, cval=cval)

    return filtered
