from typing import Optional

from arbol import asection

from energytensor.processing.filters.assemble_tensor import assemble_tensor
from energytensor.processing.filters.derivative_cascade import derivative_cascade
from energytensor.processing.filters.kernels.kernel_1d import explicit_kernel
from energytensor.processing.utils.real_promote import real_promote
from energytensor.utils import xpArray
from energytensor.utils.backends import Backend
from energytensor.utils.exceptions import PreconditionError


def gradient_energy_tensor(
    image: xpArray,
    deriv_kernel,
    smooth_kernel,
    out: Optional[xpArray] = None,
    mode: str = "mirror",
    internal_dtype=None,
    workers: int = 1,
) -> xpArray:
    """
    Computes the gradient energy tensor (GET operator) of a scalar image, as described in:

    M. Felsberg, U. Koethe: "GET: The Connection Between Monogenic Scale-Space and Gaussian Derivatives",
    in: R. Kimmel, N. Sochen, J. Weickert (Eds.): Scale Space and PDE Methods in Computer Vision,
    Proc. of Scale-Space 2005, Lecture Notes in Computer Science 3459, pp. 192-203, Springer, 2005.

    The derivative kernel is applied along each image axis in turn and the other axis is smoothed
    with the smoothing kernel. The kernels can be as small as 3 taps, e.g. [0.5, 0, -0.5] and
    [3/16, 10/16, 3/16] respectively, or Gaussian derivative and Gaussian kernels:

        get = gradient_energy_tensor(image, gaussian_derivative_kernel_1d(0.7), gaussian_kernel_1d(0.7))

    The output holds the tensor components t11, t12 (== t21), t22 along its last axis. Signs are adjusted for
    a right-handed coordinate system: orientations derived from the tensor are counter-clockwise
    (mathematically positive) with the x axis at zero degrees.

    Parameters
    ----------
    image : 2D scalar image of shape (height, width), x is the last axis
    deriv_kernel : 1D derivative kernel, Kernel1D or sequence of taps
    smooth_kernel : 1D smoothing kernel, Kernel1D or sequence of taps
    out : optional destination of shape (height, width, 3). Must have exactly 3 bands.
    mode : border mode of the separable convolutions, see scipy.ndimage.convolve1d
    internal_dtype : dtype for internal computation, defaults to float64 for integer images
        and to the image dtype for floating point images.
    workers : number of threads used to compute independent convolutions concurrently.

    Returns
    -------
    Tensor image of shape (height, width, 3)

    """
    if out is not None:
        if out.ndim != 3 or out.shape[-1] != 3:
            raise PreconditionError("gradient_energy_tensor(): output image must have 3 bands.")
        if tuple(out.shape[:2]) != tuple(image.shape):
            raise PreconditionError(
                f"gradient_energy_tensor(): output image shape {tuple(out.shape[:2])} "
                f"does not match input image shape {tuple(image.shape)}."
            )

    if image.ndim != 2:
        raise ValueError(f"gradient_energy_tensor(): expects a 2D scalar image, got {image.ndim} dimensions")

    deriv_kernel = explicit_kernel(deriv_kernel)
    smooth_kernel = explicit_kernel(smooth_kernel)

    if internal_dtype is None:
        internal_dtype = real_promote(image.dtype)

    with asection(
        f"Computing gradient energy tensor for image of shape {tuple(image.shape)} and dtype {image.dtype} "
        f"(internal dtype: {internal_dtype}, derivative kernel: {deriv_kernel}, smoothing kernel: {smooth_kernel})"
    ):
        fields = derivative_cascade(
            image, deriv_kernel, smooth_kernel, mode=mode, internal_dtype=internal_dtype, workers=workers
        )

        if out is None:
            xp = Backend.get_xp_module(fields.gx)
            out = xp.empty(tuple(image.shape) + (3,), dtype=internal_dtype)

        return assemble_tensor(fields, out)
