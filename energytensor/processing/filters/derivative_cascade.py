from itertools import groupby
from typing import Dict, NamedTuple, Optional, Tuple

from arbol import aprint
from joblib import Parallel, delayed

from energytensor.processing.filters.convolve_separable import convolve_separable
from energytensor.processing.filters.kernels.kernel_1d import Kernel1D, explicit_kernel
from energytensor.processing.utils.combine_two_images import add_pointwise
from energytensor.processing.utils.real_promote import real_promote
from energytensor.utils import xpArray
from energytensor.utils.backends import Backend, CupyBackend

DERIVATIVE = "derivative"
SMOOTHING = "smoothing"


class DerivativeFields(NamedTuple):
    """Intermediate fields of the gradient energy tensor, all with the shape of the input image."""

    gx: xpArray
    gy: xpArray
    gxx: xpArray
    gxy: xpArray
    gyy: xpArray
    laplace: xpArray
    gx3: xpArray
    gy3: xpArray


class CascadeStep(NamedTuple):
    name: str
    operation: str
    sources: Tuple[str, ...]
    kernel_x: Optional[str]
    kernel_y: Optional[str]
    # steps of the same level only depend on steps of lower levels:
    level: int


# The derivative kernel always runs along the axis named by the output, the smoothing kernel along the other one.
CASCADE: Tuple[CascadeStep, ...] = (
    CascadeStep("gx", "convolve", ("image",), DERIVATIVE, SMOOTHING, 0),
    CascadeStep("gy", "convolve", ("image",), SMOOTHING, DERIVATIVE, 0),
    CascadeStep("gxx", "convolve", ("gx",), DERIVATIVE, SMOOTHING, 1),
    CascadeStep("gxy", "convolve", ("gx",), SMOOTHING, DERIVATIVE, 1),
    CascadeStep("gyy", "convolve", ("gy",), SMOOTHING, DERIVATIVE, 1),
    CascadeStep("laplace", "add", ("gxx", "gyy"), None, None, 2),
    CascadeStep("gx3", "convolve", ("laplace",), DERIVATIVE, SMOOTHING, 3),
    CascadeStep("gy3", "convolve", ("laplace",), SMOOTHING, DERIVATIVE, 3),
)


def derivative_cascade(
    image: xpArray,
    deriv_kernel,
    smooth_kernel,
    mode: str = "mirror",
    internal_dtype=None,
    workers: int = 1,
) -> DerivativeFields:
    """
    Computes the first, second and third order derivative fields needed by the gradient energy tensor
    with a fixed sequence of separable convolutions.

    Parameters
    ----------
    image : 2D scalar image
    deriv_kernel : 1D derivative kernel, Kernel1D or sequence of taps
    smooth_kernel : 1D smoothing kernel, Kernel1D or sequence of taps
    mode : border mode passed to the separable convolution
    internal_dtype : dtype for computation, defaults to the real promoted dtype of the image
    workers : number of threads used to compute mutually independent steps concurrently.

    Returns
    -------
    DerivativeFields: gx, gy, gxx, gxy, gyy, laplace, gx3, gy3

    """
    kernels = {DERIVATIVE: explicit_kernel(deriv_kernel), SMOOTHING: explicit_kernel(smooth_kernel)}

    if internal_dtype is None:
        internal_dtype = real_promote(image.dtype)

    fields = {"image": Backend.to_backend(image, dtype=internal_dtype)}

    if workers is None or workers <= 1:
        for step in CASCADE:
            fields[step.name] = _execute_step(step, fields, kernels, mode, internal_dtype)
    else:
        backend = Backend.current()
        for _, level in groupby(CASCADE, key=lambda s: s.level):
            level = tuple(level)
            if len(level) == 1:
                (step,) = level
                fields[step.name] = _execute_step(step, fields, kernels, mode, internal_dtype)
                continue

            results = Parallel(n_jobs=min(workers, len(level)), backend="threading")(
                delayed(_execute_step_in_thread)(backend, step, fields, kernels, mode, internal_dtype)
                for step in level
            )
            for step, result in zip(level, results):
                fields[step.name] = result

    return DerivativeFields(**{name: fields[name] for name in DerivativeFields._fields})


def _execute_step(
    step: CascadeStep, fields: Dict[str, xpArray], kernels: Dict[str, Kernel1D], mode: str, internal_dtype
) -> xpArray:
    aprint(f"{step.name} <- {step.operation}{step.sources}")
    if step.operation == "add":
        return add_pointwise(*(fields[source] for source in step.sources))

    (source,) = step.sources
    return convolve_separable(
        fields[source],
        kernels[step.kernel_x],
        kernels[step.kernel_y],
        mode=mode,
        internal_dtype=internal_dtype,
    )


def _execute_step_in_thread(backend: Backend, step: CascadeStep, *args) -> xpArray:
    # backends are thread local, each worker thread needs its own:
    if isinstance(backend, CupyBackend):
        # no private memory pool, results must outlive the worker backend
        worker_backend = CupyBackend(device_id=backend.device_id, enable_memory_pool=False)
    else:
        worker_backend = backend.copy()

    with worker_backend:
        return _execute_step(step, *args)
