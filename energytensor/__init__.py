from energytensor.processing.filters.assemble_tensor import assemble_tensor
from energytensor.processing.filters.convolve_separable import convolve_separable
from energytensor.processing.filters.derivative_cascade import DerivativeFields, derivative_cascade
from energytensor.processing.filters.gradient_energy_tensor import gradient_energy_tensor
from energytensor.processing.filters.kernels import (
    Kernel1D,
    explicit_kernel,
    gaussian_derivative_kernel_1d,
    gaussian_kernel_1d,
)
from energytensor.processing.tensor import tensor_eigen_representation, tensor_to_edge_corner, tensor_trace
from energytensor.utils.backends import Backend, BestBackend, CupyBackend, NumpyBackend
from energytensor.utils.exceptions import PreconditionError
