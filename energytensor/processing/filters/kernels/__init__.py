from energytensor.processing.filters.kernels.gaussian import gaussian_derivative_kernel_1d, gaussian_kernel_1d
from energytensor.processing.filters.kernels.kernel_1d import Kernel1D, explicit_kernel
