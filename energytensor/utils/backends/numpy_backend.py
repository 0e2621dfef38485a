import types
from typing import Any, Optional

import numpy
import scipy
from dask.array import Array

from energytensor.utils import xpArray
from energytensor.utils.backends.backend import Backend


class NumpyBackend(Backend):
    """
    NumpyBackend: computes with numpy and scipy.ndimage on the CPU.
    This is the backend used when no other backend has been entered.
    """

    def __init__(self, *args, **kwargs):
        """Instanciates a Numpy-based Image Processing backend"""
        # scipy.ndimage is a lazily loaded submodule, make sure it is reachable as an attribute:
        import scipy.ndimage  # noqa: F401

    def copy(self, *args, **kwargs):
        return NumpyBackend()

    def __str__(self):
        return "NumpyBackend"

    def clear_memory_pool(self):
        pass

    def _to_numpy(self, array: xpArray, dtype=None, force_copy: bool = False) -> numpy.ndarray:

        if isinstance(array, Array):
            return self._to_numpy(array.compute(), dtype=dtype, force_copy=force_copy)

        if dtype:
            return numpy.asarray(array).astype(dtype, copy=force_copy)
        elif force_copy:
            return numpy.array(array, copy=True)
        else:
            return numpy.asarray(array)

    def _to_backend(self, array: xpArray, dtype=None, force_copy: bool = False) -> Any:

        if isinstance(array, Array):
            return self._to_backend(array.compute(), dtype=dtype, force_copy=force_copy)

        return self._to_numpy(array, dtype=dtype, force_copy=force_copy)

    def _get_xp_module(self, array: Optional[xpArray] = None) -> types.ModuleType:
        if array is None:
            return numpy
        return super()._get_xp_module(array)

    def _get_sp_module(self, array: Optional[xpArray] = None) -> types.ModuleType:
        if array is None:
            return scipy
        return super()._get_sp_module(array)
