import gc
import threading
import types
from typing import Any, Optional

import numpy
from arbol import aprint
from dask.array import Array

from energytensor.utils import xpArray
from energytensor.utils.backends.backend import Backend


class CupyBackend(Backend):
    """
    CupyBackend: computes with cupy and cupyx.scipy.ndimage on a CUDA device.

    Methods
    -------
    close:
        Releases resources allocated by backend.
    """

    @staticmethod
    def num_devices():
        try:
            import GPUtil

            return len(GPUtil.getGPUs())
        except Exception:
            return 0

    device_locks = tuple(threading.Lock() for _ in range(num_devices.__func__()))

    def __init__(
        self,
        device_id=0,
        exclusive: bool = False,
        enable_memory_pool: bool = True,
        enable_memory_pool_clearing: bool = True,
        enable_unified_memory: bool = True,
    ):
        """
        Instantiates a Cupy-based Image Processing backend

        Parameters
        ----------
        device_id : CUDA device id to use for allocation and compute
        exclusive : If True the access to this device is exclusive, no other backend context can access it
            (when using the context manager idiom)
        enable_memory_pool : Enables a dedicated cupy memory pool for this backend.
        enable_memory_pool_clearing : Enables the clearing of the memory pool upon calling 'clear_memory_pool'
        enable_unified_memory : Allocates the memory pool in CUDA managed (unified) memory.
        """

        super().__init__()
        self.device_id = device_id
        self.exclusive = exclusive
        self.enable_memory_pool = enable_memory_pool
        self.enable_memory_pool_clearing = enable_memory_pool_clearing
        self.enable_unified_memory = enable_unified_memory

        self.mempool = None
        self._previous_allocator = None

        import cupy

        self.cupy_device: cupy.cuda.Device = cupy.cuda.Device(self.device_id)

        # cupyx.scipy.ndimage is not imported by 'import cupyx':
        import cupyx.scipy.ndimage  # noqa: F401

    def copy(self, exclusive: bool = None):
        return CupyBackend(
            device_id=self.device_id,
            exclusive=self.exclusive if exclusive is None else exclusive,
            enable_memory_pool=self.enable_memory_pool,
            enable_memory_pool_clearing=self.enable_memory_pool_clearing,
            enable_unified_memory=self.enable_unified_memory,
        )

    def __str__(self):
        free_mem, total_mem = self.cupy_device.mem_info
        percent = (100 * free_mem) // total_mem
        return (
            f"Cupy backend [device id:{self.device_id} "
            f"with {free_mem // (1024 * 1024)} MB ({percent}%) free memory out of {total_mem // (1024 * 1024)} MB, "
            f"compute:{self.cupy_device.compute_capability}, pci-bus-id:'{self.cupy_device.pci_bus_id}']"
        )

    def __enter__(self):
        import cupy as cp

        # lock device:
        if self.exclusive:
            CupyBackend.device_locks[self.device_id].acquire(blocking=True)

        # setup device:
        self.cupy_device.__enter__()

        # setup allocation:
        if self.enable_memory_pool:
            if self.mempool is None:
                self.mempool = cp.cuda.MemoryPool(cp.cuda.memory.malloc_managed if self.enable_unified_memory else None)
            self._previous_allocator = cp.cuda.memory._get_thread_local_allocator()
            cp.cuda.memory._set_thread_local_allocator(self.mempool.malloc)

        else:
            cp.cuda.memory._set_thread_local_allocator(None)

        return super().__enter__()

    def __exit__(self, type, value, traceback):
        super().__exit__(type, value, traceback)

        # unset allocation:
        self.clear_memory_pool()

        if self._previous_allocator is not None:
            from cupy.cuda import memory

            memory._set_thread_local_allocator(self._previous_allocator)

        # unset device:
        self.cupy_device.__exit__()

        # unlock device:
        if self.exclusive:
            CupyBackend.device_locks[self.device_id].release()

    def synchronise(self):
        self.cupy_device.synchronize()

    def clear_memory_pool(self):

        if self.enable_memory_pool_clearing and self.mempool is not None:
            used_before = self.mempool.used_bytes() / 1e9
            gc.collect()
            self.mempool.free_all_blocks()
            used_after = self.mempool.used_bytes() / 1e9
            aprint(f"Cleared memory pool, used: {used_before:.3f} GBs -> {used_after:.3f} GBs")

        super().clear_memory_pool()

    def _to_numpy(self, array: xpArray, dtype=None, force_copy: bool = False) -> numpy.ndarray:
        import cupy

        if isinstance(array, Array):
            return self._to_numpy(array.compute(), dtype=dtype, force_copy=force_copy)

        elif cupy.get_array_module(array) == cupy:
            array = cupy.asnumpy(array)

        if dtype:
            return numpy.asarray(array).astype(dtype, copy=force_copy)
        elif force_copy:
            return numpy.array(array, copy=True)
        else:
            return numpy.asarray(array)

    def _to_backend(self, array: xpArray, dtype=None, force_copy: bool = False) -> Any:

        import cupy

        if isinstance(array, Array):
            return self._to_backend(array.compute(), dtype=dtype, force_copy=force_copy)

        elif cupy.get_array_module(array) == cupy:
            if dtype:
                return array.astype(dtype, copy=force_copy)
            elif force_copy:
                return array.copy()
            else:
                return array
        else:
            array = numpy.asarray(array)
            with self.cupy_device:
                return cupy.asarray(array, dtype=dtype)

    def _get_xp_module(self, array: Optional[xpArray] = None) -> types.ModuleType:
        if array is None:
            import cupy

            return cupy
        return super()._get_xp_module(array)

    def _get_sp_module(self, array: Optional[xpArray] = None) -> types.ModuleType:
        if array is None:
            import cupyx

            return cupyx.scipy
        return super()._get_sp_module(array)


def is_cupy_available() -> bool:
    try:
        import cupy  # noqa

        return True
    except ImportError:
        return False
