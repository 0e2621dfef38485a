from arbol import aprint

from energytensor.utils.backends.cupy_backend import CupyBackend
from energytensor.utils.backends.numpy_backend import NumpyBackend


def BestBackend(*args, **kwargs):
    """Returns a CupyBackend if cupy is installed and can compute on the requested device,
    a NumpyBackend otherwise."""
    try:
        import cupy

        device_id = kwargs.get("device_id", 0)
        with cupy.cuda.Device(device_id):
            array = cupy.array([1, 2, 3])
            assert cupy.median(array) == 2
        return CupyBackend(*args, **kwargs)

    except Exception:
        aprint("Cupy module not found or not functional! Falling back to numpy backend.")
        return NumpyBackend()
