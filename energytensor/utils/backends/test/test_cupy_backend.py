import numpy
import pytest

from energytensor.utils.backends import Backend, BestBackend, CupyBackend, NumpyBackend
from energytensor.utils.backends.cupy_backend import is_cupy_available
from energytensor.utils.testing import cupy_only


@cupy_only
def test_cupy_backend():
    import cupy

    array = numpy.random.uniform(0, 1, size=(32, 48)).astype(numpy.float32)

    with CupyBackend():
        array_b = Backend.to_backend(array, numpy.float64)
        assert isinstance(array_b, cupy.ndarray)
        assert Backend.get_xp_module() is cupy

        array_r = Backend.to_numpy(array_b, numpy.float32)
        assert pytest.approx(array, rel=1e-5) == array_r


@cupy_only
def test_cupy_backend_nesting():
    with CupyBackend() as backend_1:
        with backend_1.copy(exclusive=False) as backend_2:
            assert Backend.current() is backend_2
        assert Backend.current() is backend_1


def test_best_backend():
    backend = BestBackend()

    if is_cupy_available():
        assert isinstance(backend, (CupyBackend, NumpyBackend))
    else:
        assert isinstance(backend, NumpyBackend)
