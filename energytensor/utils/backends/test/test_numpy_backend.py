import dask.array
import numpy
import pytest

from energytensor.utils.backends import Backend, NumpyBackend


def test_numpy_backend():
    array = numpy.random.uniform(0, 1, size=(64, 48)).astype(numpy.float32)

    with NumpyBackend():
        array_b = Backend.to_backend(array, numpy.float64)
        array_r = Backend.to_numpy(array_b, numpy.float32)

        assert array_b.dtype == numpy.float64
        assert pytest.approx(array, rel=1e-5) == array_r


def test_numpy_backend_force_copy():
    array = numpy.zeros((8, 8), dtype=numpy.float32)

    with NumpyBackend():
        assert Backend.to_backend(array) is array
        copy = Backend.to_backend(array, force_copy=True)
        copy[0, 0] = 1
        assert array[0, 0] == 0


def test_numpy_backend_dask():
    array = numpy.arange(100, dtype=numpy.float32).reshape(10, 10)
    lazy = dask.array.from_array(array, chunks=(5, 5))

    with NumpyBackend():
        computed = Backend.to_backend(lazy)
        assert isinstance(computed, numpy.ndarray)
        numpy.testing.assert_array_equal(computed, array)
