import math

import numpy
import pytest

from energytensor.processing.tensor import tensor_eigen_representation, tensor_to_edge_corner, tensor_trace
from energytensor.utils.backends import Backend
from energytensor.utils.exceptions import PreconditionError
from energytensor.utils.testing import execute_both_backends

# (t11, t12, t22) -> (large eigenvalue, small eigenvalue, orientation)
_tensors = [
    ((3.0, 0.0, 1.0), (3.0, 1.0, 0.0)),
    ((1.0, 0.0, 3.0), (3.0, 1.0, math.pi / 2)),
    ((2.0, 1.0, 2.0), (3.0, 1.0, math.pi / 4)),
    ((2.0, -1.0, 2.0), (3.0, 1.0, -math.pi / 4)),
    ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ((5.0, 0.0, 5.0), (5.0, 5.0, 0.0)),
]


def _tensor_image(xp):
    values = xp.asarray([tensor for tensor, _ in _tensors], dtype=xp.float64)
    return xp.broadcast_to(values[None, :, :], (4, len(_tensors), 3)).copy()


@execute_both_backends
def test_tensor_trace():
    xp = Backend.get_xp_module()
    trace = Backend.to_numpy(tensor_trace(_tensor_image(xp)))

    assert trace.shape == (4, len(_tensors))
    numpy.testing.assert_allclose(trace[0], [t11 + t22 for (t11, _, t22), _ in _tensors])


@execute_both_backends
def test_tensor_eigen_representation():
    xp = Backend.get_xp_module()
    eigen = Backend.to_numpy(tensor_eigen_representation(_tensor_image(xp)))

    assert eigen.shape == (4, len(_tensors), 3)
    for row in eigen:
        numpy.testing.assert_allclose(row, [expected for _, expected in _tensors], atol=1e-12)


@execute_both_backends
def test_tensor_to_edge_corner():
    xp = Backend.get_xp_module()
    edge_corner = Backend.to_numpy(tensor_to_edge_corner(_tensor_image(xp)))

    expected = [(large - small, orientation, 2 * small) for _, (large, small, orientation) in _tensors]
    numpy.testing.assert_allclose(edge_corner[2], expected, atol=1e-12)


@pytest.mark.parametrize("function", [tensor_trace, tensor_eigen_representation, tensor_to_edge_corner])
def test_tensor_utils_band_count(function):
    with pytest.raises(PreconditionError):
        function(numpy.zeros((5, 5, 2)))

    with pytest.raises(PreconditionError):
        function(numpy.zeros((5, 5)))


@execute_both_backends
@pytest.mark.parametrize("dtype", ["int64", "uint16", "float16"])
def test_tensor_eigen_representation_integer_input(dtype):
    xp = Backend.get_xp_module()
    tensor = xp.zeros((3, 3, 3), dtype=dtype)
    tensor[..., 0] = 1
    tensor[..., 2] = 2

    eigen = Backend.to_numpy(tensor_eigen_representation(tensor))
    edge_corner = Backend.to_numpy(tensor_to_edge_corner(tensor))

    assert eigen.dtype.kind == "f"
    assert edge_corner.dtype.kind == "f"
    numpy.testing.assert_allclose(eigen[1, 1], [2.0, 1.0, math.pi / 2], rtol=1e-3)
    numpy.testing.assert_allclose(edge_corner[1, 1], [1.0, math.pi / 2, 2.0], rtol=1e-3)
