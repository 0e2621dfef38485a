from energytensor.processing.utils.real_promote import real_promote
from energytensor.utils import xpArray
from energytensor.utils.backends import Backend
from energytensor.utils.exceptions import PreconditionError


def _check_tensor(tensor: xpArray, function_name: str):
    if tensor.ndim != 3 or tensor.shape[-1] != 3:
        raise PreconditionError(f"{function_name}(): input image must have 3 bands.")


def tensor_trace(tensor: xpArray) -> xpArray:
    """
    Computes the trace t11 + t22 of a symmetric 2x2 tensor image.

    Parameters
    ----------
    tensor : tensor image of shape (height, width, 3) with bands (t11, t12, t22)

    Returns
    -------
    Trace image of shape (height, width)

    """
    _check_tensor(tensor, "tensor_trace")
    tensor = Backend.to_backend(tensor)
    return tensor[..., 0] + tensor[..., 2]


def tensor_eigen_representation(tensor: xpArray) -> xpArray:
    """
    Computes the eigen representation of a symmetric 2x2 tensor image: the large eigenvalue,
    the small eigenvalue, and the orientation of the eigenvector of the large eigenvalue.
    Orientations are in radians within (-pi/2, pi/2], counter-clockwise with the x axis at zero.
    Isotropic tensors get orientation zero.

    Parameters
    ----------
    tensor : tensor image of shape (height, width, 3) with bands (t11, t12, t22)

    Returns
    -------
    Image of shape (height, width, 3) with bands (large eigenvalue, small eigenvalue, orientation)

    """
    _check_tensor(tensor, "tensor_eigen_representation")
    tensor = Backend.to_backend(tensor, dtype=real_promote(tensor.dtype))
    xp = Backend.get_xp_module(tensor)

    d1 = tensor[..., 0] + tensor[..., 2]
    d2 = tensor[..., 0] - tensor[..., 2]
    d3 = 2 * tensor[..., 1]
    d4 = xp.sqrt(d2 * d2 + d3 * d3)

    result = xp.empty_like(tensor)
    result[..., 0] = 0.5 * (d1 + d4)
    result[..., 1] = 0.5 * (d1 - d4)
    # atan2(0, 0) is zero:
    result[..., 2] = 0.5 * xp.arctan2(d3, d2)

    return result


def tensor_to_edge_corner(tensor: xpArray) -> xpArray:
    """
    Converts a symmetric 2x2 tensor image into an edge/corner representation:
    edgeness is the difference of the eigenvalues, cornerness is twice the small eigenvalue.

    Parameters
    ----------
    tensor : tensor image of shape (height, width, 3) with bands (t11, t12, t22)

    Returns
    -------
    Image of shape (height, width, 3) with bands (edgeness, orientation, cornerness)

    """
    eigen = tensor_eigen_representation(tensor)

    result = Backend.get_xp_module(eigen).empty_like(eigen)
    result[..., 0] = eigen[..., 0] - eigen[..., 1]
    result[..., 1] = eigen[..., 2]
    result[..., 2] = 2 * eigen[..., 1]

    return result
