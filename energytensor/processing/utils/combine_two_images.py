import numexpr

from energytensor.utils import xpArray
from energytensor.utils.backends import Backend, CupyBackend

_operators = ("+", "-", "*", "/")


def combine_two_images(image_a: xpArray, image_b: xpArray, operator: str = "+") -> xpArray:
    """
    Combines two images of identical shape voxel by voxel with a binary arithmetic operator.

    Parameters
    ----------
    image_a : first operand
    image_b : second operand
    operator : one of '+', '-', '*', '/'

    Returns
    -------
    Array: image_a <operator> image_b

    """
    if operator not in _operators:
        raise ValueError(f"Unsupported operator '{operator}', must be one of {_operators}")

    if image_a.shape != image_b.shape:
        raise ValueError(f"Images must have the same shape, got {image_a.shape} and {image_b.shape}")

    image_a = Backend.to_backend(image_a)
    image_b = Backend.to_backend(image_b)

    if isinstance(Backend.current(), CupyBackend):
        import cupy

        if operator == "+":

            @cupy.fuse()
            def combine_function(_a, _b):
                return _a + _b

        elif operator == "-":

            @cupy.fuse()
            def combine_function(_a, _b):
                return _a - _b

        elif operator == "*":

            @cupy.fuse()
            def combine_function(_a, _b):
                return _a * _b

        else:

            @cupy.fuse()
            def combine_function(_a, _b):
                return _a / _b

        return combine_function(image_a, image_b)

    else:
        return numexpr.evaluate(f"a {operator} b", local_dict={"a": image_a, "b": image_b})


def add_pointwise(image_a: xpArray, image_b: xpArray) -> xpArray:
    """Voxel-wise sum of two images of identical shape."""
    return combine_two_images(image_a, image_b, "+")
