import numexpr

from energytensor.processing.filters.derivative_cascade import DerivativeFields
from energytensor.utils import xpArray
from energytensor.utils.backends import Backend, CupyBackend

_t11_expression = "gxx * gxx + gxy * gxy - gx * gx3"
_t12_expression = "-gxy * (gxx + gyy) + (gx * gy3 + gy * gx3) / 2"
_t22_expression = "gxy * gxy + gyy * gyy - gy * gy3"


def assemble_tensor(fields: DerivativeFields, out: xpArray) -> xpArray:
    """
    Assembles the gradient energy tensor from its derivative fields, pixel by pixel:

        t11 = gxx^2 + gxy^2 - gx*gx3
        t12 = -gxy*(gxx + gyy) + (gx*gy3 + gy*gx3)/2
        t22 = gxy^2 + gyy^2 - gy*gy3

    The signs correspond to a right-handed coordinate system: orientations derived from the
    tensor are counter-clockwise with the x axis at zero.

    Parameters
    ----------
    fields : derivative fields as returned by derivative_cascade
    out : destination array of shape (height, width, 3), must already have exactly 3 bands.

    Returns
    -------
    out, with bands (t11, t12, t22) along the last axis.

    """
    if isinstance(Backend.current(), CupyBackend):
        import cupy

        @cupy.fuse()
        def t11_function(gx, gxx, gxy, gx3):
            return gxx * gxx + gxy * gxy - gx * gx3

        @cupy.fuse()
        def t12_function(gx, gy, gxx, gxy, gyy, gx3, gy3):
            return -gxy * (gxx + gyy) + (gx * gy3 + gy * gx3) / 2

        @cupy.fuse()
        def t22_function(gy, gxy, gyy, gy3):
            return gxy * gxy + gyy * gyy - gy * gy3

        t11 = t11_function(fields.gx, fields.gxx, fields.gxy, fields.gx3)
        t12 = t12_function(fields.gx, fields.gy, fields.gxx, fields.gxy, fields.gyy, fields.gx3, fields.gy3)
        t22 = t22_function(fields.gy, fields.gxy, fields.gyy, fields.gy3)

    else:
        local_dict = fields._asdict()
        t11 = numexpr.evaluate(_t11_expression, local_dict=local_dict)
        t12 = numexpr.evaluate(_t12_expression, local_dict=local_dict)
        t22 = numexpr.evaluate(_t22_expression, local_dict=local_dict)

    out[..., 0] = t11
    out[..., 1] = t12
    out[..., 2] = t22

    return out
