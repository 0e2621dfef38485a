import numpy


def real_promote(dtype) -> numpy.dtype:
    """
    Returns the floating point dtype used for internal computation on images of the given dtype.
    Integer and boolean types are promoted to float64 so that chains of filters do not lose precision,
    float16 is lifted to float32, other floating point types are kept as they are.

    Parameters
    ----------
    dtype : dtype of the input samples

    Returns
    -------
    Floating point dtype for computation

    """
    dtype = numpy.dtype(dtype)

    if dtype.kind in "biu":
        return numpy.dtype(numpy.float64)
    elif dtype.kind == "f":
        if dtype.itemsize < 4:
            return numpy.dtype(numpy.float32)
        return dtype
    else:
        raise TypeError(f"Cannot compute with samples of type {dtype}, a real-valued type is required")
