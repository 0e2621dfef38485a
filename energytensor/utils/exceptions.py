class PreconditionError(ValueError):
    """Raised when a tensor image does not satisfy the layout required by an operator,
    for example a destination image that does not have exactly 3 bands.
    The check always happens before any computation is performed."""
