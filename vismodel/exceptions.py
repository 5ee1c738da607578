"""
Exceptions raised by vismodel
=============================

All failures are deterministic functions of malformed input and are raised
synchronously to the caller. Each class also derives from the builtin
exception a caller would naturally catch for that kind of failure.
"""


class VisModelError(Exception):
    """Base exception for vismodel errors."""


class CapabilityError(VisModelError, NotImplementedError):
    """
    A model was asked for an operation its analyticity does not support.

    Typical case: a scalar ``visibility`` on a composite whose visibility
    axis is ``NotAnalytic``, which is only defined in batch form.
    """


class ShapeMismatchError(VisModelError, ValueError):
    """Paired arrays or Fourier grids have inconsistent shapes."""


class ConstructionError(VisModelError, TypeError):
    """Two models cannot be combined (non-model operand or mismatched precision)."""
