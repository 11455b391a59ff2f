# frame_core/errors.py
"""
Error types raised by the frame engine.

Precondition violations are caught before any matrix work or integration;
numerical degeneracy is detected inside the modal estimate.
"""


class PreconditionError(ValueError):
    """Invalid input: non-positive/non-finite numbers, no free DOFs, massless free node."""


class NumericalDegeneracyError(RuntimeError):
    """The eigen-iteration stalled or produced a NaN / non-positive estimate."""
