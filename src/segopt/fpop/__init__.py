"""Functional pruning over piecewise quadratic cost envelopes."""

from .envelope import Envelope, EnvelopeMinimum
from .isotonic import isotonic_regression_normal
from .piece import LossPiece, quadratic_roots

__all__ = [
    "Envelope",
    "EnvelopeMinimum",
    "LossPiece",
    "isotonic_regression_normal",
    "quadratic_roots",
]
