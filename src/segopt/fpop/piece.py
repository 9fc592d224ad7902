"""Quadratic loss pieces used by the functional pruning engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from segopt.core.types import NO_PREVIOUS


def quadratic_roots(a: float, b: float, c: float, eps: float = 1e-12) -> tuple[float, ...]:
    """Real roots of a*x**2 + b*x + c in ascending order.

    Degrades to the linear case when ``|a| <= eps``. Returns an empty tuple
    when there is no real root or the polynomial is constant.
    """

    if abs(a) <= eps:
        if abs(b) <= eps:
            return ()
        return (-c / b,)
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return ()
    if disc == 0.0:
        return (-b / (2.0 * a),)
    sq = math.sqrt(disc)
    # Citardauq form avoids cancellation when b*b >> 4ac.
    q = -0.5 * (b + math.copysign(sq, b))
    r1 = q / a
    r2 = c / q if q != 0.0 else -r1
    return (min(r1, r2), max(r1, r2))


@dataclass(frozen=True)
class LossPiece:
    """cost(m) = quadratic*m**2 + linear*m + constant on [min_mean, max_mean].

    ``origin`` is the index where the previous segment ended on the best path
    reaching this piece (``NO_PREVIOUS`` when there is none). ``prev_mean`` is
    the mean of that previous segment; ``None`` means it equals the mean the
    piece is evaluated at, NaN means there is no previous segment.
    """

    quadratic: float
    linear: float
    constant: float
    min_mean: float
    max_mean: float
    origin: int = NO_PREVIOUS
    prev_mean: float | None = math.nan

    @classmethod
    def from_observation(
        cls,
        value: float,
        weight: float,
        min_mean: float,
        max_mean: float,
        origin: int = NO_PREVIOUS,
        prev_mean: float | None = math.nan,
    ) -> "LossPiece":
        return cls(
            quadratic=weight,
            linear=-2.0 * weight * value,
            constant=weight * value * value,
            min_mean=min_mean,
            max_mean=max_mean,
            origin=origin,
            prev_mean=prev_mean,
        )

    @classmethod
    def flat(
        cls,
        level: float,
        min_mean: float,
        max_mean: float,
        origin: int = NO_PREVIOUS,
        prev_mean: float | None = math.nan,
    ) -> "LossPiece":
        return cls(0.0, 0.0, level, min_mean, max_mean, origin, prev_mean)

    def cost(self, mean: float) -> float:
        return (self.quadratic * mean + self.linear) * mean + self.constant

    def deriv(self, mean: float) -> float:
        return 2.0 * self.quadratic * mean + self.linear

    def argmin(self) -> float:
        if self.quadratic > 0.0:
            return -self.linear / (2.0 * self.quadratic)
        if self.linear > 0.0:
            return -math.inf
        if self.linear < 0.0:
            return math.inf
        return self.min_mean

    def clamped_argmin(self) -> float:
        return min(max(self.argmin(), self.min_mean), self.max_mean)

    def has_two_roots(self, equals: float) -> bool:
        return len(quadratic_roots(self.quadratic, self.linear, self.constant - equals)) == 2

    def smaller_root(self, equals: float) -> float:
        roots = quadratic_roots(self.quadratic, self.linear, self.constant - equals)
        if not roots:
            raise ValueError(f"cost never reaches {equals!r} on this piece")
        return roots[0]

    def larger_root(self, equals: float) -> float:
        roots = quadratic_roots(self.quadratic, self.linear, self.constant - equals)
        if not roots:
            raise ValueError(f"cost never reaches {equals!r} on this piece")
        return roots[-1]

    def same_function(self, other: "LossPiece") -> bool:
        return (
            self.quadratic == other.quadratic
            and self.linear == other.linear
            and self.constant == other.constant
            and self.origin == other.origin
            and _same_prev_mean(self.prev_mean, other.prev_mean)
        )

    def restrict(self, min_mean: float, max_mean: float) -> "LossPiece":
        return replace(self, min_mean=min_mean, max_mean=max_mean)

    def plus(self, quadratic: float, linear: float, constant: float) -> "LossPiece":
        return replace(
            self,
            quadratic=self.quadratic + quadratic,
            linear=self.linear + linear,
            constant=self.constant + constant,
        )


def _same_prev_mean(a: float | None, b: float | None) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b
