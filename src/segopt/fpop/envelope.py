"""Piecewise quadratic cost envelopes.

An envelope maps each candidate segment mean in a fixed working range to the
best cost of any path that ends with that mean. Pieces are kept sorted,
disjoint and contiguous; every operation returns a new envelope.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, replace
from typing import Iterator, NamedTuple

from segopt.core.types import NO_PREVIOUS
from segopt.fpop.piece import LossPiece, quadratic_roots


class EnvelopeMinimum(NamedTuple):
    cost: float
    mean: float
    end: int
    prev_mean: float


@dataclass(frozen=True)
class Envelope:
    pieces: tuple[LossPiece, ...]

    def __post_init__(self) -> None:
        if not self.pieces:
            raise ValueError("envelope requires at least one piece")

    @classmethod
    def from_observation(
        cls,
        value: float,
        weight: float,
        min_mean: float,
        max_mean: float,
        origin: int = NO_PREVIOUS,
    ) -> "Envelope":
        return cls((LossPiece.from_observation(value, weight, min_mean, max_mean, origin),))

    def __len__(self) -> int:
        return len(self.pieces)

    def __iter__(self) -> Iterator[LossPiece]:
        return iter(self.pieces)

    @property
    def min_mean(self) -> float:
        return self.pieces[0].min_mean

    @property
    def max_mean(self) -> float:
        return self.pieces[-1].max_mean

    def add(self, quadratic: float, linear: float, constant: float) -> "Envelope":
        # Adding the same function everywhere leaves all crossings in place.
        return Envelope(tuple(p.plus(quadratic, linear, constant) for p in self.pieces))

    def add_observation(self, value: float, weight: float) -> "Envelope":
        return self.add(weight, -2.0 * weight * value, weight * value * value)

    def scale(self, factor: float) -> "Envelope":
        return Envelope(
            tuple(
                replace(
                    p,
                    quadratic=p.quadratic * factor,
                    linear=p.linear * factor,
                    constant=p.constant * factor,
                )
                for p in self.pieces
            )
        )

    def with_origin(self, origin: int) -> "Envelope":
        return Envelope(tuple(replace(p, origin=origin) for p in self.pieces))

    def running_min_from_left(self, stamp: int) -> "Envelope":
        """Envelope of min over all means <= m, stamped with ``stamp``.

        Descending stretches keep their coefficients (the previous segment may
        share the current mean); past each vertex the result stays flat at the
        running minimum, remembering the mean where it was reached.
        """

        out: list[LossPiece] = []
        running = math.inf
        running_at = math.nan
        for piece in self.pieces:
            lo, hi = piece.min_mean, piece.max_mean
            vertex = piece.clamped_argmin()
            bottom = piece.cost(vertex)
            if bottom >= running:
                _push(out, LossPiece.flat(running, lo, hi, stamp, running_at))
                continue
            start = lo
            if piece.cost(lo) > running:
                start = min(max(piece.smaller_root(running), lo), vertex)
                _push(out, LossPiece.flat(running, lo, start, stamp, running_at))
            if vertex > start:
                _push(out, replace(piece, min_mean=start, max_mean=vertex, origin=stamp, prev_mean=None))
            running = bottom
            running_at = vertex
            if vertex < hi:
                _push(out, LossPiece.flat(bottom, vertex, hi, stamp, vertex))
        return Envelope(tuple(out))

    def running_min_from_right(self, stamp: int) -> "Envelope":
        """Envelope of min over all means >= m, stamped with ``stamp``."""

        return self._reflect().running_min_from_left(stamp)._reflect()

    def minimum_with(self, other: "Envelope") -> "Envelope":
        """Pointwise lower envelope of two envelopes on the same range.

        Within each overlap of a piece pair the difference of the two
        quadratics is another quadratic; its roots split the overlap into
        stretches where one side is uniformly lower. Ties keep ``self``.
        """

        if self.min_mean != other.min_mean or self.max_mean != other.max_mean:
            raise ValueError(
                f"envelopes cover different ranges: [{self.min_mean}, {self.max_mean}] "
                f"vs [{other.min_mean}, {other.max_mean}]"
            )
        out: list[LossPiece] = []
        mine, theirs = self.pieces, other.pieces
        i = j = 0
        while i < len(mine) and j < len(theirs):
            a, b = mine[i], theirs[j]
            left = max(a.min_mean, b.min_mean)
            right = min(a.max_mean, b.max_mean)
            if right > left:
                roots = quadratic_roots(
                    a.quadratic - b.quadratic,
                    a.linear - b.linear,
                    a.constant - b.constant,
                )
                bounds = [left, *(r for r in roots if left < r < right), right]
                for lo, hi in zip(bounds[:-1], bounds[1:]):
                    mid = 0.5 * (lo + hi)
                    winner = a if a.cost(mid) <= b.cost(mid) else b
                    _push(out, winner.restrict(lo, hi))
            if a.max_mean <= b.max_mean:
                i += 1
            if b.max_mean <= a.max_mean:
                j += 1
        return Envelope(tuple(out))

    def find_piece(self, mean: float) -> LossPiece:
        if not self.min_mean <= mean <= self.max_mean:
            raise ValueError(f"mean {mean!r} outside envelope range [{self.min_mean}, {self.max_mean}]")
        idx = bisect.bisect_left([p.max_mean for p in self.pieces], mean)
        return self.pieces[min(idx, len(self.pieces) - 1)]

    def find_cost(self, mean: float) -> float:
        return self.find_piece(mean).cost(mean)

    def minimize(self) -> EnvelopeMinimum:
        best = _piece_minimum(self.pieces[0])
        for piece in self.pieces[1:]:
            candidate = _piece_minimum(piece)
            if candidate.cost < best.cost:
                best = candidate
        return best

    def _reflect(self) -> "Envelope":
        return Envelope(tuple(_reflect_piece(p) for p in reversed(self.pieces)))


def _piece_minimum(piece: LossPiece) -> EnvelopeMinimum:
    mean = piece.clamped_argmin()
    prev_mean = mean if piece.prev_mean is None else piece.prev_mean
    return EnvelopeMinimum(cost=piece.cost(mean), mean=mean, end=piece.origin, prev_mean=prev_mean)


def _reflect_piece(piece: LossPiece) -> LossPiece:
    prev_mean = piece.prev_mean
    if prev_mean is not None and not math.isnan(prev_mean):
        prev_mean = -prev_mean
    return replace(
        piece,
        linear=-piece.linear,
        min_mean=-piece.max_mean,
        max_mean=-piece.min_mean,
        prev_mean=prev_mean,
    )


def _push(out: list[LossPiece], piece: LossPiece) -> None:
    if piece.max_mean <= piece.min_mean:
        return
    if out and out[-1].same_function(piece):
        out[-1] = out[-1].restrict(out[-1].min_mean, piece.max_mean)
        return
    out.append(piece)
