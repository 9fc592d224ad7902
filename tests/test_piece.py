import math

import numpy as np

from segopt.core.types import NO_PREVIOUS
from segopt.fpop.piece import LossPiece, quadratic_roots


def test_piece_from_observation_is_weighted_squared_error():
    piece = LossPiece.from_observation(3.0, 2.0, -10.0, 10.0)
    assert (piece.quadratic, piece.linear, piece.constant) == (2.0, -12.0, 18.0)
    assert piece.origin == NO_PREVIOUS
    for m in (-1.0, 0.0, 3.0, 4.5):
        assert np.isclose(piece.cost(m), 2.0 * (m - 3.0) ** 2)
    assert piece.argmin() == 3.0
    assert piece.deriv(3.0) == 0.0
    assert piece.deriv(4.0) == 4.0


def test_piece_argmin_of_linear_and_flat_pieces():
    rising = LossPiece(0.0, 1.0, 0.0, -1.0, 1.0)
    falling = LossPiece(0.0, -1.0, 0.0, -1.0, 1.0)
    flat = LossPiece.flat(5.0, -1.0, 1.0)
    assert rising.argmin() == -math.inf
    assert falling.argmin() == math.inf
    assert rising.clamped_argmin() == -1.0
    assert falling.clamped_argmin() == 1.0
    assert flat.argmin() == -1.0
    assert flat.cost(0.3) == 5.0


def test_piece_roots():
    piece = LossPiece.from_observation(0.0, 1.0, -5.0, 5.0)
    assert piece.has_two_roots(4.0)
    assert np.isclose(piece.smaller_root(4.0), -2.0)
    assert np.isclose(piece.larger_root(4.0), 2.0)
    assert not piece.has_two_roots(0.0)
    assert not piece.has_two_roots(-1.0)
    try:
        piece.smaller_root(-1.0)
        assert False
    except ValueError as exc:
        assert "never reaches" in str(exc)


def test_quadratic_roots_cases():
    assert quadratic_roots(0.0, 2.0, -4.0) == (2.0,)
    assert quadratic_roots(0.0, 0.0, 1.0) == ()
    assert quadratic_roots(1.0, 0.0, 1.0) == ()
    lo, hi = quadratic_roots(-1.0, 0.0, 1.0)
    assert np.isclose(lo, -1.0) and np.isclose(hi, 1.0)
    small, large = quadratic_roots(1.0, -1e8, 1.0)
    assert np.isclose(small, 1e-8, rtol=1e-9)
    assert np.isclose(large, 1e8, rtol=1e-9)


def test_piece_plus_and_same_function():
    piece = LossPiece.from_observation(1.0, 1.0, 0.0, 2.0, origin=3, prev_mean=None)
    moved = piece.plus(1.0, 0.0, 0.5)
    assert (moved.quadratic, moved.linear, moved.constant) == (2.0, -2.0, 1.5)
    assert moved.origin == 3 and moved.prev_mean is None
    assert piece.same_function(piece.restrict(0.5, 1.0))
    assert not piece.same_function(moved)
    assert not piece.same_function(LossPiece.from_observation(1.0, 1.0, 0.0, 2.0, origin=4, prev_mean=None))
