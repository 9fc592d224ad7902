"""Penalized isotonic regression under squared-error loss.

Each step carries the full cost envelope (best cost as a function of the
current segment mean) instead of a single number, so the constrained optimum
for every prefix can be read off exactly.
"""

from __future__ import annotations

import numpy as np

from segopt.core.types import NO_PREVIOUS, DPTable
from segopt.fpop.envelope import Envelope


def isotonic_regression_normal(
    values: np.ndarray,
    weights: np.ndarray,
    penalty: float,
    decreasing: bool = False,
    padding: float = 0.1,
) -> DPTable:
    """Optimal penalized monotone step function for every prefix.

    Returns a ``DPTable`` where ``cost[i]`` is the optimal penalized loss of
    ``values[:i + 1]``, ``mean[i]`` the mean of its last segment and ``end[i]``
    the index where the previous segment ended (``NO_PREVIOUS`` for none).
    Weights are assumed positive.
    """

    y = np.asarray(values, dtype=float)
    w = np.asarray(weights, dtype=float)
    n = y.size
    cost_vec = np.zeros(n, dtype=float)
    mean_vec = np.zeros(n, dtype=float)
    end_vec = np.full(n, NO_PREVIOUS, dtype=np.int64)
    if n == 0:
        return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec)

    lo = float(y.min())
    hi = float(y.max())
    if lo == hi:
        mean_vec[:] = lo
        end_vec[:] = 0
        return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec, constant_input=True)

    span = hi - lo
    lo -= padding * span
    hi += padding * span

    envelope = Envelope.from_observation(float(y[0]), float(w[0]), lo, hi)
    best = envelope.minimize()
    cost_vec[0] = best.cost
    mean_vec[0] = best.mean

    for i in range(1, n):
        obs, weight = float(y[i]), float(w[i])
        extend = envelope.add_observation(obs, weight)
        if decreasing:
            prior = envelope.running_min_from_right(i - 1)
        else:
            prior = envelope.running_min_from_left(i - 1)
        change = prior.add(0.0, 0.0, penalty).add_observation(obs, weight)

        stay = extend.minimize()
        jump = change.minimize()
        best = jump if jump.cost < stay.cost else stay
        cost_vec[i] = best.cost
        mean_vec[i] = best.mean
        end_vec[i] = best.end

        envelope = extend.minimum_with(change)

    return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec)
