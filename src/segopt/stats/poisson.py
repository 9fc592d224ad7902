"""Unconstrained optimal partitioning under weighted Poisson loss."""

from __future__ import annotations

import numpy as np
from scipy.special import xlogy

from segopt.core.types import STATUS_ALL_ZERO, UNREACHED, DPTable


def poisson_loss(values: np.ndarray, weights: np.ndarray, mean: float) -> float:
    """Weighted Poisson loss sum(w * (m - y*log m)), dropping the log(y!) term."""

    y = np.asarray(values, dtype=float)
    w = np.asarray(weights, dtype=float)
    return float(np.sum(w * (mean - xlogy(y, mean))))


def segment_cost(total_weight: np.ndarray | float, weighted_sum: np.ndarray | float) -> np.ndarray:
    """Loss of a segment at its weighted mean, from prefix-sum differences.

    A non-positive mean contributes zero cost.
    """

    W = np.asarray(total_weight, dtype=float)
    Y = np.asarray(weighted_sum, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        m = np.where(W > 0, Y / W, 0.0)
        cost = m * W - xlogy(Y, np.where(m > 0, m, 1.0))
    return np.where(m > 0, cost, 0.0)


def unconstrained_poisson(
    values: np.ndarray,
    weights: np.ndarray,
    penalty: float,
    infinite_penalty: float = 1e5,
    zero_penalty: float = 1e-9,
) -> DPTable:
    """Exact O(N^2) penalized segmentation of counts without constraints.

    ``cost[i]`` holds the optimal cost of ``values[:i + 1]``. The recovered
    segments are written left-compacted: slot k of ``end``/``mean`` describes
    the k-th segment and ``intervals[k] == 1``; remaining slots keep the
    ``UNREACHED``/NaN sentinels.
    """

    y = np.asarray(values, dtype=float)
    w = np.asarray(weights, dtype=float)
    n = y.size

    cost_vec = np.full(n, np.nan, dtype=float)
    end_vec = np.full(n, UNREACHED, dtype=np.int64)
    mean_vec = np.full(n, np.nan, dtype=float)
    intervals = np.zeros(n, dtype=np.int64)

    if not np.any(y != 0):
        return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec, intervals=intervals, status=STATUS_ALL_ZERO)

    if penalty > infinite_penalty:
        overall = float(np.sum(w * y) / np.sum(w))
        cost_vec[n - 1] = poisson_loss(y, w, overall)
        mean_vec[0] = overall
        end_vec[0] = n - 1
        intervals[0] = 1
        return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec, intervals=intervals)

    cum_w = np.concatenate(([0.0], np.cumsum(w)))
    cum_y = np.concatenate(([0.0], np.cumsum(w * y)))

    dp = np.full(n, np.inf, dtype=float)
    break_point = np.zeros(n, dtype=np.int64)

    if penalty < zero_penalty:
        dp[:] = np.cumsum(segment_cost(w, w * y))
        break_point[:] = np.arange(n)
    else:
        for i in range(n):
            starts = np.arange(i + 1)
            seg = segment_cost(cum_w[i + 1] - cum_w[starts], cum_y[i + 1] - cum_y[starts])
            prior = np.concatenate(([0.0], dp[:i] + penalty))
            total = seg + prior
            j = int(np.argmin(total))
            dp[i] = total[j]
            break_point[i] = j

    seg_ends: list[int] = []
    seg_means: list[float] = []
    i = n - 1
    while i >= 0:
        j = int(break_point[i])
        W = cum_w[i + 1] - cum_w[j]
        seg_means.append(float((cum_y[i + 1] - cum_y[j]) / W) if W > 0 else 0.0)
        seg_ends.append(i)
        i = j - 1
    seg_ends.reverse()
    seg_means.reverse()

    cost_vec[:] = dp
    k = len(seg_ends)
    end_vec[:k] = seg_ends
    mean_vec[:k] = seg_means
    intervals[:k] = 1
    return DPTable(cost=cost_vec, end=end_vec, mean=mean_vec, intervals=intervals)
