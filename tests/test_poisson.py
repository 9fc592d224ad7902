import itertools
import math

import numpy as np

from segopt.core.types import STATUS_ALL_ZERO, STATUS_OK, UNREACHED
from segopt.ops.backtrack import table_segments
from segopt.stats.poisson import poisson_loss, segment_cost, unconstrained_poisson


def _brute_force_cost(y: np.ndarray, w: np.ndarray, penalty: float) -> float:
    n = y.size
    best = math.inf
    for cuts in itertools.product([False, True], repeat=n - 1):
        bounds = [0] + [i + 1 for i, c in enumerate(cuts) if c] + [n]
        cost = penalty * (len(bounds) - 2)
        for a, b in zip(bounds[:-1], bounds[1:]):
            cost += float(segment_cost(w[a:b].sum(), (w[a:b] * y[a:b]).sum()))
        best = min(best, cost)
    return best


def test_poisson_loss_formula():
    y = np.array([0.0, 1.0, 4.0])
    w = np.array([1.0, 2.0, 0.5])
    m = 1.5
    expected = 1.0 * m + 2.0 * (m - math.log(m)) + 0.5 * (m - 4.0 * math.log(m))
    assert np.isclose(poisson_loss(y, w, m), expected)


def test_segment_cost_handles_zero_mean():
    cost = segment_cost(np.array([2.0, 3.0, 0.0]), np.array([0.0, 6.0, 0.0]))
    assert cost[0] == 0.0
    assert np.isclose(cost[1], 6.0 - 6.0 * math.log(2.0))
    assert cost[2] == 0.0


def test_poisson_all_zero_reports_status():
    out = unconstrained_poisson(np.zeros(4), np.ones(4), penalty=1.0)
    assert out.status == STATUS_ALL_ZERO
    assert not out.ok
    assert np.all(np.isnan(out.cost))
    assert np.all(out.end == UNREACHED)
    assert np.all(out.intervals == 0)


def test_poisson_huge_penalty_single_segment():
    y = np.array([2.0, 2.0, 2.0, 2.0])
    out = unconstrained_poisson(y, np.ones(4), penalty=1e6)
    assert out.status == STATUS_OK
    assert np.isclose(out.cost[3], 4.0 * (2.0 - 2.0 * math.log(2.0)))
    assert np.all(np.isnan(out.cost[:3]))
    assert out.end.tolist() == [3, UNREACHED, UNREACHED, UNREACHED]
    assert out.mean[0] == 2.0
    assert out.intervals.tolist() == [1, 0, 0, 0]
    segments = table_segments(out)
    assert [(s.start, s.end, s.mean) for s in segments] == [(0, 3, 2.0)]


def test_poisson_zero_penalty_one_segment_per_point():
    y = np.array([1.0, 3.0, 0.0, 2.0])
    out = unconstrained_poisson(y, np.ones(4), penalty=0.0)
    per_point = [1.0, 3.0 - 3.0 * math.log(3.0), 0.0, 2.0 - 2.0 * math.log(2.0)]
    assert np.allclose(out.cost, np.cumsum(per_point))
    assert out.end.tolist() == [0, 1, 2, 3]
    assert np.allclose(out.mean, y)
    assert out.intervals.tolist() == [1, 1, 1, 1]


def test_poisson_matches_brute_force():
    rng = np.random.default_rng(11)
    for trial in range(5):
        n = 7
        y = rng.poisson(lam=np.repeat([1.0, 6.0], [3, 4])).astype(float)
        if not np.any(y):
            y[0] = 1.0
        w = rng.uniform(0.5, 2.0, size=n)
        for penalty in (0.5, 2.0, 10.0):
            out = unconstrained_poisson(y, w, penalty=penalty)
            for i in range(n):
                expected = _brute_force_cost(y[: i + 1], w[: i + 1], penalty)
                assert np.isclose(out.cost[i], expected, atol=1e-8), (trial, penalty, i)


def test_poisson_segments_reconstruct_cost():
    y = np.array([0.0, 1.0, 0.0, 1.0, 9.0, 11.0, 10.0, 12.0, 2.0, 1.0, 3.0])
    w = np.ones_like(y)
    penalty = 2.0
    out = unconstrained_poisson(y, w, penalty=penalty)
    segments = table_segments(out)
    assert segments[0].start == 0 and segments[-1].end == y.size - 1
    assert [s.end for s in segments] == out.end[: len(segments)].tolist()
    assert int(out.intervals.sum()) == len(segments)
    total = sum(poisson_loss(y[s.start : s.end + 1], w[s.start : s.end + 1], s.mean) for s in segments)
    total += penalty * (len(segments) - 1)
    assert np.isclose(total, out.cost[-1])
    assert len(segments) >= 3


def test_poisson_final_cost_grows_with_penalty():
    y = np.array([0.0, 1.0, 0.0, 2.0, 9.0, 11.0, 10.0, 3.0, 2.0])
    w = np.array([1.0, 0.5, 2.0, 1.0, 1.0, 1.5, 1.0, 1.0, 2.0])
    # spans the zero-penalty shortcut, the general DP and the single-segment shortcut
    penalties = (0.0, 1e-10, 0.5, 5.0, 1e4, 1e6)
    costs = [unconstrained_poisson(y, w, penalty=lam).cost[-1] for lam in penalties]
    assert all(np.isfinite(costs))
    assert all(a <= b + 1e-9 * max(1.0, abs(b)) for a, b in zip(costs[:-1], costs[1:]))
    overall = float((w * y).sum() / w.sum())
    assert np.isclose(costs[-1], poisson_loss(y, w, overall))
    assert np.isclose(costs[-2], costs[-1])
