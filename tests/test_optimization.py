import math

import numpy as np
import pytest

from sigmoidfit.model import ModelData
from sigmoidfit.optimization import (
    accept,
    generate_neighbor,
    iterated_local_search,
    local_search,
    log_likelihood,
    rand_double,
    simulated_annealing,
)


@pytest.fixture
def model():
    times = np.linspace(0.0, 45.0, 10)
    eta = math.exp(-1)
    q = 0.1 * times - 0.009 * times**2 + 0.0002 * times**3
    mean = 5.0 * (eta + 1.0) / (eta + np.exp(-q))
    noise = np.random.default_rng(2).normal(0.0, 0.02, size=(10, 3))
    return ModelData.from_table(np.column_stack([times, mean[:, None] * np.exp(noise)]))


@pytest.fixture
def start():
    return np.array([math.exp(-1), 0.1, -0.009, 0.0002, 0.01])


@pytest.fixture
def bounds(start):
    a = start * 0.9
    b = start * 1.1
    return np.vstack([np.minimum(a, b), np.maximum(a, b)])


ALPHA = np.array([1.6, 0.001])


def _inside(point, bounds):
    return bool(np.all(point >= bounds[0] - 1e-15) and np.all(point <= bounds[1] + 1e-15))


def test_log_likelihood_penalises_non_positive_sigma(model, start):
    for sigma in (0.0, -0.5):
        point = start.copy()
        point[4] = sigma
        assert log_likelihood(model, ALPHA, point) == -1e10


def test_log_likelihood_is_finite_at_valid_point(model, start):
    value = log_likelihood(model, ALPHA, start)
    assert math.isfinite(value)
    assert abs(value) <= 1e10


def test_accept_better_candidate():
    assert accept(1.0, 2.0, 0.5, np.random.default_rng(0)) is True


def test_accept_equal_candidate():
    assert accept(1.0, 1.0, 0.5, np.random.default_rng(0)) is True


def test_reject_much_worse_candidate_at_low_temperature():
    assert accept(0.0, -1000.0, 1e-3, np.random.default_rng(0)) is False


def test_rand_double_range_and_reproducibility():
    first = [rand_double(2.0, 3.0, np.random.default_rng(7)) for _ in range(5)]
    second = [rand_double(2.0, 3.0, np.random.default_rng(7)) for _ in range(5)]
    assert first == second
    rng = np.random.default_rng(8)
    values = np.array([rand_double(2.0, 3.0, rng) for _ in range(200)])
    assert float(values.min()) >= 2.0
    assert float(values.max()) < 3.0


def test_generate_neighbor_stays_in_bounds(start, bounds):
    rng = np.random.default_rng(4)
    neighbors = np.array([generate_neighbor(start, bounds, 0.5, rng) for _ in range(50)])
    assert neighbors.shape == (50, start.size)
    clipped = np.clip(neighbors, bounds[0], bounds[1])
    assert np.array_equal(clipped, neighbors)
    assert not np.array_equal(neighbors[0], start)


def test_generate_neighbor_zero_scale_only_clips(bounds):
    outside = bounds[1] + 1.0
    assert np.array_equal(generate_neighbor(outside, bounds, 0.0, np.random.default_rng(0)), bounds[1])


def test_local_search_does_not_get_worse(model, start, bounds):
    initial_val = log_likelihood(model, ALPHA, start)
    result = local_search(model, ALPHA, start, bounds, 5, 0.01, rng=np.random.default_rng(5))
    assert result.fitness >= initial_val
    assert result.fitness == pytest.approx(log_likelihood(model, ALPHA, result.solution))
    assert _inside(result.solution, bounds)
    assert result.time >= 0.0


def test_local_search_without_iterations(model, start, bounds):
    result = local_search(model, ALPHA, start, bounds, 0, 0.01, rng=np.random.default_rng(5))
    assert np.array_equal(result.solution, start)
    assert result.fitness == log_likelihood(model, ALPHA, start)


def test_simulated_annealing_keeps_best(model, start, bounds):
    initial_val = log_likelihood(model, ALPHA, start)
    result = simulated_annealing(
        model, ALPHA, start, bounds, 1.0, 0.9, 5, 20, 1e-4, 0.05, 2, np.random.default_rng(6)
    )
    assert result.fitness >= initial_val
    assert result.fitness == pytest.approx(log_likelihood(model, ALPHA, result.solution))


def test_iterated_local_search_keeps_best(model, start, bounds):
    initial_val = log_likelihood(model, ALPHA, start)
    result = iterated_local_search(
        model, ALPHA, start, bounds, 2, 0.001, 3, 0.01, np.random.default_rng(9)
    )
    assert result.fitness >= initial_val
    assert result.fitness == pytest.approx(log_likelihood(model, ALPHA, result.solution))
    assert _inside(result.solution, bounds)