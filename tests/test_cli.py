import math

import numpy as np
import pytest

from sigmoidfit.cli import (
    SIGMA2_BOUNDS,
    Bounds,
    build_bounds_matrix,
    compute_bounds,
    compute_rae,
    main,
)
from sigmoidfit.estimations import obtain_mu0, obtain_sigma0
from sigmoidfit.io_handler import format_vector
from sigmoidfit.model import ModelData


def _table():
    times = np.arange(0.0, 10.5, 0.5)
    eta = 0.5
    s = 1.0 / (eta + np.exp(-0.5 * times))
    shape = 1.0 + 2.0 * (s - s[0]) / (s[-1] - s[0])
    last = times.size - 1
    columns = [times]
    for i, scale in enumerate((1.0, 1.2, 0.8)):
        wobble = np.ones(times.size)
        k = np.arange(1, last)
        wobble[1:last] = np.exp(0.02 * np.sin(1.3 * k + i))
        columns.append(scale * shape * wobble)
    return np.column_stack(columns)


@pytest.fixture
def model():
    return ModelData.from_table(_table(), p=3)


def _write_csv(path, table):
    lines = ["t;x1;x2;x3"]
    for row in table:
        lines.append(";".join(repr(float(value)).replace(".", ",") for value in row))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_compute_rae_zero_for_identical():
    assert compute_rae([1.0, 2.0, 3.0], [1.0, 2.0, 3.0], 3) == 0.0


def test_compute_rae_worked_example():
    assert compute_rae([2.0, 4.0], [1.0, 4.0], 2) == pytest.approx(0.25)


def test_compute_rae_uses_only_count_values():
    short = compute_rae([2.0, 4.0], [1.0, 4.0], 2)
    longer = compute_rae([2.0, 4.0, 10.0], [1.0, 4.0, 0.0], 2)
    assert short == longer


def test_compute_rae_rejects_non_positive_count():
    with pytest.raises(ValueError):
        compute_rae([1.0], [1.0], 0)


def test_compute_rae_rejects_too_short_vectors():
    with pytest.raises(ValueError):
        compute_rae([1.0], [1.0], 2)


def test_compute_bounds_scales_betas(model):
    estimation = np.array([0.1, 0.2, -0.3, 0.4])
    bounds = compute_bounds(model, 3, estimation)
    np.testing.assert_allclose(bounds.beta[0], 0.9 * estimation[1:])
    np.testing.assert_allclose(bounds.beta[1], 1.1 * estimation[1:])


def test_compute_bounds_sigma2_fixed(model):
    bounds = compute_bounds(model, 3, np.array([0.1, 0.2, -0.3, 0.4]))
    assert bounds.sigma2 == (0.0, 0.01)


def test_compute_bounds_eta_from_growth_ratio(model):
    # Every path grows by a factor of three, so 1 / (3 - 1) bounds eta on both sides.
    bounds = compute_bounds(model, 3, np.array([0.1, 0.2, -0.3, 0.4]))
    assert bounds.eta[0] == pytest.approx(0.5)
    assert bounds.eta[1] == pytest.approx(0.5)


def test_compute_bounds_regression_has_degree_plus_one_coefficients(model):
    bounds = compute_bounds(model, 3, np.array([0.1, 0.2, -0.3, 0.4]))
    assert bounds.beta_regression.shape == (4,)
    assert np.all(np.isfinite(bounds.beta_regression))


def test_compute_bounds_no_growing_path_gives_empty_eta_range():
    table = _table()
    table[:, 1:] = table[::-1, 1:]
    shrinking = ModelData.from_table(table, p=3)
    bounds = compute_bounds(shrinking, 3, np.array([0.1, 0.2, -0.3, 0.4]))
    assert bounds.eta == (math.inf, 0.0)


def test_compute_bounds_rejects_short_estimation(model):
    with pytest.raises(ValueError):
        compute_bounds(model, 3, np.array([0.1, 0.2]))


def test_compute_bounds_rejects_too_few_observations():
    table = np.array([[0.0, 1.0], [1.0, 2.0], [2.0, 3.0]])
    small = ModelData.from_table(table, p=3)
    with pytest.raises(ValueError):
        compute_bounds(small, 3, np.array([0.1, 0.2, -0.3, 0.4]))


def test_build_bounds_matrix_layout():
    beta = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    bounds = Bounds(eta=(0.1, 0.9), beta=beta, sigma2=SIGMA2_BOUNDS, beta_regression=np.zeros(4))
    matrix = build_bounds_matrix(bounds)
    assert matrix.shape == (2, 5)
    np.testing.assert_array_equal(matrix[:, 0], [0.1, 0.9])
    np.testing.assert_array_equal(matrix[:, 1], beta[:, 0])
    np.testing.assert_array_equal(matrix[:, 2], [beta[1, 1], beta[0, 1]])
    np.testing.assert_array_equal(matrix[:, 3], beta[:, 2])
    np.testing.assert_array_equal(matrix[:, 4], list(SIGMA2_BOUNDS))


def test_build_bounds_matrix_orders_negative_beta2(model):
    bounds = compute_bounds(model, 3, np.array([0.1, 0.2, -0.3, 0.4]))
    matrix = build_bounds_matrix(bounds)
    assert np.all(matrix[0, 1:] <= matrix[1, 1:])


def test_main_prints_estimates(tmp_path, capsys):
    path = tmp_path / "paths.csv"
    table = _table()
    _write_csv(path, table)
    assert main([str(path)]) == 0
    output = capsys.readouterr().out
    model = ModelData.from_table(table, p=3)
    expected_alpha = format_vector([obtain_mu0(model), obtain_sigma0(model)])
    assert "alpha: " + expected_alpha in output.splitlines()
    assert output.startswith("Polynomial fit: f(x) = ")
    assert "bounds:" in output


def test_main_missing_file_returns_error(tmp_path, capsys):
    missing = tmp_path / "absent.csv"
    assert main([str(missing)]) == 1
    assert str(missing) in capsys.readouterr().err