"""Initial estimates of the model parameters from the sample paths."""

from __future__ import annotations

import numpy as np

from .io_handler import remove_first, remove_last
from .model import ModelData
from .regression import linear_regression, polynomial_regression


def obtain_mu0(model: ModelData) -> float:
    """Mean of the logarithms of the initial values of the paths."""
    initial = model.v[0, 1 : model.d + 1]
    return float(np.sum(np.log(initial)) / model.d)


def obtain_sigma0(model: ModelData) -> float:
    """Variance of the logarithms of the initial values of the paths."""
    mu0 = obtain_mu0(model)
    initial = model.v[0, 1 : model.d + 1]
    return float(np.sum((np.log(initial) - mu0) ** 2) / model.d)


def _path_values(model: ModelData) -> np.ndarray:
    return model.x[1 : model.d + 1, 1 : model.N + 1]


def arithmetic_mean(model: ModelData) -> np.ndarray:
    """Mean of the paths at every observation, with a leading zero."""
    mean = np.zeros(model.N + 1)
    mean[1:] = np.sum(_path_values(model), axis=0) / model.d
    return mean


def geometric_mean(model: ModelData) -> np.ndarray:
    """Geometric mean of the paths at every observation, with a leading zero."""
    mean = np.zeros(model.N + 1)
    mean[1:] = np.prod(_path_values(model), axis=0) ** (1.0 / model.d)
    return mean


def vector_sigma2(model: ModelData) -> np.ndarray:
    """``2 * log(arithmetic / geometric)`` at every observation, with a leading zero."""
    arithmetic = arithmetic_mean(model)
    geometric = geometric_mean(model)
    sigma2 = np.zeros(model.N + 1)
    with np.errstate(divide="ignore", invalid="ignore"):
        sigma2[1:] = 2.0 * np.log(arithmetic[1:] / geometric[1:])
    return sigma2


def values_polynomial_regression(model: ModelData) -> np.ndarray:
    """Linearised mean ``-log(m_N / m_j - 1)`` for ``j = 1..N-1``; undefined values become 0."""
    arithmetic = arithmetic_mean(model)
    result = np.zeros(model.N)
    with np.errstate(divide="ignore", invalid="ignore"):
        data = -np.log(arithmetic[model.N] / arithmetic[1 : model.N] - 1.0)
    result[1:] = np.where(np.isnan(data), 0.0, data)
    return result


def estimate_sigma(model: ModelData) -> float:
    """Slope of the growth of ``sigma_j^2 - sigma_0^2`` over time."""
    sigma2 = vector_sigma2(model)
    sigma0 = obtain_sigma0(model)
    regression_values = sigma2[1 : model.N + 1] - sigma0
    slope, _ = linear_regression(model.t_values, regression_values)
    return slope


def estimate_eta_beta(model: ModelData, degree: int) -> np.ndarray:
    """Polynomial fit of the linearised mean; coefficients are lowest degree first."""
    y = remove_first(values_polynomial_regression(model))
    times = remove_last(model.t_values)
    return polynomial_regression(times, y, degree)