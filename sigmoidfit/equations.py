"""The maximum-likelihood equations of the model and a constrained Newton solver."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from .model import ModelData

logger = logging.getLogger(__name__)

_RELATIVE_STEP = 1e-6
_MIN_STEP = 1e-8
_SMALLEST_STEP = 1e-15


@dataclass
class Result:
    """Outcome of a search: the parameter vector, its fitness and the seconds spent."""

    solution: np.ndarray
    fitness: float
    time: float


def _split(model: ModelData, variables) -> tuple[np.ndarray, float]:
    values = np.asarray(variables, dtype=float)
    if values.shape != (model.p + 2,):
        raise ValueError(f"expected {model.p + 2} variables: eta, {model.p} betas and sigma^2")
    return values[: model.p + 1], float(values[model.p + 1])


def compute_residuals(model: ModelData, variables) -> np.ndarray:
    """Residuals of the likelihood equations at ``(eta, beta_1..beta_p, sigma^2)``."""
    theta, sigma2 = _split(model, variables)
    with np.errstate(all="ignore"):
        first = (
            sigma2 * (model.n_total() + (sigma2 / 4.0) * model.z3())
            - model.z1()
            - model.a_term(theta)
            + 2.0 * model.b_term(theta)
        )
        rest = [
            model.y_term(l, theta)
            + (sigma2 / 2.0) * model.w_term(l, theta)
            + model.x_term(l, theta)
            for l in range(model.p + 1)
        ]
    return np.array([first, *rest], dtype=float)


def compute_jacobian(model: ModelData, variables) -> np.ndarray:
    """Jacobian of the residuals by central differences."""
    point = np.asarray(variables, dtype=float)
    _split(model, point)
    size = point.size
    jacobian = np.empty((size, size))
    for column in range(size):
        h = _RELATIVE_STEP * max(abs(point[column]), _MIN_STEP)
        forward = point.copy()
        backward = point.copy()
        forward[column] += h
        backward[column] -= h
        jacobian[:, column] = (
            compute_residuals(model, forward) - compute_residuals(model, backward)
        ) / (2.0 * h)
    return jacobian


def _newton_direction(jacobian: np.ndarray, residuals: np.ndarray) -> np.ndarray:
    if not (np.all(np.isfinite(jacobian)) and np.all(np.isfinite(residuals))):
        return np.full(residuals.shape, np.nan)
    return np.linalg.lstsq(jacobian, residuals, rcond=None)[0]


def newton_raphson_result(
    model: ModelData, initial, max_iter=100, tol=1e-6, alpha=1.0, beta=0.5
) -> Result:
    """Newton's method keeping eta and the last two variables non-negative by backtracking."""
    if not 0.0 < beta < 1.0:
        raise ValueError("beta must lie strictly between 0 and 1")
    start = time.perf_counter()
    current = np.asarray(initial, dtype=float).copy()
    size = current.size
    fitness = 0.0

    for iteration in range(max_iter):
        residuals = compute_residuals(model, current)
        norm = float(np.linalg.norm(residuals))
        fitness = -norm
        if norm < tol:
            logger.info("Solution found after %d iterations.", iteration)
            return Result(current, fitness, time.perf_counter() - start)

        direction = _newton_direction(compute_jacobian(model, current), residuals)
        step = alpha
        while True:
            candidate = current - step * direction
            if candidate[0] >= 0.0 and candidate[size - 2] >= 0.0 and candidate[size - 1] >= 0.0:
                break
            step *= beta
            if step < _SMALLEST_STEP:
                logger.info("Cannot move without violating the constraints.")
                return Result(current, fitness, time.perf_counter() - start)

        current = candidate
        logger.info("Iteration %d: %s", iteration, current)

    logger.info("Maximum number of iterations reached.")
    return Result(current, fitness, time.perf_counter() - start)


def newton_raphson(
    model: ModelData, initial, max_iter=100, tol=1e-6, alpha=1.0, beta=0.5
) -> np.ndarray:
    """Constrained Newton's method returning only the final variables."""
    return newton_raphson_result(model, initial, max_iter, tol, alpha, beta).solution