"""Log-likelihood of the model and trajectory-based searches that maximise it."""

from __future__ import annotations

import logging
import math
import time

import numpy as np

from .equations import Result
from .model import ModelData

logger = logging.getLogger(__name__)

PENALTY = -1e10


def _resolve_rng(rng) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def log_likelihood(model: ModelData, alpha, epsilon) -> float:
    """Profile log-likelihood at ``epsilon``; invalid values are penalised with ``-1e10``."""
    eps = np.asarray(epsilon, dtype=float)
    sigma2 = float(eps[model.p + 1])
    if not sigma2 > 0.0:
        return PENALTY
    with np.errstate(all="ignore"):
        value = -(model.n_total() / 2.0) * math.log(sigma2) - (
            model.z1() + model.phi(eps) - 2.0 * model.var_gamma(eps)
        ) / (2.0 * sigma2)
    if not math.isfinite(value) or abs(value) > 1e10:
        return PENALTY
    return float(value)


def accept(current_val, candidate_val, temperature, rng=None) -> bool:
    """Metropolis rule for maximisation."""
    if candidate_val > current_val:
        return True
    if temperature == 0:
        return False
    ratio = (candidate_val - current_val) / temperature
    if ratio >= 0:
        return True
    return bool(_resolve_rng(rng).random() < math.exp(ratio))


def rand_double(a, b, rng=None) -> float:
    """Uniform value between ``a`` and ``b``."""
    return float(_resolve_rng(rng).uniform(a, b))


def _lower_upper(bounds) -> tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(bounds, dtype=float)
    return arr[0], arr[1]


def generate_neighbor(current, bounds, step_scale=0.1, rng=None) -> np.ndarray:
    """Random point around ``current``, each step a fraction of the bound range, kept in bounds."""
    rng = _resolve_rng(rng)
    point = np.asarray(current, dtype=float)
    lower, upper = _lower_upper(bounds)
    reach = step_scale * (upper - lower)
    steps = rng.uniform(-reach, reach)
    return np.minimum(upper, np.maximum(lower, point + steps))


def local_search(
    model: ModelData, alpha, initial, bounds, max_iter, base_step, min_step=1e-8, rng=None
) -> Result:
    """Coordinate descent with random coordinate order and a shrinking step."""
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    lower, upper = _lower_upper(bounds)
    current = np.asarray(initial, dtype=float).copy()
    current_val = log_likelihood(model, alpha, current)

    for iteration in range(max_iter):
        improved = False
        for i in rng.permutation(current.size):
            step = base_step * (upper[i] - lower[i])
            trial = current.copy()
            best_val = current_val
            best_coord = current[i]
            for move in (-step, step):
                candidate = min(upper[i], max(lower[i], current[i] + move))
                trial[i] = candidate
                value = log_likelihood(model, alpha, trial)
                if value > best_val:
                    best_val = value
                    best_coord = candidate
                    improved = True
            current[i] = best_coord
            current_val = best_val

        logger.info("Iteration %d, LogL = %g", iteration, current_val)

        if not improved and base_step > min_step:
            base_step *= 0.5
            logger.info("Refining step size to %g", base_step)
        if not improved and base_step <= min_step:
            logger.info("No improvement. Stopping.")
            break

    elapsed = time.perf_counter() - start
    logger.info("Coordinate descent time: %g s", elapsed)
    return Result(current, current_val, elapsed)


def simulated_annealing(
    model: ModelData,
    alpha,
    epsilon_init,
    bounds,
    t0=1.0,
    gamma=0.95,
    chain_length=20,
    max_iter=1000,
    t_min=1e-4,
    step_size=0.01,
    restarts=3,
    rng=None,
) -> Result:
    """Simulated annealing with restarts from the best point and a halving step."""
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    best_global = np.asarray(epsilon_init, dtype=float).copy()
    best_global_val = log_likelihood(model, alpha, best_global)

    for restart in range(restarts):
        current = best_global.copy()
        current_val = best_global_val
        best_local_val = current_val
        temperature = t0
        iteration = 0
        unchanged = 0

        while iteration < max_iter and temperature > t_min and unchanged < chain_length:
            changed = False
            for _ in range(chain_length):
                candidate = generate_neighbor(current, bounds, step_size, rng)
                candidate_val = log_likelihood(model, alpha, candidate)
                if not math.isfinite(candidate_val):
                    continue
                if candidate_val > current_val or rng.uniform(0.0, 1.0) < math.exp(
                    (candidate_val - current_val) / temperature
                ):
                    current = candidate
                    current_val = candidate_val
                    changed = True
                    if current_val > best_local_val:
                        best_local_val = current_val
                        if best_local_val > best_global_val:
                            best_global = current.copy()
                            best_global_val = best_local_val

            unchanged = 0 if changed else unchanged + 1
            if iteration % 10 == 0:
                logger.info(
                    "Iteration %d, T = %g, LogL current = %g, LogL best = %g",
                    iteration,
                    temperature,
                    current_val,
                    best_global_val,
                )
            temperature *= gamma
            iteration += 1

        logger.info("[Restart %d] Best local LogL = %g", restart + 1, best_local_val)
        step_size *= 0.5

    elapsed = time.perf_counter() - start
    logger.info("SA time: %g s; best solution: %s", elapsed, best_global)
    return Result(best_global, best_global_val, elapsed)


def iterated_local_search(
    model: ModelData,
    alpha,
    initial,
    bounds,
    ils_max_iter,
    perturbation_size,
    ls_max_iter,
    ls_step_size,
    rng=None,
) -> Result:
    """Local search restarted from random perturbations of the best point."""
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    lower, upper = _lower_upper(bounds)

    first = local_search(model, alpha, initial, bounds, ls_max_iter, ls_step_size, rng=rng)
    best, best_val = first.solution, first.fitness

    for _ in range(ils_max_iter):
        noise = perturbation_size * (2.0 * rng.uniform(-1.0, 1.0, size=best.size))
        perturbed = np.maximum(lower, np.minimum(upper, best + noise))
        found = local_search(model, alpha, perturbed, bounds, ls_max_iter, ls_step_size, rng=rng)
        if found.fitness > best_val:
            best, best_val = found.solution, found.fitness

    elapsed = time.perf_counter() - start
    logger.info("ILS time: %g s; best solution: %s", elapsed, best)
    return Result(best, best_val, elapsed)