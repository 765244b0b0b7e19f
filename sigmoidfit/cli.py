"""Command line entry point: initial estimates and search bounds for a set of paths."""

from __future__ import annotations

import argparse
import math
import sys
from dataclasses import dataclass

import numpy as np

from .estimations import arithmetic_mean, estimate_eta_beta, obtain_mu0, obtain_sigma0
from .io_handler import convert_to_matrix, format_matrix, format_poly, format_vector, read_csv
from .model import ModelData
from .regression import polynomial_regression
from .visualization import MEAN_POINTS, graph_multiple_curves_nr, media

DEFAULT_DATA = "../data/TrayectoriasSimuladas_Multisigmoidal_Articulo.csv"
DEGREE = 3
INITIAL_SIGMA2 = 0.01
SIGMA2_BOUNDS = (0.0, 0.01)
BETA_SPREAD = 0.1

REAL_PARAMETERS = (math.exp(-1), 0.1, -0.009, 0.0002)

ALGORITHM_ESTIMATES = {
    "BL": (0.384842, 0.107690, -0.009599, 0.000210860),
    "SA": (0.374303, 0.109739, -0.009670, 0.00021118),
    "ILS": (0.415067, 0.109651, -0.009780, 0.000215),
    "EA": (0.374502, 0.103642, -0.009623, 0.000200),
    "EA+Elitismo": (0.370183, 0.099506, -0.008949, 0.000199),
    "MA": (0.369941, 0.099469, -0.008973, 0.000199),
    "DE": (0.368640, 0.098817, -0.008912, 0.000198),
}


@dataclass
class Bounds:
    """Search bounds for eta, the betas (row 0 lower, row 1 upper) and sigma^2."""

    eta: tuple[float, float]
    beta: np.ndarray
    sigma2: tuple[float, float]
    beta_regression: np.ndarray


def compute_bounds(model: ModelData, degree: int, estimation_eta_beta) -> Bounds:
    """Derive search bounds from the sample paths and the initial polynomial fit."""
    estimation = np.asarray(estimation_eta_beta, dtype=float).ravel()
    if estimation.size < model.p + 1:
        raise ValueError(f"the estimation needs at least {model.p + 1} values")
    if model.N < 4:
        raise ValueError("at least four observations per path are needed")

    mean = arithmetic_mean(model)
    m_first, m_last = mean[1], mean[model.N]
    with np.errstate(divide="ignore", invalid="ignore"):
        eta_hat = 1.0 / (m_last / m_first - 1.0)
        y = np.zeros(model.N - 2)
        y[1:] = -np.log((m_last / mean[1 : model.N - 2] - 1.0) * eta_hat)
    beta_regression = polynomial_regression(model.t_values[:-3], y[1:], degree)

    betas = estimation[1 : model.p + 1]
    beta = np.vstack([betas * (1.0 - BETA_SPREAD), betas * (1.0 + BETA_SPREAD)])

    paths = slice(1, model.d + 1)
    ratios = model.x[paths, model.N] / model.x[paths, 1]
    inverses = [1.0 / (ratio - 1.0) for ratio in ratios if ratio > 1.0]
    eta = (min(inverses, default=math.inf), max(inverses, default=0.0))

    return Bounds(eta=eta, beta=beta, sigma2=SIGMA2_BOUNDS, beta_regression=beta_regression)


def build_bounds_matrix(bounds: Bounds) -> np.ndarray:
    """Bounds as a 2 x (p + 2) matrix ordered eta, beta_1..beta_p, sigma^2.

    The rows of the beta_2 column are swapped, since that coefficient is
    expected to be negative, which turns its scaled bounds upside down.
    """
    beta = np.asarray(bounds.beta, dtype=float)
    columns = beta.shape[1]
    matrix = np.zeros((2, columns + 2))
    matrix[:, 0] = bounds.eta
    matrix[:, 1 : columns + 1] = beta
    if columns >= 2:
        matrix[:, 2] = beta[::-1, 1]
    matrix[:, -1] = bounds.sigma2
    return matrix


def compute_rae(sample, estimated, count) -> float:
    """Mean relative absolute error over the first ``count`` values."""
    if count <= 0:
        raise ValueError("count must be positive")
    observed = np.asarray(sample, dtype=float)[:count]
    fitted = np.asarray(estimated, dtype=float)[:count]
    if observed.size < count or fitted.size < count:
        raise ValueError("both vectors need at least count values")
    return float(np.sum(np.abs((observed - fitted) / observed)) / count)


def _plot_comparison(model: ModelData) -> None:
    curves = [("Teórica", media(model, *REAL_PARAMETERS))]
    curves.extend((name, media(model, *values)) for name, values in ALGORITHM_ESTIMATES.items())
    graph_multiple_curves_nr(
        model.t_values[:MEAN_POINTS], curves, "Comparación de medias estimadas por algoritmo"
    )


def main(argv=None) -> int:
    """Read the paths, print initial estimates and search bounds; optionally plot."""
    parser = argparse.ArgumentParser(
        prog="sigmoidfit",
        description="Initial estimates and search bounds for multi-sigmoidal paths.",
    )
    parser.add_argument("csv", nargs="?", default=DEFAULT_DATA, help="';'-separated path table")
    parser.add_argument(
        "--plot", action="store_true", help="plot the mean curves of the stored estimates"
    )
    args = parser.parse_args(argv)

    try:
        data = read_csv(args.csv)
    except OSError:
        print(f"Cannot open file: {args.csv}", file=sys.stderr)
        return 1

    model = ModelData.from_table(convert_to_matrix(data), p=DEGREE)
    estimation = estimate_eta_beta(model, model.p)
    alpha = np.array([obtain_mu0(model), obtain_sigma0(model)])
    epsilon = np.concatenate(
        [[math.exp(estimation[0])], estimation[1 : model.p + 1], [INITIAL_SIGMA2]]
    )
    bounds = compute_bounds(model, model.p, estimation)
    matrix = build_bounds_matrix(bounds)

    print("Polynomial fit: " + format_poly(estimation))
    print("alpha: " + format_vector(alpha))
    print("epsilon: " + format_vector(epsilon))
    print("bounds:")
    print(format_matrix(matrix))

    if args.plot:
        _plot_comparison(model)
    return 0