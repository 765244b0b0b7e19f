"""Least-squares linear and polynomial regression."""

from __future__ import annotations

import numpy as np


def linear_regression(x, y) -> tuple[float, float]:
    """Fit ``y = intercept + slope * x`` by least squares; return ``(slope, intercept)``."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.shape != ys.shape:
        raise ValueError("x and y must have the same size")
    design = np.column_stack([np.ones_like(xs), xs])
    intercept, slope = np.linalg.solve(design.T @ design, design.T @ ys)
    return float(slope), float(intercept)


def build_vandermonde(x, degree: int) -> np.ndarray:
    """Return the matrix whose row ``i`` is ``1, x_i, x_i**2, ..., x_i**degree``."""
    if degree < 0:
        raise ValueError("degree must not be negative")
    return np.vander(np.asarray(x, dtype=float), degree + 1, increasing=True)


def polynomial_regression(x, y, degree: int) -> np.ndarray:
    """Fit a polynomial of the given degree; coefficients are lowest degree first."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.size != ys.size or xs.size == 0:
        raise ValueError("Vectors x and y must have the same size and must not be empty.")
    vander = build_vandermonde(xs, degree)
    return np.linalg.solve(vander.T @ vander, vander.T @ ys)