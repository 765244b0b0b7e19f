"""Observed paths of the diffusion and the terms of its likelihood equations."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .io_handler import create_evaluated_vector


def add_zero_border(matrix) -> np.ndarray:
    """Return the matrix with a leading row and column of zeros."""
    arr = np.asarray(matrix, dtype=float)
    rows, cols = arr.shape
    extended = np.zeros((rows + 1, cols + 1))
    extended[1:, 1:] = arr
    return extended


def obtain_time(transposed) -> np.ndarray:
    """Repeat the time row once per row of the table and add a zero border."""
    arr = np.asarray(transposed, dtype=float)
    return add_zero_border(np.tile(arr[0], (arr.shape[0], 1)))


def obtain_x(transposed) -> np.ndarray:
    """Take the path rows (all but the time row) and add a zero border."""
    arr = np.asarray(transposed, dtype=float)
    return add_zero_border(arr[1:])


def _value(result):
    arr = np.asarray(result, dtype=float)
    return float(arr) if arr.ndim == 0 else arr


@dataclass(eq=False)
class ModelData:
    """Sampled paths; matrices ``t``, ``x`` and ``v`` are indexed from 1."""

    d: int
    n: np.ndarray
    N: int
    t_values: np.ndarray
    t: np.ndarray
    x: np.ndarray
    p: int = 3
    v: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))

    @classmethod
    def from_table(cls, table, p=3) -> "ModelData":
        """Build the model from a table whose first column is time and the others paths."""
        matrix = np.asarray(table, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] < 2 or matrix.shape[1] < 2:
            raise ValueError("the table needs a time column, a path and two observations")
        transposed = matrix.T
        d = transposed.shape[0] - 1
        n = create_evaluated_vector(d, transposed.shape[1])
        model = cls(
            d=d,
            n=n,
            N=int(n[1]),
            t_values=transposed[0].copy(),
            t=obtain_time(transposed),
            x=obtain_x(transposed),
            p=p,
        )
        model.v = model.obtain_v()
        return model

    def obtain_v(self) -> np.ndarray:
        """Initial values in row 0 and standardised log increments in rows 1..d."""
        columns = int(self.n[1])
        if self.d >= columns:
            raise ValueError("the number of paths must be smaller than the number of observations")
        v = np.zeros((self.d + 1, columns))
        v[0, 1 : self.d + 1] = self.x[1 : self.d + 1, 1]
        for i in range(1, self.d + 1):
            m = int(self.n[i])
            steps = self.t[i, 2 : m + 1] - self.t[i, 1:m]
            v[i, 1:m] = np.log(self.x[i, 2 : m + 1] / self.x[i, 1:m]) / np.sqrt(steps)
        return v

    def _increments(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Times before and after every step of every path, and its value of v."""
        lows, highs, shocks = [], [], []
        for i in range(1, self.d + 1):
            m = int(self.n[i])
            lows.append(self.t[i, 1:m])
            highs.append(self.t[i, 2 : m + 1])
            shocks.append(self.v[i, 1:m])
        if not lows:
            empty = np.zeros(0)
            return empty, empty, empty
        return np.concatenate(lows), np.concatenate(highs), np.concatenate(shocks)

    def evaluate_polynomial(self, theta, x):
        """Evaluate ``sum(theta[k] * x**k for k in 1..p)``; ``theta[0]`` is not used."""
        coefs = np.asarray(theta, dtype=float)
        if coefs.size < self.p + 1:
            raise ValueError(f"theta needs at least {self.p + 1} values")
        xs = np.asarray(x, dtype=float)
        total = np.zeros_like(xs)
        for power, coef in enumerate(coefs[1 : self.p + 1], start=1):
            total = total + coef * xs**power
        return _value(total)

    def _decay(self, eta, theta, times):
        return eta + np.exp(-np.asarray(self.evaluate_polynomial(theta, times)))

    def n_total(self) -> float:
        """Total number of increments over all paths."""
        return float(np.sum(self.n[1 : self.d + 1] - 1))

    def delta(self, i, j, k) -> float:
        """Time between observations ``k`` and ``j`` of path ``i``."""
        return float(self.t[i, j] - self.t[i, k])

    def z1(self) -> float:
        """Sum of squared standardised increments."""
        _, _, shocks = self._increments()
        return float(np.sum(shocks**2))

    def z3(self) -> float:
        """Sum over paths of the observed time span."""
        return float(
            sum(self.delta(i, int(self.n[i]), 1) for i in range(1, self.d + 1))
        )

    def log_ratio(self, theta, i, m, n) -> float:
        """``log((eta + exp(-Q(t[i,n]))) / (eta + exp(-Q(t[i,m]))))``."""
        eta = float(np.asarray(theta, dtype=float)[0])
        return float(
            np.log(self._decay(eta, theta, self.t[i, n]) / self._decay(eta, theta, self.t[i, m]))
        )

    def _l_delta_values(self, l, theta, times):
        eta = float(np.asarray(theta, dtype=float)[0])
        times = np.asarray(times, dtype=float)
        term = -np.power(times, float(l))
        return term / self._decay(eta, theta, times)

    def _l_d_values(self, l, theta, t_m, t_n):
        exponent = 0.0 if l == 0 else 1.0
        exp_m = np.exp(-np.asarray(self.evaluate_polynomial(theta, t_m)))
        exp_n = np.exp(-np.asarray(self.evaluate_polynomial(theta, t_n)))
        term_m = self._l_delta_values(l, theta, t_m) * exp_m**exponent
        term_n = self._l_delta_values(l, theta, t_n) * exp_n**exponent
        return term_m - term_n

    def l_delta(self, l, theta, i, m) -> float:
        """``-t[i,m]**l / (eta + exp(-Q(t[i,m])))``."""
        return float(self._l_delta_values(l, theta, self.t[i, m]))

    def l_d(self, l, theta, i, m, n) -> float:
        """Derivative term of the log ratio between observations ``m`` and ``n``."""
        return float(self._l_d_values(l, theta, self.t[i, m], self.t[i, n]))

    def w_term(self, l, theta) -> float:
        """Sum of ``l_d`` over all increments."""
        lows, highs, _ = self._increments()
        return float(np.sum(self._l_d_values(l, theta, highs, lows)))

    def y_term(self, l, theta) -> float:
        """Sum of the log ratios weighted by ``l_d`` and the inverse step."""
        eta = float(np.asarray(theta, dtype=float)[0])
        lows, highs, _ = self._increments()
        ratio = np.log(self._decay(eta, theta, highs) / self._decay(eta, theta, lows))
        return float(np.sum(ratio * self._l_d_values(l, theta, highs, lows) / (highs - lows)))

    def x_term(self, l, theta) -> float:
        """Sum of ``v`` weighted by ``l_d`` over the square root of the step."""
        lows, highs, shocks = self._increments()
        weights = shocks / np.sqrt(highs - lows)
        return float(np.sum(weights * self._l_d_values(l, theta, highs, lows)))

    def _lambdas(self, theta, lows, highs):
        eta = float(np.asarray(theta, dtype=float)[0])
        return np.log(self._decay(eta, theta, lows) / self._decay(eta, theta, highs))

    def a_term(self, theta) -> float:
        """Sum of squared log ratios over the step."""
        lows, highs, _ = self._increments()
        return float(np.sum(self._lambdas(theta, lows, highs) ** 2 / (highs - lows)))

    def b_term(self, theta) -> float:
        """Sum of ``v`` times the log ratio over the square root of the step."""
        lows, highs, shocks = self._increments()
        lam = self._lambdas(theta, lows, highs)
        return float(np.sum(shocks * lam / np.sqrt(highs - lows)))

    def _me_values(self, epsilon, t_k, t_j):
        eps = np.asarray(epsilon, dtype=float)
        if eps.size < self.p + 2:
            raise ValueError(f"epsilon needs at least {self.p + 2} values")
        eta, sigma2 = eps[0], eps[self.p + 1]
        ratio = np.log(self._decay(eta, eps, t_j) / self._decay(eta, eps, t_k))
        return ratio - (sigma2 / 2.0) * (np.asarray(t_k) - np.asarray(t_j))

    def me(self, epsilon, i, k, j) -> float:
        """Expected log increment between observations ``j`` and ``k`` of path ``i``."""
        return float(self._me_values(epsilon, self.t[i, k], self.t[i, j]))

    def phi(self, epsilon) -> float:
        """Sum of squared expected increments over the step."""
        lows, highs, _ = self._increments()
        values = self._me_values(epsilon, highs, lows)
        return float(np.sum(values**2 / (highs - lows)))

    def var_gamma(self, epsilon) -> float:
        """Sum of ``v`` times the expected increment over the square root of the step."""
        lows, highs, shocks = self._increments()
        values = self._me_values(epsilon, highs, lows)
        return float(np.sum(shocks * values / np.sqrt(highs - lows)))