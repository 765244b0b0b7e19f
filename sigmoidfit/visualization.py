"""Plots of paths, fitted functions and mean curves drawn through gnuplot."""

from __future__ import annotations

import subprocess
from typing import Callable, Iterable, Sequence

import numpy as np

from .model import ModelData

GNUPLOT_COMMAND = ["gnuplot", "-persistent"]
MEAN_POINTS = 501
MEAN_SCALE = 5.0

CURVE_COLOURS = [
    "black", "gray", "red", "blue", "green", "orange", "violet", "cyan", "magenta",
]
CURVE_COLOURS_NR = [
    "black", "grey", "brown", "red", "blue", "green", "orange", "violet", "cyan", "magenta",
]


class GnuplotError(RuntimeError):
    """Raised when gnuplot cannot be started."""


def _send(script: str) -> str:
    """Pipe a script to gnuplot and return the script that was sent."""
    try:
        process = subprocess.Popen(
            GNUPLOT_COMMAND,
            stdin=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
    except OSError as exc:
        raise GnuplotError(f"cannot start gnuplot: {exc}") from exc
    process.communicate(script)
    return script


def _vector(values) -> np.ndarray:
    return np.asarray(values, dtype=float).ravel()


def _points(xs: Iterable[float], ys: Iterable[float]) -> list[str]:
    return [f"{float(a):f} {float(b):f}" for a, b in zip(xs, ys)]


def _block(xs, ys) -> list[str]:
    return [*_points(xs, ys), "e"]


def _sample(func: Callable[[float], float], x_min: float, x_max: float, step: float):
    """Evaluate ``func`` from ``x_min`` to ``x_max`` by repeatedly adding ``step``."""
    xs, ys = [], []
    x_val = x_min
    while x_val <= x_max:
        xs.append(x_val)
        ys.append(func(x_val))
        x_val += step
    return xs, ys


def _script(lines: Sequence[str]) -> str:
    return "\n".join(lines) + "\n"


def graph(x, y, title: str) -> str:
    """Scatter plot of ``(x, y)`` with the y axis fixed to ``[0, 20]``."""
    xs, ys = _vector(x), _vector(y)
    if xs.size != ys.size:
        raise ValueError("x and y must have the same size")
    lines = [
        f"set title '{title}'",
        "set xlabel 'x'",
        "set ylabel 'y'",
        "set yrange [0:20]",
        f"plot '-' with points pointtype 7 pointsize 0.5 title '{title}'",
        *_block(xs, ys),
    ]
    return _send(_script(lines))


def graph_function_expression(function: str, x_min: float, x_max: float, title: str) -> str:
    """Plot a gnuplot expression over ``[x_min, x_max]``."""
    lines = [
        f"set title '{title}'",
        "set xlabel 'x'",
        "set ylabel 'y'",
        f"plot [{x_min:f}:{x_max:f}] {function} title '{title}' with lines",
    ]
    return _send(_script(lines))


def graph_function(func: Callable[[float], float], x_min: float, x_max: float, title: str) -> str:
    """Plot a Python function sampled every 0.05 over ``[x_min, x_max]``."""
    xs, ys = _sample(func, x_min, x_max, 0.05)
    lines = [
        f"set title '{title}'",
        "set xlabel 'x'",
        "set ylabel 'y'",
        "set grid",
        "plot '-' with lines lw 2 title 'Funcion'",
        *_block(xs, ys),
    ]
    return _send(_script(lines))


def graph_points_and_function(
    x, y, func: Callable[[float], float], x_min: float, x_max: float, title: str
) -> str:
    """Plot sample points together with a function sampled every 0.1."""
    xs, ys = _vector(x), _vector(y)
    fx, fy = _sample(func, x_min, x_max, 0.1)
    lines = [
        f"set title '{title}'",
        "set xlabel 't_j'",
        "set ylabel 'σ_j^2-σ_0^2'",
        "set key top left",
        "plot '-' with points pointtype 7 pointsize 0.1 title 'Puntos', "
        "'-' with lines title 'Regresión polinomial' ",
        *_block(xs, ys),
        *_block(fx, fy),
    ]
    return _send(_script(lines))


def graph_multiple_paths(x, paths: Sequence, title: str) -> str:
    """Plot several paths against the common times ``x``, without a legend."""
    xs = _vector(x)
    vectors = [_vector(path) for path in paths]
    if any(path.size > xs.size for path in vectors):
        raise ValueError("a path is longer than the time vector")
    lines = [
        f"set title '{title}'",
        "set xlabel 'Tiempo'",
        "set ylabel 'Valor'",
        "unset key",
        "plot " + ", ".join("'-' with linespoints pointtype 7 pointsize 0.25" for _ in vectors),
    ]
    for path in vectors:
        lines.extend(_block(xs[: path.size], path))
    return _send(_script(lines))


def graph_all_paths(model: ModelData) -> str:
    """Plot the standardised increments of every path of the model."""
    paths = [model.v[i, 1:] for i in range(1, model.d + 1)]
    return graph_multiple_paths(model.t_values, paths, "All Paths")


def media(model: ModelData, eta: float, beta1: float, beta2: float, beta3: float) -> np.ndarray:
    """Mean curve ``5 (eta + e^{-Q(t_0)}) / (eta + e^{-Q(t)})`` at the first 501 times."""
    times = _vector(model.t_values)
    if times.size < MEAN_POINTS:
        raise ValueError(f"the mean curve needs at least {MEAN_POINTS} time values")
    theta = [0.0, beta1, beta2, beta3]
    q0 = model.evaluate_polynomial(theta, times[0])
    q = np.asarray(model.evaluate_polynomial(theta, times[:MEAN_POINTS]), dtype=float)
    return MEAN_SCALE * (eta + np.exp(-q0)) / (eta + np.exp(-q))


def graph_multiple_paths_with_mean(
    model: ModelData,
    x,
    t_values,
    eta: float,
    beta1: float,
    beta2: float,
    beta3: float,
    title: str,
) -> str:
    """Plot every path in grey with the mean curve of the given parameters in red."""
    matrix = np.asarray(x, dtype=float)
    times = _vector(t_values)
    paths = [matrix[i, 1:] for i in range(1, matrix.shape[0])]
    mean = media(model, eta, beta1, beta2, beta3)
    if any(path.size > times.size for path in paths) or mean.size > times.size:
        raise ValueError("a curve is longer than the time vector")
    plot = "plot " + ", ".join("'-' with lines lc rgb '#aaaaaa' lw 1" for _ in paths)
    plot += ", '-' with lines lc rgb '#d63044' lw 2.5"
    lines = [
        f"set title '{title}'",
        "set xlabel 'Tiempo'",
        "set ylabel 'Valor'",
        "unset key",
        plot,
    ]
    for path in paths:
        lines.extend(_block(times[: path.size], path))
    lines.extend(_block(times[: mean.size], mean))
    return _send(_script(lines))


def graph_three_curves(x, m_theoretical, m_estimated, m_sample, title: str) -> str:
    """Plot the theoretical, estimated and sample mean curves."""
    xs = _vector(x)
    curves = [_vector(m_theoretical), _vector(m_estimated), _vector(m_sample)]
    if any(curve.size != xs.size for curve in curves):
        raise ValueError("all vectors must have the same size")
    lines = [
        f"set title '{title}'",
        "set xlabel 'Tiempo'",
        "set ylabel 'Media'",
        "set grid",
        "set key left top ",
        "plot '-' with lines lw 2 linecolor rgb 'black' title 'Teórica', "
        "'-' with lines lw 2 dt 2 linecolor rgb 'red' title 'Estimada', "
        "'-' with lines lw 2 dt 3 linecolor rgb 'blue' title 'Muestral'",
    ]
    for curve in curves:
        lines.extend(_block(xs, curve))
    return _send(_script(lines))


def _named_curves(x, curves, title: str, colours: Sequence[str]) -> str:
    xs = _vector(x)
    named = [(name, _vector(values)) for name, values in curves]
    if any(values.size < xs.size for _, values in named):
        raise ValueError("every curve needs a value for each time")
    entries = []
    for index, (name, _) in enumerate(named):
        style = "with lines lw 3" if index == 0 else "with lines dt 2 lw 2"
        colour = colours[index % len(colours)]
        entries.append(f"'-' {style} linecolor rgb '{colour}' title '{name}'")
    lines = [
        f"set title '{title}'",
        "set xlabel 'Tiempo'",
        "set ylabel 'Media'",
        "set key left top",
        "set grid",
        "plot " + ", ".join(entries),
    ]
    for _, values in named:
        lines.extend(_block(xs, values[: xs.size]))
    return _send(_script(lines))


def graph_multiple_curves(x, curves, title: str) -> str:
    """Plot named curves; the first is drawn solid, the others dashed."""
    return _named_curves(x, curves, title, CURVE_COLOURS)


def graph_multiple_curves_nr(x, curves, title: str) -> str:
    """Plot named curves with the palette that includes the Newton-Raphson curve."""
    return _named_curves(x, curves, title, CURVE_COLOURS_NR)