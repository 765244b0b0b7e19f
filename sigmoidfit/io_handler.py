"""Reading path tables and formatting vectors, matrices and polynomials as text."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def _short(value: float) -> str:
    """Format a number with six significant digits."""
    return format(float(value), "g")


def _long(value: float) -> str:
    """Format a number with ten significant digits."""
    return format(float(value), ".10g")


def _parse_value(token: str) -> float:
    # Decimal comma: only the first comma of a field is taken as the separator.
    return float(token.replace(",", ".", 1))


def read_csv(filename) -> list[list[float]]:
    """Read a ';'-separated table with decimal commas, skipping the header line."""
    rows: list[list[float]] = []
    with open(filename, encoding="utf-8", errors="replace") as handle:
        next(handle, None)
        for line in handle:
            tokens = line.rstrip("\r\n").split(";")
            if tokens[-1] == "":
                tokens.pop()
            rows.append([_parse_value(token) for token in tokens])
    return rows


def create_evaluated_vector(size: int, value: float) -> np.ndarray:
    """Return a vector of length ``size + 1``: a leading zero followed by ``value``."""
    if size < 0:
        raise ValueError("size must not be negative")
    vec = np.full(size + 1, float(value))
    vec[0] = 0.0
    return vec


def remove_first(vec) -> np.ndarray:
    """Return the vector without its first element."""
    arr = np.asarray(vec, dtype=float)
    if arr.size == 0:
        raise ValueError("cannot remove an element from an empty vector")
    return arr[1:].copy()


def remove_last(vec) -> np.ndarray:
    """Return the vector without its last element."""
    arr = np.asarray(vec, dtype=float)
    if arr.size == 0:
        raise ValueError("cannot remove an element from an empty vector")
    return arr[:-1].copy()


def convert_to_matrix(data: Sequence[Sequence[float]]) -> np.ndarray:
    """Turn a list of equally long rows into a matrix."""
    if not data:
        raise ValueError("cannot build a matrix from no rows")
    width = len(data[0])
    if any(len(row) != width for row in data):
        raise ValueError("all rows must have the same number of values")
    return np.array(data, dtype=float)


def _aligned_rows(matrix: np.ndarray) -> list[str]:
    cells = [[_long(value) for value in row] for row in matrix]
    width = max((len(cell) for row in cells for cell in row), default=0)
    return [" ".join(cell.rjust(width) for cell in row) for row in cells]


def _as_matrix(matrix) -> np.ndarray:
    arr = np.asarray(matrix, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError("expected a matrix")
    return arr


def format_matrix(matrix) -> str:
    """Format a matrix with right-aligned columns; a 1-D input is shown as a column."""
    return "\n".join(_aligned_rows(_as_matrix(matrix)))


def format_vector(vec) -> str:
    """Format a vector as ``[ a, b, c ]``."""
    values = np.asarray(vec, dtype=float).ravel()
    if values.size == 0:
        return "[ ]"
    return "[ " + ", ".join(_short(value) for value in values) + " ]"


def format_rows(matrix, num_rows: int) -> str:
    """Format at most ``num_rows`` leading rows of a matrix, one per line."""
    arr = _as_matrix(matrix)
    lines = [_aligned_rows(row.reshape(1, -1))[0] for row in arr[: max(num_rows, 0)]]
    return "\n".join(lines)


def format_vector_range(data: Sequence[Sequence[float]], end_row: int, end_col: int) -> str:
    """Format the top-left block of a list of rows, each value followed by a space."""
    lines = [
        "".join(_long(value) + " " for value in row[:end_col])
        for row in list(data)[:end_row]
    ]
    return "\n".join(lines)


def format_poly(poly) -> str:
    """Format polynomial coefficients (lowest degree first) as ``f(x) = ...``."""
    coefs = np.asarray(poly, dtype=float).ravel()
    top = coefs.size - 1
    parts = ["f(x) = "]
    for power, coef in reversed(list(enumerate(coefs))):
        if power != top:
            parts.append(" + " if coef >= 0 else " - ")
        elif coef < 0:
            parts.append("-")
        magnitude = abs(coef)
        if not (magnitude == 1.0 and power > 0):
            parts.append(_short(magnitude))
        if power > 1:
            parts.append(f"*x^{power}")
        elif power == 1:
            parts.append("*x")
    return "".join(parts)