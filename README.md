# sigmoidfit

Estimate the parameters of a multisigmoidal lognormal diffusion process from
a set of observed sample paths.

The mean of the process follows

    m(t) = x0 · (η + exp(-Q(t0))) / (η + exp(-Q(t)))

where `Q(t) = β1·t + β2·t² + … + βp·t^p`. Given the observed paths, the
package builds the terms of the likelihood, proposes starting values from
the sample means, derives search bounds from the data, and fits
`(η, β1, …, βp, σ²)` either by solving the likelihood equations with a
constrained Newton–Raphson method or by maximising the log-likelihood with
one of several metaheuristics:

- coordinate local search, simulated annealing and iterated local search
  (`sigmoidfit.optimization`);
- an evolutionary algorithm with and without elitism, a memetic algorithm,
  differential evolution and an adaptive memetic algorithm with restarts
  (`sigmoidfit.evolutive`).

## Installation

    pip install .

To run the test suite:

    pip install ".[test]"
    pytest

The plotting functions in `sigmoidfit.visualization` pipe a script to
`gnuplot -persistent`, which must be on your `PATH` if you use them; they
raise `GnuplotError` when it cannot be started. Nothing else needs it.

## Input data

Paths are read from a CSV file whose fields are separated by `;` and whose
numbers use a decimal comma. The first line is a header and is skipped. Each
following line is one observation time: the first column is the time, and
every further column is the value of one path at that time.

    tiempo;path1;path2;path3
    0;5;5;5
    0,1;5,012;5,008;5,015
    ...

## Command line

    sigmoidfit [CSV] [--plot]

reads the path table (by default
`../data/TrayectoriasSimuladas_Multisigmoidal_Articulo.csv`, relative to the
current directory), then prints:

- the polynomial fitted to the linearised sample mean (`f(x) = ...`);
- `alpha`, the mean and variance of the logarithms of the initial values;
- `epsilon`, the starting point `(exp(c0), β1, β2, β3, 0.01)`;
- the 2 × 5 matrix of search bounds (row 0 lower, row 1 upper).

With `--plot` it also draws, through gnuplot, the theoretical mean curve
next to the mean curves of a stored set of parameter estimates. The file
must have at least 501 observation times for this. If the file cannot be
opened the command prints a message and exits with status 1.

The command does not run any of the fitting methods; call them from Python
as shown below.

## Using the library

    import numpy as np
    from sigmoidfit.io_handler import read_csv, convert_to_matrix
    from sigmoidfit.model import ModelData
    from sigmoidfit.estimations import obtain_mu0, obtain_sigma0, estimate_eta_beta
    from sigmoidfit.cli import compute_bounds, build_bounds_matrix
    from sigmoidfit.optimization import log_likelihood, simulated_annealing

    model = ModelData.from_table(convert_to_matrix(read_csv("paths.csv")), 3)

    alpha = [obtain_mu0(model), obtain_sigma0(model)]
    coefs = estimate_eta_beta(model, 3)
    start = np.array([np.exp(coefs[0]), *coefs[1:4], 0.01])
    bounds = build_bounds_matrix(compute_bounds(model, 3, coefs))

    result = simulated_annealing(model, alpha, start, bounds,
                                 rng=np.random.default_rng(1))
    print(result.solution, result.fitness, result.time)

The modules:

- `sigmoidfit.io_handler` reads the CSV format above (`read_csv`,
  `convert_to_matrix`), trims vectors, and formats vectors, matrices and
  polynomials as strings (`format_vector`, `format_matrix`, `format_rows`,
  `format_vector_range`, `format_poly`).
- `sigmoidfit.regression` provides `linear_regression` (returns
  `(slope, intercept)`), `build_vandermonde` and `polynomial_regression`
  (coefficients lowest degree first).
- `sigmoidfit.model` holds the observed times, paths and standardised
  log-increments in `ModelData` (matrices indexed from 1), with the terms of
  the likelihood and of its equations (`z1`, `z3`, `a_term`, `b_term`,
  `w_term`, `x_term`, `y_term`, `phi`, `var_gamma`, ...).
- `sigmoidfit.estimations` computes sample arithmetic and geometric means
  and the initial estimates of σ², η and the β coefficients.
- `sigmoidfit.equations` evaluates the residuals of the likelihood
  equations and their Jacobian (by central differences), and solves them
  with `newton_raphson` (returns the final vector) or
  `newton_raphson_result` (returns a `Result`). Backtracking keeps η and the
  last two variables non-negative.
- `sigmoidfit.optimization` defines `log_likelihood` (invalid values are
  penalised with `-1e10`) and the single-solution searches
  `local_search`, `simulated_annealing` and `iterated_local_search`.
- `sigmoidfit.evolutive` defines `Individual` and the population-based
  searches. All return a `Result` except
  `adaptive_memetic_with_smart_restarts`, which returns the best genes.
- `sigmoidfit.visualization` draws paths, fitted functions and comparisons
  of mean curves; each plotting function returns the gnuplot script it
  sent. `media` computes the fitted mean curve at the first 501 times
  without plotting.
- `sigmoidfit.cli` holds the command, the search bounds (`Bounds`,
  `compute_bounds`, `build_bounds_matrix`) and `compute_rae`, the mean
  relative absolute error between two curves.

`Result` has the fields `solution`, `fitness` and `time` (seconds).

Every stochastic function takes an `rng` argument, a NumPy
`numpy.random.Generator`; pass a seeded one (`np.random.default_rng(seed)`)
for reproducible runs. Without it a fresh, unseeded generator is used.

Progress of the solvers and searches is reported through the standard
`logging` module under the `sigmoidfit.*` loggers; enable `INFO` level to
see it.