"""Population-based searches that maximise the model's log-likelihood."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from .equations import Result
from .model import ModelData
from .optimization import local_search, log_likelihood, rand_double

logger = logging.getLogger(__name__)

ELITE_SIZE = 2
_LOCAL_SEARCH_STEP = 0.01
_INITIAL_BEST = -1e10


@dataclass(eq=False)
class Individual:
    """A candidate parameter vector and its log-likelihood.

    Ordering puts the fitter individual first: ``a < b`` when ``a`` has the
    larger fitness.
    """

    genes: np.ndarray
    fitness: float

    def __lt__(self, other: "Individual") -> bool:
        return self.fitness > other.fitness

    def copy(self) -> "Individual":
        """Return an independent copy."""
        return Individual(np.array(self.genes, dtype=float, copy=True), self.fitness)


def _resolve_rng(rng) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _lower_upper(bounds) -> tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(bounds, dtype=float)
    if arr.ndim != 2 or arr.shape[0] != 2:
        raise ValueError("bounds must have two rows: minimums and maximums")
    return arr[0], arr[1]


def _by_fitness_desc(population: list[Individual]) -> list[Individual]:
    return sorted(population, key=lambda ind: ind.fitness, reverse=True)


def random_individual(model: ModelData, bounds, alpha, rng=None) -> Individual:
    """Individual drawn uniformly inside the bounds."""
    rng = _resolve_rng(rng)
    lower, upper = _lower_upper(bounds)
    genes = np.array([rand_double(lo, hi, rng) for lo, hi in zip(lower, upper)])
    return Individual(genes, log_likelihood(model, alpha, genes))


def crossover(
    model: ModelData, p1: Individual, p2: Individual, bounds, alpha, alpha_blx=0.3, rng=None
) -> Individual:
    """BLX-alpha crossover of two parents, kept inside the bounds."""
    rng = _resolve_rng(rng)
    lower, upper = _lower_upper(bounds)
    first = np.asarray(p1.genes, dtype=float)
    second = np.asarray(p2.genes, dtype=float)
    c_min = np.minimum(first, second)
    c_max = np.maximum(first, second)
    spread = c_max - c_min
    low = np.maximum(lower, c_min - alpha_blx * spread)
    high = np.minimum(upper, c_max + alpha_blx * spread)
    genes = np.array([rand_double(lo, hi, rng) for lo, hi in zip(low, high)])
    return Individual(genes, log_likelihood(model, alpha, genes))


def mutate(individual: Individual, bounds, mutation_rate, mutation_step, rng=None) -> None:
    """Add Gaussian noise to each gene with probability ``mutation_rate``, in place."""
    rng = _resolve_rng(rng)
    lower, upper = _lower_upper(bounds)
    genes = np.array(individual.genes, dtype=float, copy=True)
    for i in range(genes.size):
        if rand_double(0.0, 1.0, rng) < mutation_rate:
            genes[i] += rng.normal(0.0, mutation_step)
            genes[i] = min(max(genes[i], lower[i]), upper[i])
    individual.genes = genes


def tournament(population: list[Individual], rng=None) -> Individual:
    """Binary tournament: the fitter of two randomly chosen individuals (a copy)."""
    if not population:
        raise ValueError("the population is empty")
    rng = _resolve_rng(rng)
    first = population[int(rng.integers(len(population)))]
    second = population[int(rng.integers(len(population)))]
    winner = first if first.fitness > second.fitness else second
    return winner.copy()


def _offspring(
    model, population, alpha, bounds, crossover_rate, mutation_rate, mutation_step, rng
) -> Individual:
    parent1 = tournament(population, rng)
    parent2 = tournament(population, rng)
    if rand_double(0.0, 1.0, rng) < crossover_rate:
        child = crossover(model, parent1, parent2, bounds, alpha, rng=rng)
    else:
        child = parent1
    mutate(child, bounds, mutation_rate, mutation_step, rng)
    child.fitness = log_likelihood(model, alpha, child.genes)
    return child


def _check_elitist(pop_size: int) -> None:
    if pop_size < ELITE_SIZE:
        raise ValueError(f"the population needs at least {ELITE_SIZE} individuals")


def _check_interval(interval: int) -> None:
    if interval <= 0:
        raise ValueError("the local search interval must be positive")


def evolutionary_algorithm(
    model: ModelData,
    alpha,
    bounds,
    pop_size,
    generations,
    crossover_rate,
    mutation_rate,
    mutation_step,
    rng=None,
) -> Result:
    """Generational evolutionary algorithm without elitism.

    The population is sorted fittest first and its last member is returned.
    """
    if pop_size < 1:
        raise ValueError("the population needs at least one individual")
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    population = [random_individual(model, bounds, alpha, rng) for _ in range(pop_size)]

    for _ in range(generations):
        population = sorted(
            _offspring(
                model, population, alpha, bounds,
                crossover_rate, mutation_rate, mutation_step, rng,
            )
            for _ in range(pop_size)
        )

    elapsed = time.perf_counter() - start
    chosen = population[-1]
    logger.info("EA time: %g s; solution: %s", elapsed, chosen.genes)
    return Result(chosen.genes, chosen.fitness, elapsed)


def _elitist_generation(
    model, population, alpha, bounds, pop_size, crossover_rate, mutation_rate, mutation_step, rng
) -> list[Individual]:
    new_population = [ind.copy() for ind in population[:ELITE_SIZE]]
    while len(new_population) < pop_size:
        new_population.append(
            _offspring(
                model, population, alpha, bounds,
                crossover_rate, mutation_rate, mutation_step, rng,
            )
        )
    return new_population


def evolutionary_algorithm_with_elitism(
    model: ModelData,
    alpha,
    bounds,
    pop_size,
    generations,
    crossover_rate,
    mutation_rate,
    mutation_step,
    rng=None,
) -> Result:
    """Evolutionary algorithm that carries the two best individuals over each generation."""
    _check_elitist(pop_size)
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    population = [random_individual(model, bounds, alpha, rng) for _ in range(pop_size)]

    for _ in range(generations):
        population = _by_fitness_desc(population)
        population = _elitist_generation(
            model, population, alpha, bounds, pop_size,
            crossover_rate, mutation_rate, mutation_step, rng,
        )

    best = _by_fitness_desc(population)[0]
    elapsed = time.perf_counter() - start
    logger.info("EA with elitism time: %g s; best solution: %s", elapsed, best.genes)
    return Result(best.genes, best.fitness, elapsed)


def memetic_algorithm_with_elitism(
    model: ModelData,
    alpha,
    bounds,
    pop_size,
    generations,
    crossover_rate,
    mutation_rate,
    mutation_step,
    local_search_interval,
    local_search_steps,
    rng=None,
) -> Result:
    """Elitist evolutionary algorithm that periodically refines the leader by local search."""
    _check_elitist(pop_size)
    _check_interval(local_search_interval)
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    population = [random_individual(model, bounds, alpha, rng) for _ in range(pop_size)]

    for generation in range(generations):
        population = _by_fitness_desc(population)
        population = _elitist_generation(
            model, population, alpha, bounds, pop_size,
            crossover_rate, mutation_rate, mutation_step, rng,
        )
        if generation % local_search_interval == 0 and generation > 0:
            leader = population[0]
            refined = local_search(
                model, alpha, leader.genes, bounds, local_search_steps,
                _LOCAL_SEARCH_STEP, rng=rng,
            )
            leader.genes = refined.solution
            leader.fitness = refined.fitness

    best = _by_fitness_desc(population)[0]
    elapsed = time.perf_counter() - start
    logger.info("Memetic time: %g s; best solution: %s", elapsed, best.genes)
    return Result(best.genes, best.fitness, elapsed)


def _distinct_index(rng, size: int, excluded: set[int]) -> int:
    while True:
        index = int(rng.integers(size))
        if index not in excluded:
            return index


def differential_evolution(
    model: ModelData, alpha, bounds, pop_size, generations, f=0.8, cr=0.9, rng=None
) -> Result:
    """DE/rand/1/bin with greedy replacement and a guard that keeps the best individual."""
    if pop_size < 4:
        raise ValueError("differential evolution needs at least 4 individuals")
    rng = _resolve_rng(rng)
    lower, upper = _lower_upper(bounds)
    start = time.perf_counter()
    population = [random_individual(model, bounds, alpha, rng) for _ in range(pop_size)]

    for _ in range(generations):
        new_population = [ind.copy() for ind in population]
        for i, target in enumerate(population):
            a = _distinct_index(rng, pop_size, {i})
            b = _distinct_index(rng, pop_size, {i, a})
            c = _distinct_index(rng, pop_size, {i, a, b})
            mutant = population[a].genes + f * (population[b].genes - population[c].genes)

            trial = np.array(target.genes, dtype=float, copy=True)
            for j in range(trial.size):
                if rand_double(0.0, 1.0, rng) < cr:
                    trial[j] = min(max(mutant[j], lower[j]), upper[j])

            trial_fitness = log_likelihood(model, alpha, trial)
            if trial_fitness > target.fitness:
                new_population[i] = Individual(trial, trial_fitness)

        old_fitness = np.array([ind.fitness for ind in population])
        new_fitness = np.array([ind.fitness for ind in new_population])
        best_old = population[int(np.argmax(old_fitness))]
        if best_old.fitness > new_fitness.max():
            new_population[int(np.argmin(new_fitness))] = best_old.copy()

        population = new_population

    elapsed = time.perf_counter() - start
    best = population[int(np.argmax([ind.fitness for ind in population]))]
    return Result(best.genes, best.fitness, elapsed)


def adaptive_memetic_with_smart_restarts(
    model: ModelData,
    alpha,
    bounds,
    pop_size,
    generations,
    crossover_rate,
    mutation_rate,
    mutation_step,
    local_search_interval,
    local_search_steps,
    max_no_improvement,
    rng=None,
) -> np.ndarray:
    """Memetic algorithm that re-seeds all but the leader after a run without improvement.

    Returns the best genes seen at the start of any generation; an empty vector
    when nothing beat the initial threshold.
    """
    _check_elitist(pop_size)
    _check_interval(local_search_interval)
    rng = _resolve_rng(rng)
    start = time.perf_counter()
    population = [random_individual(model, bounds, alpha, rng) for _ in range(pop_size)]

    no_improvement = 0
    best_val = _INITIAL_BEST
    best_genes = np.zeros(0)

    for generation in range(generations):
        population = _by_fitness_desc(population)

        if population[0].fitness > best_val:
            best_val = population[0].fitness
            best_genes = np.array(population[0].genes, dtype=float, copy=True)
            no_improvement = 0
        else:
            no_improvement += 1

        if no_improvement >= max_no_improvement:
            population[1:] = [
                random_individual(model, bounds, alpha, rng) for _ in range(pop_size - 1)
            ]
            no_improvement = 0

        new_population = _elitist_generation(
            model, population, alpha, bounds, pop_size,
            crossover_rate, mutation_rate, mutation_step, rng,
        )

        if generation % local_search_interval == 0 and generation > 0:
            leader = new_population[0]
            leader.genes = local_search(
                model, alpha, leader.genes, bounds, local_search_steps,
                _LOCAL_SEARCH_STEP, rng=rng,
            ).solution
            leader.fitness = log_likelihood(model, alpha, leader.genes)

        population = new_population

    logger.info("Adaptive memetic time: %g s", time.perf_counter() - start)
    return best_genes