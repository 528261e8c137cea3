"""
Resumable genetic search over cut-parameter vectors.

``GeneticOptimizer`` is an explicit state object: every ``step()`` call
evaluates exactly one individual and returns, so a host loop decides how
much work to do per frame (``run_for``). Stopping early needs no teardown;
the caller just stops calling.

Random numbers come from one ``numpy.random.Generator`` seeded at
construction and are drawn in a fixed order: for each offspring, one
integer picking its parent, then one uniform per parameter for the
mutation. Identical seed, population, parameters and fitness function
therefore reproduce the same result sequence.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")

FitnessFunction = Callable[[Sequence[float]], Tuple[float, T]]


@dataclass
class GeneticParameters:
    """Configuration for a genetic run."""
    num_generations: int = 30
    mutation_rate: float = 0.2
    mutation_annealing: float = 1.0   # multiplier applied to the rate after each generation
    survival_rate: float = 0.2
    population_cull: float = 1.0      # multiplier applied to the population size per generation


@dataclass
class EvolveResult(Generic[T]):
    """One evaluated individual."""
    parameters: List[float]
    score: float
    result: T
    generation: int = 0


class GeneticOptimizer(Generic[T]):
    """Population search maximizing a fitness function, one evaluation per step.

    Generation 0 evaluates the whole starting population. Later generations
    carry their survivors over with the scores they already have, so
    ``step()`` only evaluates the new offspring.
    """

    def __init__(
        self,
        fitness: FitnessFunction,
        population: Sequence[Sequence[float]],
        parameters: Optional[GeneticParameters] = None,
        seed: int = 0,
    ):
        if parameters is None:
            parameters = GeneticParameters()
        if parameters.num_generations < 0:
            raise ValueError(f"num_generations must be >= 0, got {parameters.num_generations}")
        if not 0.0 < parameters.survival_rate <= 1.0:
            raise ValueError(f"survival_rate must be in (0, 1], got {parameters.survival_rate}")

        self.fitness = fitness
        self.parameters = parameters
        self.seed = seed
        self._rng = np.random.default_rng(seed)

        self.initial_size = len(population)
        self.population_size = len(population)
        self.mutation_rate = parameters.mutation_rate
        self.generation = 0
        self.evaluations = 0

        # Best-ever results, bounded to the starting population size.
        self.results: List[EvolveResult[T]] = []
        # Every evaluation in order; the reproducible trace of a run.
        self.history: List[EvolveResult[T]] = []

        self._pending: List[List[float]] = [list(map(float, p)) for p in population]
        self._evaluated: List[EvolveResult[T]] = []
        self._done = parameters.num_generations == 0 or not self._pending

    # --------------------------
    # Host interface
    # --------------------------
    def is_done(self) -> bool:
        return self._done

    def step(self) -> Optional[EvolveResult[T]]:
        """Evaluate the next individual; returns ``None`` once the run is over."""
        if self._done:
            return None

        parameters = self._pending.pop(0)
        score, payload = self.fitness(parameters)
        result = EvolveResult(
            parameters=parameters,
            score=score,
            result=payload,
            generation=self.generation,
        )
        self._evaluated.append(result)
        self.history.append(result)
        self.evaluations += 1

        while not self._pending and not self._done:
            self._finish_generation()
        return result

    def run_for(
        self,
        max_evaluations: Optional[int] = None,
        time_budget_s: Optional[float] = None,
    ) -> int:
        """Resume until either limit is reached or the run ends; returns evaluations made."""
        started = time.perf_counter()
        count = 0
        while not self._done:
            if max_evaluations is not None and count >= max_evaluations:
                break
            if time_budget_s is not None and time.perf_counter() - started >= time_budget_s:
                break
            self.step()
            count += 1
        return count

    def best(self) -> Optional[EvolveResult[T]]:
        return self.results[0] if self.results else None

    # --------------------------
    # Generation bookkeeping
    # --------------------------
    def _finish_generation(self) -> None:
        self.results.extend(self._evaluated)
        # Stable sort keeps earlier evaluations ahead on ties.
        self.results.sort(key=lambda r: r.score, reverse=True)
        del self.results[self.initial_size:]

        logger.info(
            "Generation %d: evaluated %d, best score %s, mutation rate %.4f",
            self.generation, len(self._evaluated),
            self.results[0].score if self.results else None, self.mutation_rate,
        )

        survivors = self.results[: max(1, math.ceil(self.parameters.survival_rate * self.population_size))]
        self.generation += 1
        self._evaluated = []

        if self.generation >= self.parameters.num_generations or not survivors:
            self._done = True
            return

        self.population_size = max(1, math.ceil(self.population_size * self.parameters.population_cull))
        self.mutation_rate *= self.parameters.mutation_annealing

        # Elite slots are filled by the survivors themselves, already scored
        # and still present in the results list.
        elites = min(len(survivors), self.population_size)
        offspring = []
        for _ in range(self.population_size - elites):
            parent = survivors[int(self._rng.integers(len(survivors)))]
            offspring.append([
                value + (float(self._rng.random()) - 0.5) * self.mutation_rate
                for value in parent.parameters
            ])
        self._pending = offspring


def evolve(
    fitness: FitnessFunction,
    population: Sequence[Sequence[float]],
    parameters: Optional[GeneticParameters] = None,
    seed: int = 0,
) -> GeneticOptimizer:
    """Run a ``GeneticOptimizer`` to completion and return it."""
    optimizer = GeneticOptimizer(fitness, population, parameters, seed)
    optimizer.run_for()
    return optimizer
