"""GRASP driver: repeated construction + local search keeping the best tour.

    sol = run_grasp(matrix, max_iterations=100, alpha=0.3,
                    construction='greedy_randomized', ls='2opt', seed=7)
    sol.tour, sol.cost

Iterations share nothing but the incumbent, and the random source is consumed
in the same order on every run with the same seed, so a run with k + 1
iterations replays the first k iterations of a run with k and can only end
with an equal or better incumbent.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .config import SolverConfig
from .construction import RCL_MODES, STRATEGIES, build_initial_route
from .errors import DegenerateInstanceError, EmptyMatrixError, NoFeasibleCityError
from .local_search import OPERATORS, SearchBudget, improve_route
from .matrix import MatrixLike, as_cost_matrix
from .random_source import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class TSPSolution:
    tour: List[int]            # closed tour, tour[0] == tour[-1]
    cost: float
    runtime: float
    method: str
    improvements: int = 0      # improving local-search moves over all iterations
    iterations: int = 0
    history: List[float] = field(default_factory=list)  # incumbent cost after each iteration


def check_instance(n: int) -> None:
    if n == 0:
        raise EmptyMatrixError("Cost matrix is empty")
    if n < 3:
        raise DegenerateInstanceError(f"Need at least 3 locations to form a tour, got {n}")


def grasp(matrix: MatrixLike, max_iterations: int, alpha: float,
          construction: str, ls: str, rng: RandomSource, *,
          start: int = 0, rcl_mode: str = 'value', time_limit: Optional[float] = None,
          budget: Optional[SearchBudget] = None) -> TSPSolution:
    """Run ``max_iterations`` construct/improve rounds and return the incumbent.

    ``time_limit`` (seconds) is checked between iterations; the first
    iteration always runs. Raises ``NoFeasibleCityError`` when every tour
    found has infinite cost.
    """
    cm = as_cost_matrix(matrix)
    check_instance(cm.n)
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must lie in [0, 1], got {alpha}")
    if construction not in STRATEGIES:
        raise ValueError(f"Unknown construction method: {construction}")
    if ls not in OPERATORS:
        raise ValueError(f"Unknown local search method: {ls}")
    if rcl_mode not in RCL_MODES:
        raise ValueError(f"Unknown RCL mode: {rcl_mode}")

    start_t = time.perf_counter()
    best_tour: List[int] = []
    best_cost = math.inf
    improvements = 0
    history: List[float] = []
    for it in range(max_iterations):
        if it > 0 and time_limit is not None and time.perf_counter() - start_t >= time_limit:
            logger.info("GRASP time limit reached after %d iterations", it)
            break
        tour = build_initial_route(cm, construction, start=start, alpha=alpha,
                                   rng=rng, rcl_mode=rcl_mode)
        tour, cost, moves = improve_route(tour, cm, ls, budget)
        improvements += moves
        if cost < best_cost:
            logger.debug("iteration %d: incumbent %.4f -> %.4f", it + 1, best_cost, cost)
            best_tour, best_cost = tour, cost
        history.append(best_cost)

    if math.isinf(best_cost):
        # every tour used a missing (+inf) edge
        raise NoFeasibleCityError(f"No tour with finite cost found in {len(history)} iterations")
    runtime = time.perf_counter() - start_t
    logger.info("GRASP %s+%s: best cost %.4f after %d iterations (%.3fs)",
                construction, ls, best_cost, len(history), runtime)
    return TSPSolution(tour=best_tour, cost=best_cost, runtime=runtime,
                       method=f"{construction}_{ls}", improvements=improvements,
                       iterations=len(history), history=history)


def run_grasp(matrix: MatrixLike, max_iterations: int = 100, alpha: float = 0.3,
              construction: str = 'greedy_randomized', ls: str = '2opt',
              seed: Optional[int] = None, **kwargs) -> TSPSolution:
    """Seeded entry point; extra keyword arguments go to :func:`grasp`."""
    return grasp(matrix, max_iterations, alpha, construction, ls, RandomSource(seed), **kwargs)


def solve(matrix: MatrixLike, config: SolverConfig) -> TSPSolution:
    cm = as_cost_matrix(matrix)
    return run_grasp(cm, config.iterations_for(cm.n), config.alpha, config.construction,
                     config.ls, config.seed, start=config.start, rcl_mode=config.rcl_mode,
                     time_limit=config.time_limit, budget=config.budget())
