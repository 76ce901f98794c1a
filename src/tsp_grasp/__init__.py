"""Heuristic solver for the (asymmetric) travelling salesman problem.

Construction heuristics, first-improvement local search and a GRASP driver
working on a square cost matrix.
"""
from .construction import build_initial_route, cheapest_insertion, greedy_randomized, nearest_neighbor
from .errors import (
    DegenerateInstanceError,
    EmptyCandidateListError,
    EmptyMatrixError,
    InvalidRouteError,
    MatrixFormatError,
    NoFeasibleCityError,
    TSPError,
)
from .grasp import TSPSolution, grasp, run_grasp
from .local_search import SearchBudget, improve_route, optimize_locally
from .matrix import CostMatrix, route_cost
from .random_source import RandomSource

__version__ = '0.1.0'

__all__ = [
    'CostMatrix', 'route_cost', 'RandomSource',
    'build_initial_route', 'nearest_neighbor', 'cheapest_insertion', 'greedy_randomized',
    'optimize_locally', 'improve_route', 'SearchBudget',
    'grasp', 'run_grasp', 'TSPSolution',
    'TSPError', 'InvalidRouteError', 'NoFeasibleCityError', 'EmptyCandidateListError',
    'EmptyMatrixError', 'DegenerateInstanceError', 'MatrixFormatError',
]
