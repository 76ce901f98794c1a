"""Exceptions raised by the TSP engine and its loaders."""
from __future__ import annotations


class TSPError(Exception):
    """Base class for every error raised by tsp_grasp."""


class InvalidRouteError(TSPError, ValueError):
    """Route has the wrong length, out-of-range indices or repeated cities."""


class ConstructionError(TSPError):
    """A construction strategy cannot extend the partial tour."""


class NoFeasibleCityError(ConstructionError):
    """No unvisited city is reachable through a finite edge."""


class EmptyCandidateListError(ConstructionError):
    """The restricted candidate list came out empty."""


class InstanceError(TSPError, ValueError):
    """The cost matrix is too small to form a tour."""


class EmptyMatrixError(InstanceError):
    pass


class DegenerateInstanceError(InstanceError):
    pass


class MatrixFormatError(TSPError, ValueError):
    """Matrix is not square, or holds NaN, negative or non-numeric cells."""
