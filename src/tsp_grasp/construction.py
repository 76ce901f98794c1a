"""Construction heuristics producing an initial closed tour.

Every strategy returns a list of length n + 1 that starts and ends at the
start city:

  nearest_neighbor    -> greedy, ties resolved to the lowest index
  cheapest_insertion  -> grow a [a, b, a] tour by the cheapest insertion
  greedy_randomized   -> GRASP construction drawing from a restricted candidate list
  random              -> shuffled permutation with the start city fixed
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Tuple

from .errors import EmptyCandidateListError, NoFeasibleCityError
from .matrix import MatrixLike, as_cost_matrix
from .random_source import RandomSource

RCL_MODES = ('value', 'cardinality')


def _check_start(start: int, n: int) -> None:
    if not 0 <= start < n:
        raise ValueError(f"Start city {start} outside [0, {n})")


def nearest_neighbor(matrix: MatrixLike, start: int = 0) -> List[int]:
    """Repeatedly move to the cheapest unvisited city."""
    cm = as_cost_matrix(matrix)
    n = cm.n
    _check_start(start, n)
    rows = cm.rows
    visited = [False] * n
    visited[start] = True
    tour = [start]
    current = start
    for _ in range(n - 1):
        row = rows[current]
        best = -1
        best_cost = math.inf
        for j in range(n):
            if not visited[j] and row[j] < best_cost:
                best = j
                best_cost = row[j]
        if best < 0:
            raise NoFeasibleCityError(f"No unvisited city reachable from city {current}")
        tour.append(best)
        visited[best] = True
        current = best
    tour.append(start)
    return tour


def cheapest_insertion(matrix: MatrixLike, seed_pair: Optional[Tuple[int, int]] = None) -> List[int]:
    """City insertion: start from ``[a, b, a]`` and insert the globally cheapest city.

    Each step scans every unvisited city against every edge of the partial
    tour, so the whole construction is O(n^3).
    """
    cm = as_cost_matrix(matrix)
    n = cm.n
    rows = cm.rows
    a, b = seed_pair if seed_pair is not None else (0, 1)
    _check_start(a, n)
    _check_start(b, n)
    if a == b:
        raise ValueError(f"Seed pair needs two distinct cities, got ({a}, {b})")
    tour = [a, b, a]
    visited = [False] * n
    visited[a] = visited[b] = True
    while len(tour) < n + 1:
        best_increase = math.inf
        best_city = -1
        best_pos = -1
        for city in range(n):
            if visited[city]:
                continue
            from_city = rows[city]
            for pos in range(len(tour) - 1):
                u = tour[pos]
                v = tour[pos + 1]
                increase = rows[u][city] + from_city[v] - rows[u][v]
                if increase < best_increase:
                    best_increase = increase
                    best_city = city
                    best_pos = pos
        if best_city < 0:
            raise NoFeasibleCityError("No remaining city can be inserted through finite edges")
        tour.insert(best_pos + 1, best_city)
        visited[best_city] = True
    return tour


def candidate_list(row, visited) -> List[Tuple[int, float]]:
    """Unvisited cities with a finite edge, sorted by cost then index."""
    cands = [(j, c) for j, c in enumerate(row) if not visited[j] and c < math.inf]
    cands.sort(key=lambda t: t[1])
    return cands


def restricted_candidate_list(cands: List[Tuple[int, float]], alpha: float,
                              mode: str = 'value') -> List[Tuple[int, float]]:
    """Slice ``cands`` (sorted ascending) down to the RCL.

    ``value``: costs within ``min + alpha * (max - min)``.
    ``cardinality``: the ``max(1, int(len * alpha))`` cheapest candidates.
    """
    if not cands:
        return []
    if mode == 'value':
        lo = cands[0][1]
        hi = cands[-1][1]
        threshold = lo + alpha * (hi - lo)
        return [c for c in cands if c[1] <= threshold]
    if mode == 'cardinality':
        return cands[:max(1, int(len(cands) * alpha))]
    raise ValueError(f"Unknown RCL mode: {mode}")


def greedy_randomized(matrix: MatrixLike, start: int = 0, alpha: float = 0.3,
                      rng: Optional[RandomSource] = None, rcl_mode: str = 'value') -> List[int]:
    """Greedy randomized construction (the GRASP construction phase)."""
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"alpha must lie in [0, 1], got {alpha}")
    if rcl_mode not in RCL_MODES:
        raise ValueError(f"Unknown RCL mode: {rcl_mode}")
    cm = as_cost_matrix(matrix)
    n = cm.n
    _check_start(start, n)
    rng = rng if rng is not None else RandomSource()
    rows = cm.rows
    visited = [False] * n
    visited[start] = True
    tour = [start]
    current = start
    for _ in range(n - 1):
        rcl = restricted_candidate_list(candidate_list(rows[current], visited), alpha, rcl_mode)
        if not rcl:
            raise EmptyCandidateListError(f"Restricted candidate list empty at city {current}")
        if alpha == 0.0:
            # pure greedy: identical to nearest_neighbor, no draw consumed
            chosen = rcl[0][0]
        else:
            chosen = rng.choice(rcl)[0]
        tour.append(chosen)
        visited[chosen] = True
        current = chosen
    tour.append(start)
    return tour


def random_tour(matrix: MatrixLike, start: int = 0, rng: Optional[RandomSource] = None) -> List[int]:
    cm = as_cost_matrix(matrix)
    _check_start(start, cm.n)
    rng = rng if rng is not None else RandomSource()
    rest = [c for c in range(cm.n) if c != start]
    rng.shuffle(rest)
    return [start] + rest + [start]


def _build_nearest(cm, start=0, **_):
    return nearest_neighbor(cm, start)


def _build_insertion(cm, start=0, seed_pair=None, **_):
    if seed_pair is None and cm.n > 1:
        seed_pair = (start, 1 if start == 0 else 0)
    return cheapest_insertion(cm, seed_pair)


def _build_randomized(cm, start=0, alpha=0.3, rng=None, rcl_mode='value', **_):
    return greedy_randomized(cm, start, alpha, rng, rcl_mode)


def _build_random(cm, start=0, rng=None, **_):
    return random_tour(cm, start, rng)


STRATEGIES: Dict[str, Callable[..., List[int]]] = {
    'nearest_neighbor': _build_nearest,
    'cheapest_insertion': _build_insertion,
    'greedy_randomized': _build_randomized,
    'random': _build_random,
}


def build_initial_route(matrix: MatrixLike, strategy: str = 'nearest_neighbor', **params) -> List[int]:
    """Build a closed tour with the named strategy.

    Parameters understood (others are ignored): ``start``, ``seed_pair``
    (cheapest_insertion), ``alpha``, ``rcl_mode`` and ``rng``
    (greedy_randomized / random).
    """
    try:
        builder = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown construction method: {strategy}") from None
    cm = as_cost_matrix(matrix)
    if cm.n == 1:
        start = params.get('start', 0)
        _check_start(start, 1)
        return [start, start]
    return builder(cm, **params)
