"""Local search operators for closed tours.

All operators use first-improvement: the neighbourhood is scanned in a fixed
nested order, the first move with a negative delta is applied in place and the
scan restarts; a full scan without improvement ends the search. Deltas only
touch the edges a move changes. A reversed segment also changes the cost of
its internal edges when the matrix is asymmetric, so the 2-opt and 3-opt scans
carry running forward/backward sums of the segments they reverse.

The start city (position 0 and n of the closed tour) never moves.

Operators (name -> neighbourhood):
  swap         exchange the cities at positions i < j
  2opt         reverse tour[i..j]
  3opt         cut into S1 = tour[i..j], S2 = tour[j+1..k] and try the seven
               reconnections S1'S2, S1S2', S1'S2', S2S1, S2S1', S2'S1, S2'S1'
  oropt        move a segment of 1, 2 or 3 cities between two other cities
  reinsertion  move one city to its cheapest insertion position
  none         leave the tour untouched
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .matrix import MatrixLike, as_cost_matrix, normalize_route, tour_cost

logger = logging.getLogger(__name__)

EPS = 1e-9

Rows = Sequence[Sequence[float]]


@dataclass
class SearchBudget:
    """Caps a single descent: improving moves applied and wall-clock seconds."""
    max_moves: Optional[int] = 100_000
    time_limit: Optional[float] = None

    def exhausted(self, moves: int, started: float) -> bool:
        if self.max_moves is not None and moves >= self.max_moves:
            return True
        if self.time_limit is not None and time.perf_counter() - started >= self.time_limit:
            return True
        return False


DEFAULT_BUDGET = SearchBudget()


# ---------------------------------------------------------
# Move scans: apply the first improving move, return its delta
# ---------------------------------------------------------

def _swap_move(t: List[int], C: Rows) -> Optional[float]:
    last = len(t) - 2
    for i in range(1, last):
        p, x, s = t[i - 1], t[i], t[i + 1]
        for j in range(i + 1, last + 1):
            y, q = t[j], t[j + 1]
            if j == i + 1:
                old = C[p][x] + C[x][y] + C[y][q]
                new = C[p][y] + C[y][x] + C[x][q]
            else:
                pj = t[j - 1]
                old = C[p][x] + C[x][s] + C[pj][y] + C[y][q]
                new = C[p][y] + C[y][s] + C[pj][x] + C[x][q]
            delta = new - old
            if delta < -EPS:
                t[i], t[j] = y, x
                return delta
    return None


def _two_opt_move(t: List[int], C: Rows) -> Optional[float]:
    last = len(t) - 2
    for i in range(1, last):
        a, b = t[i - 1], t[i]
        ab = C[a][b]
        fwd = rev = 0.0
        for j in range(i + 1, last + 1):
            pc, c, d = t[j - 1], t[j], t[j + 1]
            fwd += C[pc][c]
            rev += C[c][pc]
            delta = (C[a][c] + C[b][d] + rev) - (ab + C[c][d] + fwd)
            if delta < -EPS:
                t[i:j + 1] = t[i:j + 1][::-1]
                return delta
    return None


def _three_opt_move(t: List[int], C: Rows) -> Optional[float]:
    last = len(t) - 2
    for i in range(1, last):
        A, s1f = t[i - 1], t[i]
        f1 = r1 = 0.0
        for j in range(i, last):
            if j > i:
                f1 += C[t[j - 1]][t[j]]
                r1 += C[t[j]][t[j - 1]]
            s1l, s2f = t[j], t[j + 1]
            f2 = r2 = 0.0
            for k in range(j + 1, last + 1):
                if k > j + 1:
                    f2 += C[t[k - 1]][t[k]]
                    r2 += C[t[k]][t[k - 1]]
                s2l, B = t[k], t[k + 1]
                old = C[A][s1f] + C[s1l][s2f] + C[s2l][B] + f1 + f2
                variants = (
                    C[A][s1l] + C[s1f][s2f] + C[s2l][B] + r1 + f2,  # S1' S2
                    C[A][s1f] + C[s1l][s2l] + C[s2f][B] + f1 + r2,  # S1  S2'
                    C[A][s1l] + C[s1f][s2l] + C[s2f][B] + r1 + r2,  # S1' S2'
                    C[A][s2f] + C[s2l][s1f] + C[s1l][B] + f2 + f1,  # S2  S1
                    C[A][s2f] + C[s2l][s1l] + C[s1f][B] + f2 + r1,  # S2  S1'
                    C[A][s2l] + C[s2f][s1f] + C[s1l][B] + r2 + f1,  # S2' S1
                    C[A][s2l] + C[s2f][s1l] + C[s1f][B] + r2 + r1,  # S2' S1'
                )
                for kind, new in enumerate(variants):
                    delta = new - old
                    if delta < -EPS:
                        t[i:k + 1] = _reconnect(t[i:j + 1], t[j + 1:k + 1], kind)
                        return delta
    return None


def _reconnect(s1: List[int], s2: List[int], kind: int) -> List[int]:
    if kind == 0:
        return s1[::-1] + s2
    if kind == 1:
        return s1 + s2[::-1]
    if kind == 2:
        return s1[::-1] + s2[::-1]
    if kind == 3:
        return s2 + s1
    if kind == 4:
        return s2 + s1[::-1]
    if kind == 5:
        return s2[::-1] + s1
    return s2[::-1] + s1[::-1]


def _relocate(t: List[int], i: int, length: int, p: int) -> None:
    """Move tour[i:i+length] between tour[p] and tour[p+1] (indices before removal)."""
    seg = t[i:i + length]
    del t[i:i + length]
    pos = p + 1 if p < i else p - length + 1
    t[pos:pos] = seg


def _or_opt_move(t: List[int], C: Rows) -> Optional[float]:
    m = len(t)
    last = m - 2
    for length in (1, 2, 3):
        for i in range(1, last - length + 2):
            prev, first = t[i - 1], t[i]
            tail, nxt = t[i + length - 1], t[i + length]
            gain = C[prev][first] + C[tail][nxt] - C[prev][nxt]
            for p in range(m - 1):
                if i - 1 <= p <= i + length - 1:
                    continue
                u, v = t[p], t[p + 1]
                delta = C[u][first] + C[tail][v] - C[u][v] - gain
                if delta < -EPS:
                    _relocate(t, i, length, p)
                    return delta
    return None


def _reinsertion_move(t: List[int], C: Rows) -> Optional[float]:
    m = len(t)
    for i in range(1, m - 1):
        prev, c, nxt = t[i - 1], t[i], t[i + 1]
        gain = C[prev][c] + C[c][nxt] - C[prev][nxt]
        best_delta = -EPS
        best_p = -1
        for p in range(m - 1):
            if p == i - 1 or p == i:
                continue
            u, v = t[p], t[p + 1]
            delta = C[u][c] + C[c][v] - C[u][v] - gain
            if delta < best_delta:
                best_delta = delta
                best_p = p
        if best_p >= 0:
            _relocate(t, i, 1, best_p)
            return best_delta
    return None


MoveScan = Callable[[List[int], Rows], Optional[float]]

OPERATORS: Dict[str, Optional[MoveScan]] = {
    'swap': _swap_move,
    '2opt': _two_opt_move,
    '3opt': _three_opt_move,
    'oropt': _or_opt_move,
    'reinsertion': _reinsertion_move,
    'none': None,
}


def _descend(tour: List[int], C: Rows, scan: MoveScan, budget: SearchBudget,
             name: str) -> Tuple[List[int], int]:
    started = time.perf_counter()
    moves = 0
    while True:
        if budget.exhausted(moves, started):
            logger.warning("%s stopped by budget after %d moves (max_moves=%s, time_limit=%s)",
                           name, moves, budget.max_moves, budget.time_limit)
            break
        if scan(tour, C) is None:
            break
        moves += 1
    return tour, moves


def improve_route(route: Sequence[int], matrix: MatrixLike, operator: str = '2opt',
                  budget: Optional[SearchBudget] = None) -> Tuple[List[int], float, int]:
    """Run ``operator`` to a local optimum.

    Returns ``(tour, cost, moves)``: the improved closed tour (a new list, the
    input is not modified), its recomputed cost and the number of improving
    moves applied.
    """
    if operator not in OPERATORS:
        raise ValueError(f"Unknown local search method: {operator}")
    cm = as_cost_matrix(matrix)
    tour = normalize_route(route, cm.n)
    scan = OPERATORS[operator]
    moves = 0
    if scan is not None and len(tour) > 3:
        tour, moves = _descend(tour, cm.rows, scan, budget or DEFAULT_BUDGET, operator)
    cost = tour_cost(tour, cm.rows)
    logger.debug("%s: %d improving moves, cost %.4f", operator, moves, cost)
    return tour, cost, moves


def optimize_locally(route: Sequence[int], matrix: MatrixLike, operator: str = '2opt',
                     budget: Optional[SearchBudget] = None) -> List[int]:
    return improve_route(route, matrix, operator, budget)[0]


def swap(route, matrix, budget=None):
    return improve_route(route, matrix, 'swap', budget)


def two_opt(route, matrix, budget=None):
    return improve_route(route, matrix, '2opt', budget)


def three_opt(route, matrix, budget=None):
    return improve_route(route, matrix, '3opt', budget)


def or_opt(route, matrix, budget=None):
    return improve_route(route, matrix, 'oropt', budget)


def city_reinsertion(route, matrix, budget=None):
    return improve_route(route, matrix, 'reinsertion', budget)
