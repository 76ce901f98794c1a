"""Cost matrix holder and route cost evaluation.

Routes are plain lists of location indices. Two forms circulate:

  * open form, length n, the return edge ``route[-1] -> route[0]`` is implicit;
  * closed form, length n + 1, with ``route[0] == route[n]``.

Every entry point of the engine calls :func:`normalize_route` so the
algorithms only ever see the closed form.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidRouteError, MatrixFormatError


class CostMatrix:
    """Square matrix of non-negative travel costs.

    ``values`` is a read-only float numpy array; ``rows`` is the same data as
    nested Python lists, which is what the search loops index (scalar numpy
    indexing is several times slower in pure Python code). ``+inf`` marks a
    missing edge.
    """

    def __init__(self, values, names: Optional[Sequence[str]] = None,
                 filled_cells: Iterable[Tuple[int, int]] = ()):
        D = np.array(values, dtype=float)
        if D.ndim == 1 and D.size == 0:
            D = D.reshape(0, 0)
        if D.ndim != 2 or D.shape[0] != D.shape[1]:
            raise MatrixFormatError(f"Cost matrix must be square, got shape {D.shape}")
        if np.any(np.isnan(D)):
            raise MatrixFormatError("Cost matrix contains NaN entries")
        if np.any(D < 0):
            raise MatrixFormatError("Cost matrix contains negative entries")
        D.setflags(write=False)
        self.values = D
        self.n = D.shape[0]
        self.rows: List[List[float]] = D.tolist()
        if names is not None:
            names = list(names)
            if len(names) != self.n:
                raise MatrixFormatError(
                    f"Got {len(names)} location names for a matrix of size {self.n}"
                )
        self.names = names
        self.filled_cells = tuple(filled_cells)

    def __len__(self) -> int:
        return self.n

    def __getitem__(self, key):
        return self.values[key]

    def __repr__(self) -> str:
        return f"CostMatrix(n={self.n}, symmetric={self.is_symmetric()})"

    def is_symmetric(self, atol: float = 1e-9) -> bool:
        finite = np.where(np.isinf(self.values), -1.0, self.values)
        return bool(np.allclose(finite, finite.T, atol=atol))

    def head(self, size: int) -> "CostMatrix":
        """Leading ``size`` x ``size`` sub-instance (names sliced alike)."""
        if not 0 < size <= self.n:
            raise ValueError(f"Sub-instance size must be in [1, {self.n}], got {size}")
        names = self.names[:size] if self.names is not None else None
        cells = [(i, j) for i, j in self.filled_cells if i < size and j < size]
        return CostMatrix(self.values[:size, :size], names=names, filled_cells=cells)


MatrixLike = Union[CostMatrix, np.ndarray, Sequence[Sequence[float]]]


def as_cost_matrix(matrix: MatrixLike) -> CostMatrix:
    if isinstance(matrix, CostMatrix):
        return matrix
    return CostMatrix(matrix)


def normalize_route(route: Sequence[int], n: int) -> List[int]:
    """Validate ``route`` against a matrix of size ``n`` and return a closed copy."""
    tour = [int(c) for c in route]
    if len(tour) == n + 1:
        if tour[0] != tour[-1]:
            raise InvalidRouteError(
                f"Closed route must end where it starts ({tour[0]} != {tour[-1]})"
            )
        body = tour[:-1]
    elif len(tour) == n:
        body = tour
    else:
        raise InvalidRouteError(
            f"Route of length {len(tour)} does not fit a matrix of size {n}"
        )
    seen = [False] * n
    for city in body:
        if not 0 <= city < n:
            raise InvalidRouteError(f"City index {city} outside [0, {n})")
        if seen[city]:
            raise InvalidRouteError(f"City {city} visited more than once")
        seen[city] = True
    if not body:
        raise InvalidRouteError("Empty route")
    return body + [body[0]]


def route_cost(route: Sequence[int], matrix: MatrixLike) -> float:
    """Total cost of the cycle described by ``route`` (open or closed form).

    A raw nested list or array is indexed as given, without the validation
    :class:`CostMatrix` performs.
    """
    rows = matrix.rows if isinstance(matrix, CostMatrix) else matrix
    n = len(rows)
    m = len(route)
    if m == n + 1:
        if route[0] != route[-1]:
            raise InvalidRouteError(
                f"Closed route must end where it starts ({route[0]} != {route[-1]})"
            )
        last = m - 1
    elif m == n and n > 0:
        last = m
    else:
        raise InvalidRouteError(f"Route of length {m} does not fit a matrix of size {n}")
    seen = [False] * n
    cost = 0.0
    for k in range(last):
        a = route[k]
        b = route[(k + 1) % m]
        if not (0 <= a < n and 0 <= b < n):
            raise InvalidRouteError(f"City index outside [0, {n}) in route")
        if seen[a]:
            raise InvalidRouteError(f"City {a} visited more than once")
        seen[a] = True
        cost += rows[a][b]
    return float(cost)


def tour_cost(tour: Sequence[int], rows: Sequence[Sequence[float]]) -> float:
    """Unchecked cost of a closed tour; used inside the search loops."""
    return float(sum(rows[tour[i]][tour[i + 1]] for i in range(len(tour) - 1)))
