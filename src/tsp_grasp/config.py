"""Solver parameters.

Defaults: 100 GRASP iterations, alpha = 0.3, start at city 0. When no
iteration count is given it is picked from the instance size:

  small  (n <= 50)   150
  medium (n <= 100)  120
  large  (n <= 200)  100
  xlarge (n > 200)    60
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from .construction import RCL_MODES, STRATEGIES
from .local_search import OPERATORS, SearchBudget

DEFAULT_ALPHA = 0.3
DEFAULT_ITERATIONS = 100

SIZE_ITERATIONS = {
    'small': 150,
    'medium': 120,
    'large': 100,
    'xlarge': 60,
}


def classify(n: int) -> str:
    if n <= 50:
        return 'small'
    if n <= 100:
        return 'medium'
    if n <= 200:
        return 'large'
    return 'xlarge'


@dataclass
class SolverConfig:
    construction: str = 'greedy_randomized'
    ls: str = '2opt'
    alpha: float = DEFAULT_ALPHA
    iterations: Optional[int] = DEFAULT_ITERATIONS
    seed: Optional[int] = None
    start: int = 0
    rcl_mode: str = 'value'
    time_limit: Optional[float] = None
    max_moves: Optional[int] = 100_000
    ls_time_limit: Optional[float] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.construction not in STRATEGIES:
            raise ValueError(f"Unknown construction method: {self.construction}")
        if self.ls not in OPERATORS:
            raise ValueError(f"Unknown local search method: {self.ls}")
        if self.rcl_mode not in RCL_MODES:
            raise ValueError(f"Unknown RCL mode: {self.rcl_mode}")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must lie in [0, 1], got {self.alpha}")
        if self.iterations is not None and self.iterations < 1:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if self.start < 0:
            raise ValueError(f"start must be a city index, got {self.start}")

    def iterations_for(self, n: int) -> int:
        if self.iterations is not None:
            return self.iterations
        return SIZE_ITERATIONS[classify(n)]

    def budget(self) -> SearchBudget:
        return SearchBudget(max_moves=self.max_moves, time_limit=self.ls_time_limit)

    @classmethod
    def from_args(cls, args) -> "SolverConfig":
        return cls(
            construction=args.construction,
            ls=args.ls,
            alpha=args.alpha,
            iterations=args.iterations,
            seed=args.seed,
            start=args.start,
            rcl_mode=args.rcl_mode,
            time_limit=args.time_limit,
            max_moves=args.max_moves,
        )

    def to_dict(self) -> dict:
        return asdict(self)
