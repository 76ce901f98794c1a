"""Result records and their CSV / JSON renderings."""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from .grasp import TSPSolution

RESULT_COLUMNS = ['problem', 'n_cities', 'mode', 'method', 'route', 'cost', 'time_ms']


@dataclass
class ResultRecord:
    problem: int
    n_cities: int
    mode: str
    method: str
    route: str
    cost: float
    time_ms: float

    @classmethod
    def from_solution(cls, sol: TSPSolution, *, problem: int = 1, mode: str = '',
                      names: Optional[Sequence[str]] = None) -> "ResultRecord":
        return cls(
            problem=problem,
            n_cities=len(sol.tour) - 1,
            mode=mode,
            method=sol.method,
            route=format_route(sol.tour, names),
            cost=sol.cost,
            time_ms=round(sol.runtime * 1000.0, 3),
        )


def format_route(route: Sequence[int], names: Optional[Sequence[str]] = None) -> str:
    """Space separated city indices, or names when given."""
    if names is None:
        return ' '.join(str(c) for c in route)
    return ' '.join(names[c] for c in route)


def records_frame(records: Iterable[ResultRecord]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in records], columns=RESULT_COLUMNS)


def append_results(path: str, records: List[ResultRecord]) -> None:
    """Append records to ``path``; the header is written only when the file is new."""
    if not records:
        return
    new_file = not os.path.exists(path) or os.path.getsize(path) == 0
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    records_frame(records).to_csv(path, mode='a', header=new_file, index=False)


def to_json(records: Iterable[ResultRecord]) -> str:
    return json.dumps([asdict(r) for r in records])


def summary_line(record: ResultRecord) -> str:
    label = f"{record.mode} " if record.mode else ""
    return (f"{label}n={record.n_cities:<4d} cost={record.cost:12.2f} "
            f"time={record.time_ms:9.1f}ms method={record.method}\n  route: {record.route}")
