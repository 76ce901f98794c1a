"""Benchmark construction / local search configurations over cost matrices.

Each method is a (construction, local search, iterations, alpha) preset; every
method is run ``runs`` times per instance with seeds ``seed_offset + run - 1``.
Optional ``sizes`` also run the leading sub-instances of each matrix, e.g.
48, 36, 24, 12, 7 and 6 cities.

Outputs (in ``out_dir`` when :func:`write_outputs` is used):
  benchmark_runs.csv        one row per run
  benchmark_summary.csv     best / mean cost and mean runtime per instance and method
  benchmark_statistics.txt  Friedman + pairwise Wilcoxon on mean cost
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from scipy.stats import friedmanchisquare, wilcoxon

from .grasp import run_grasp
from .local_search import SearchBudget
from .matrix import CostMatrix

logger = logging.getLogger(__name__)

DEFAULT_METHODS: Dict[str, Dict] = {
    # Construction only (no local search)
    'random': {'construction': 'random', 'ls': 'none'},
    'nearest_neighbor': {'construction': 'nearest_neighbor', 'ls': 'none'},
    'cheapest_insertion': {'construction': 'cheapest_insertion', 'ls': 'none'},
    # Construction + one descent
    'nearest_neighbor_swap': {'construction': 'nearest_neighbor', 'ls': 'swap'},
    'nearest_neighbor_2opt': {'construction': 'nearest_neighbor', 'ls': '2opt'},
    'cheapest_insertion_2opt': {'construction': 'cheapest_insertion', 'ls': '2opt'},
    'cheapest_insertion_reinsertion': {'construction': 'cheapest_insertion', 'ls': 'reinsertion'},
    # GRASP
    'grasp_2opt': {'construction': 'greedy_randomized', 'ls': '2opt', 'iterations': 50, 'alpha': 0.3},
    'grasp_oropt': {'construction': 'greedy_randomized', 'ls': 'oropt', 'iterations': 50, 'alpha': 0.3},
    'grasp_3opt': {'construction': 'greedy_randomized', 'ls': '3opt', 'iterations': 10, 'alpha': 0.3},
}


@dataclass
class RunRecord:
    instance: str
    n: int
    method_name: str
    construction: str
    ls: str
    run: int
    seed: int
    cost: float
    runtime: float
    iterations: int
    improvements: int
    timestamp: str


def expand_instances(instances: Mapping[str, CostMatrix],
                     sizes: Optional[Sequence[int]] = None) -> Dict[str, CostMatrix]:
    """Add ``<name>_n<size>`` leading sub-instances for each requested size."""
    out: Dict[str, CostMatrix] = {}
    for name, cm in instances.items():
        out[name] = cm
        for size in sizes or ():
            if 3 <= size < cm.n:
                out[f"{name}_n{size}"] = cm.head(size)
            elif size != cm.n:
                logger.warning("Skipping size %d for %s (n=%d)", size, name, cm.n)
    return out


def run_benchmark(instances: Mapping[str, CostMatrix], methods: Optional[Mapping[str, Dict]] = None,
                  runs: int = 3, seed_offset: int = 0, sizes: Optional[Sequence[int]] = None,
                  budget: Optional[SearchBudget] = None) -> List[RunRecord]:
    methods = methods if methods is not None else DEFAULT_METHODS
    if runs < 1:
        raise ValueError(f"runs must be positive, got {runs}")
    records: List[RunRecord] = []
    for name, cm in expand_instances(instances, sizes).items():
        logger.info("Instance %s (n=%d)", name, cm.n)
        for mname, cfg in methods.items():
            for r in range(1, runs + 1):
                seed = seed_offset + r - 1
                sol = run_grasp(cm, cfg.get('iterations', 1), cfg.get('alpha', 0.3),
                                cfg['construction'], cfg['ls'], seed,
                                rcl_mode=cfg.get('rcl_mode', 'value'), budget=budget)
                rec = RunRecord(
                    instance=name,
                    n=cm.n,
                    method_name=mname,
                    construction=cfg['construction'],
                    ls=cfg['ls'],
                    run=r,
                    seed=seed,
                    cost=sol.cost,
                    runtime=sol.runtime,
                    iterations=sol.iterations,
                    improvements=sol.improvements,
                    timestamp=time.strftime('%Y-%m-%d %H:%M:%S'),
                )
                records.append(rec)
                logger.info("  %s run %d/%d: cost=%.2f time=%.3fs imp=%d",
                            mname, r, runs, sol.cost, sol.runtime, sol.improvements)
    return records


def records_frame(records: Iterable[RunRecord]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in records])


def summarize(records: List[RunRecord]) -> pd.DataFrame:
    df = records_frame(records)
    grp = df.groupby(['instance', 'method_name'], sort=False)
    summary = grp.agg(
        n=('n', 'first'),
        runs=('run', 'count'),
        cost_best=('cost', 'min'),
        cost_mean=('cost', 'mean'),
        cost_std=('cost', 'std'),
        runtime_mean=('runtime', 'mean'),
        runtime_std=('runtime', 'std'),
    ).reset_index()
    # std is NaN for single runs
    summary['cost_std'] = summary['cost_std'].fillna(0)
    summary['runtime_std'] = summary['runtime_std'].fillna(0)
    # gap of the mean cost to the best cost seen on the same instance
    best = summary.groupby('instance')['cost_best'].transform('min')
    summary['gap_percent'] = ((summary['cost_mean'] - best) / best * 100).where(best > 0, 0.0)
    return summary


def statistical_tests(summary_df: pd.DataFrame, value: str = 'cost_mean') -> List[str]:
    """Friedman test over all methods, then pairwise Wilcoxon signed-rank tests.

    Needs at least two instances per method; tests scipy cannot run (too few
    instances, all-equal samples) are reported as skipped.
    """
    piv = summary_df.pivot(index='instance', columns='method_name', values=value).dropna()
    out_lines: List[str] = ['Heuristic Benchmark Statistical Comparison', '=' * 60]
    if piv.shape[0] < 2:
        out_lines.append(f'Skipped: need at least 2 instances, got {piv.shape[0]}')
        return out_lines
    if piv.shape[1] >= 3:
        try:
            stat, p = friedmanchisquare(*[piv[c] for c in piv.columns])
            out_lines.append(f'Friedman {value}: stat={stat:.4f} p={p:.3e}')
        except ValueError as e:
            out_lines.append(f'Friedman test skipped: {e}')
    cols = list(piv.columns)
    for i, c1 in enumerate(cols):
        for c2 in cols[i + 1:]:
            if (piv[c1] == piv[c2]).all():
                out_lines.append(f'Wilcoxon {c1} vs {c2}: identical samples')
                continue
            try:
                stat, p = wilcoxon(piv[c1], piv[c2])
                out_lines.append(f'Wilcoxon {c1} vs {c2}: stat={stat} p={p:.3e}')
            except ValueError as e:
                out_lines.append(f'Wilcoxon {c1} vs {c2} skipped: {e}')
    return out_lines


def write_outputs(records: List[RunRecord], out_dir: str) -> pd.DataFrame:
    os.makedirs(out_dir, exist_ok=True)
    records_frame(records).to_csv(os.path.join(out_dir, 'benchmark_runs.csv'), index=False)
    summary = summarize(records)
    summary.to_csv(os.path.join(out_dir, 'benchmark_summary.csv'), index=False)
    lines = statistical_tests(summary)
    with open(os.path.join(out_dir, 'benchmark_statistics.txt'), 'w') as f:
        f.write('\n'.join(lines) + '\n')
    logger.info("Benchmark outputs written to %s", out_dir)
    return summary


def select_methods(names: Optional[str]) -> Dict[str, Dict]:
    """Pick presets from a comma list; unknown names raise ``ValueError``."""
    if not names:
        return dict(DEFAULT_METHODS)
    requested = [m.strip() for m in names.split(',') if m.strip()]
    missing = [m for m in requested if m not in DEFAULT_METHODS]
    if missing:
        raise ValueError(f"Unknown method names: {missing}. Known: {list(DEFAULT_METHODS)}")
    return {m: DEFAULT_METHODS[m] for m in requested}
