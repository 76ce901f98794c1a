"""Command line front end.

Examples:
    tsp-grasp Km.csv --names Cidades.csv --ls 2opt --iterations 100 --alpha 0.3 --seed 1
    tsp-grasp Km.csv Min.csv --construction cheapest_insertion --ls none --sizes 48,36,24,12,7,6 \
        --output resultados.csv
    tsp-grasp dat/tsp/gr21.dat --benchmark --methods nearest_neighbor_2opt,grasp_2opt --runs 5
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional, Sequence

from .benchmark import run_benchmark, select_methods, write_outputs
from .config import DEFAULT_ALPHA, DEFAULT_ITERATIONS, SolverConfig
from .construction import RCL_MODES, STRATEGIES
from .errors import TSPError
from .grasp import solve
from .loaders import load_matrix
from .local_search import OPERATORS
from .matrix import CostMatrix
from .reporting import ResultRecord, append_results, summary_line, to_json


def parse_sizes(text: Optional[str]) -> List[int]:
    if not text:
        return []
    try:
        return [int(s) for s in text.split(',') if s.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"--sizes expects a comma list of integers, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog='tsp-grasp',
                                 description="Heuristic (A)TSP solver: construction + local search + GRASP")
    ap.add_argument('matrices', nargs='+', help='Cost matrix files (.csv, .txt, .xlsx, .dat, .atsp, .tsp)')
    ap.add_argument('--names', help='File with one location name per line (reporting only)')
    ap.add_argument('--modes', help='Comma list of labels for the matrices (default: file names)')
    ap.add_argument('--construction', choices=sorted(STRATEGIES), default='greedy_randomized')
    ap.add_argument('--ls', choices=sorted(OPERATORS), default='2opt', help='Local search operator')
    ap.add_argument('--alpha', type=float, default=DEFAULT_ALPHA, help='RCL greediness in [0, 1]')
    ap.add_argument('--rcl-mode', choices=RCL_MODES, default='value')
    ap.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS,
                    help='GRASP iterations; 0 picks a count from the instance size')
    ap.add_argument('--seed', type=int, default=None)
    ap.add_argument('--start', type=int, default=0, help='Start city index')
    ap.add_argument('--time-limit', type=float, help='GRASP time limit in seconds')
    ap.add_argument('--max-moves', type=int, default=100_000, help='Improving moves per descent')
    ap.add_argument('--delimiter', help='Field separator for .csv/.txt files')
    ap.add_argument('--sheet', default=0, help='Sheet name or index for spreadsheets')
    ap.add_argument('--header', action='store_true', help='First row holds location names')
    ap.add_argument('--zero-fill', action='store_true',
                    help='Replace non-numeric cells with 0 instead of failing')
    ap.add_argument('--sizes', type=parse_sizes, default=[],
                    help='Solve the leading sub-instances of these sizes, e.g. 48,36,24')
    ap.add_argument('--output', help='Append results to this CSV file')
    ap.add_argument('--json', action='store_true', help='Emit a JSON array of results instead of text')
    ap.add_argument('--benchmark', action='store_true', help='Run the method presets instead of one solve')
    ap.add_argument('--methods', help='Comma list of benchmark presets (default: all)')
    ap.add_argument('--runs', type=int, default=3, help='Benchmark runs (seeds) per method')
    ap.add_argument('--out-dir', default='results', help='Benchmark output directory')
    ap.add_argument('-v', '--verbose', action='count', default=0)
    return ap


def _sheet(value):
    return int(value) if isinstance(value, str) and value.isdigit() else value


def load_instances(args) -> Dict[str, CostMatrix]:
    labels = [m.strip() for m in args.modes.split(',')] if args.modes else []
    if labels and len(labels) != len(args.matrices):
        raise ValueError(f"--modes lists {len(labels)} labels for {len(args.matrices)} matrices")
    instances: Dict[str, CostMatrix] = {}
    for idx, path in enumerate(args.matrices):
        label = labels[idx] if labels else os.path.splitext(os.path.basename(path))[0]
        instances[label] = load_matrix(path, delimiter=args.delimiter, sheet_name=_sheet(args.sheet),
                                       header=args.header, zero_fill=args.zero_fill,
                                       names_path=args.names)
    return instances


def solve_instances(instances: Dict[str, CostMatrix], config: SolverConfig,
                    sizes: Sequence[int]) -> List[ResultRecord]:
    records: List[ResultRecord] = []
    problem = 0
    for size in list(sizes) or [None]:
        problem += 1
        for mode, cm in instances.items():
            sub = cm if size is None or size >= cm.n else cm.head(size)
            sol = solve(sub, config)
            records.append(ResultRecord.from_solution(sol, problem=problem, mode=mode, names=sub.names))
    return records


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    if args.iterations == 0:
        args.iterations = None
    try:
        config = SolverConfig.from_args(args)
        instances = load_instances(args)
    except (TSPError, ValueError, OSError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    if args.benchmark:
        try:
            methods = select_methods(args.methods)
            records = run_benchmark(instances, methods, runs=args.runs, seed_offset=args.seed or 0,
                                    sizes=args.sizes, budget=config.budget())
        except (TSPError, ValueError) as e:
            print(f"[error] {e}", file=sys.stderr)
            return 1
        summary = write_outputs(records, args.out_dir)
        print(summary.to_string(index=False))
        print(f"\n✓ Benchmark results written to {args.out_dir}/")
        return 0

    try:
        records = solve_instances(instances, config, args.sizes)
    except (TSPError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    if args.json:
        print(to_json(records))
    else:
        for rec in records:
            print(summary_line(rec))
    if args.output:
        append_results(args.output, records)
        if not args.json:
            print(f"\n✓ Results appended to {args.output}")
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
