"""Load cost matrices and location names from files.

Supported inputs (picked by suffix in :func:`load_matrix`):
 - .csv            comma separated (or ``delimiter``), one row per origin
 - .txt            whitespace separated
 - .xlsx           first sheet, or ``sheet_name``
 - .dat            AMPL style ``param dist :`` block
 - .atsp / .tsp    TSPLIB with EDGE_WEIGHT_TYPE EXPLICIT

Spreadsheet exports often carry blank or text cells. Those are rejected with
``MatrixFormatError`` listing the offending cells; ``zero_fill=True`` replaces
them with 0 instead, logs a warning and records them on
``CostMatrix.filled_cells``.
"""
from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import MatrixFormatError
from .matrix import CostMatrix

logger = logging.getLogger(__name__)

MAX_REPORTED_CELLS = 10


def _strip_cells(raw: pd.DataFrame) -> pd.DataFrame:
    raw = raw.apply(lambda col: col.map(lambda v: v.strip() if isinstance(v, str) else v))
    return raw.replace('', np.nan)


def _coerce_frame(raw: pd.DataFrame, source: str, zero_fill: bool) -> Tuple[np.ndarray, List[Tuple[int, int]]]:
    # trailing separators produce all-empty columns / rows
    raw = raw.dropna(axis=1, how='all').dropna(axis=0, how='all')
    numeric = raw.apply(pd.to_numeric, errors='coerce')
    bad = numeric.isna().to_numpy()
    cells = [(int(i), int(j)) for i, j in zip(*np.nonzero(bad))]
    if cells:
        shown = ', '.join(f"({i}, {j})" for i, j in cells[:MAX_REPORTED_CELLS])
        more = f" and {len(cells) - MAX_REPORTED_CELLS} more" if len(cells) > MAX_REPORTED_CELLS else ""
        if not zero_fill:
            raise MatrixFormatError(f"Non-numeric cells in {source}: {shown}{more}")
        logger.warning("Zero-filled %d non-numeric cells in %s: %s%s", len(cells), source, shown, more)
        numeric = numeric.fillna(0.0)
    values = numeric.to_numpy(dtype=float)
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise MatrixFormatError(f"Distance matrix not square in {source}: {values.shape}")
    return values, cells


def _split_header(raw: pd.DataFrame, header: bool) -> Tuple[pd.DataFrame, Optional[List[str]]]:
    if not header:
        return raw, None
    raw = raw.dropna(axis=1, how='all')
    names = [str(x) for x in raw.iloc[0].tolist()]
    body = raw.iloc[1:].reset_index(drop=True)
    # a leading corner cell (row labels column) shifts the header by one
    if body.shape[1] == len(names) and body.shape[1] == body.shape[0] + 1:
        body = body.iloc[:, 1:]
        names = names[1:]
    return body, names


def load_matrix_csv(path: str, delimiter: str = ',', header: bool = False,
                    zero_fill: bool = False) -> CostMatrix:
    """Read a delimited matrix; ``delimiter=None`` splits on whitespace."""
    sep = r'\s+' if delimiter is None else delimiter
    try:
        raw = pd.read_csv(path, sep=sep, header=None, dtype=str, skip_blank_lines=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MatrixFormatError(f"Could not parse {path}: {e}") from None
    return _to_cost_matrix(_strip_cells(raw), path, header, zero_fill)


def load_matrix_xlsx(path: str, sheet_name=0, header: bool = False,
                     zero_fill: bool = False) -> CostMatrix:
    raw = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object)
    return _to_cost_matrix(_strip_cells(raw), f"{path}[{sheet_name}]", header, zero_fill)


def _to_cost_matrix(raw: pd.DataFrame, source: str, header: bool, zero_fill: bool) -> CostMatrix:
    raw, names = _split_header(raw, header)
    values, cells = _coerce_frame(raw, source, zero_fill)
    if names is not None and len(names) != values.shape[0]:
        raise MatrixFormatError(
            f"Header of {source} has {len(names)} names for {values.shape[0]} rows"
        )
    return CostMatrix(values, names=names, filled_cells=cells)


def parse_tsp_dat(path: str) -> np.ndarray:
    """Parse AMPL .dat with 'set NODES' and 'param dist :' matrix."""
    with open(path, 'r') as f:
        content = f.read().splitlines()
    rows: List[List[float]] = []
    in_matrix = False
    header_consumed = False
    for line in content:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('param dist'):
            in_matrix = True
            continue
        if in_matrix:
            if line.startswith(';'):
                break
            parts = line.split()
            # first line after 'param dist :' is the column header
            if not header_consumed:
                header_consumed = True
                continue
            if parts[0].isdigit():
                numeric_tokens = []
                for tok in parts[1:]:
                    if tok.startswith('#') or tok == ';':
                        break
                    numeric_tokens.append(tok)
                try:
                    rows.append([float(x) for x in numeric_tokens])
                except ValueError as e:
                    raise MatrixFormatError(f"Non-numeric entry in {path}: {e}") from None
                if line.endswith(';'):
                    break
    if not rows:
        raise MatrixFormatError(f"No 'param dist' block found in {path}")
    widths = {len(r) for r in rows}
    if len(widths) != 1:
        raise MatrixFormatError(f"Ragged 'param dist' rows in {path}")
    dist = np.array(rows, dtype=float)
    if dist.shape[0] != dist.shape[1]:
        raise MatrixFormatError(f"Distance matrix not square in {path}: {dist.shape}")
    return dist


def _tsplib_header(lines: Sequence[str]) -> dict:
    header = {}
    for line in lines:
        line = line.strip()
        if line.startswith('EDGE_WEIGHT_SECTION'):
            break
        if ':' in line:
            key, value = line.split(':', 1)
            header[key.strip().upper()] = value.strip()
    return header


def parse_tsplib_explicit(path: str) -> np.ndarray:
    """Parse a TSPLIB file whose weights are listed in EDGE_WEIGHT_SECTION.

    Formats: FULL_MATRIX, UPPER_ROW, UPPER_DIAG_ROW, LOWER_DIAG_ROW. Triangular
    formats are mirrored (they only describe symmetric instances).
    """
    with open(path, 'r') as f:
        lines = f.readlines()
    header = _tsplib_header(lines)
    if 'DIMENSION' not in header:
        raise MatrixFormatError(f"Could not find DIMENSION in {path}")
    dimension = int(header['DIMENSION'])
    weight_type = header.get('EDGE_WEIGHT_TYPE', 'EXPLICIT').upper()
    if weight_type != 'EXPLICIT':
        raise MatrixFormatError(f"Unsupported EDGE_WEIGHT_TYPE: {weight_type}")
    weight_format = header.get('EDGE_WEIGHT_FORMAT', 'FULL_MATRIX').upper()

    weight_data: List[float] = []
    in_weight_section = False
    for line in lines:
        line = line.strip()
        if line.startswith('EDGE_WEIGHT_SECTION'):
            in_weight_section = True
            continue
        if not in_weight_section or not line:
            continue
        if line == 'EOF' or line[0].isalpha():
            break
        try:
            weight_data.extend(float(tok) for tok in line.split())
        except ValueError as e:
            raise MatrixFormatError(f"Non-numeric weight in {path}: {e}") from None

    if weight_format == 'FULL_MATRIX':
        cells = [(i, j) for i in range(dimension) for j in range(dimension)]
    elif weight_format == 'UPPER_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i + 1, dimension)]
    elif weight_format == 'UPPER_DIAG_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i, dimension)]
    elif weight_format == 'LOWER_DIAG_ROW':
        cells = [(i, j) for i in range(dimension) for j in range(i + 1)]
    else:
        raise MatrixFormatError(f"Unsupported EDGE_WEIGHT_FORMAT: {weight_format}")
    if len(weight_data) < len(cells):
        raise MatrixFormatError(
            f"{path}: expected {len(cells)} weights for {weight_format}, found {len(weight_data)}"
        )
    dist = np.zeros((dimension, dimension))
    for (i, j), w in zip(cells, weight_data):
        dist[i, j] = w
        if weight_format != 'FULL_MATRIX':
            dist[j, i] = w
    return dist


def load_city_names(path: str) -> List[str]:
    """One location name per non-empty line."""
    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]


def load_matrix(path: str, *, delimiter: Optional[str] = None, sheet_name=0,
                header: bool = False, zero_fill: bool = False,
                names_path: Optional[str] = None) -> CostMatrix:
    """Load a cost matrix, choosing the reader from the file suffix."""
    ext = os.path.splitext(path)[1].lower()
    if ext == '.csv':
        cm = load_matrix_csv(path, delimiter or ',', header, zero_fill)
    elif ext == '.txt':
        cm = load_matrix_csv(path, delimiter, header, zero_fill)
    elif ext == '.xlsx':
        cm = load_matrix_xlsx(path, sheet_name, header, zero_fill)
    elif ext == '.dat':
        cm = CostMatrix(parse_tsp_dat(path))
    elif ext in ('.atsp', '.tsp'):
        cm = CostMatrix(parse_tsplib_explicit(path))
    else:
        raise ValueError(f"Unsupported matrix file type: {path}")
    if names_path is not None:
        names = load_city_names(names_path)
        if len(names) != cm.n:
            raise MatrixFormatError(
                f"{names_path} lists {len(names)} names but {path} has {cm.n} locations"
            )
        cm = CostMatrix(cm.values, names=names, filled_cells=cm.filled_cells)
    logger.info("Loaded %s (n=%d%s)", path, cm.n, ", asymmetric" if not cm.is_symmetric() else "")
    return cm
