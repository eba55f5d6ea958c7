"""
CSV loader for the Station Statistics Reporter.

Reads one CSV file laid out as::

    Group,   Label,           Reading 1, Reading 2, ...
    Lagos,   Southern Region, 12,        15,        ...

and assembles it into a ``Dataset``.  Handles:

- Auto-detected delimiters (tab → semicolon → comma)
- European locale decimal-comma parsing
- UTF-8 BOM markers and ``#`` comment lines
- Blank cells (dropped, so groups may have unequal sizes)
- Optional label column (``label_column=False`` for ``Group, r1, r2…``)

Data-quality problems (non-numeric cells, duplicate groups, rows with
no readings) are reported with ``warnings.warn`` and the offending
cells or rows skipped.
"""

import csv
import logging
import math
import os
import warnings
from collections import OrderedDict
from typing import Dict, List, Tuple

from .constants import COL_DATA_START, COL_GROUP, COL_LABEL
from .data_model import Dataset
from .errors import EmptyDatasetError

logger = logging.getLogger(__name__)


# ── Locale-safe float parsing ────────────────────────────────────────────

def _locale_float(text: str) -> float:
    """Parse a numeric string that may use comma as decimal separator.

    Handles:
    - Standard period decimals: ``"3.14"``
    - European comma decimals: ``"3,14"``
    - Thousand separators when both ``.`` and ``,`` are present

    Raises ``ValueError`` for non-numeric or non-finite strings.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty string")
    # If both '.' and ',' are present, the last one is the decimal
    if ',' in s and '.' in s:
        if s.rfind(',') > s.rfind('.'):
            # European: "1.234,56"  →  "1234.56"
            s = s.replace('.', '').replace(',', '.')
        else:
            # US: "1,234.56"  →  "1234.56"
            s = s.replace(',', '')
    elif ',' in s:
        s = s.replace(',', '.')
    result = float(s)
    if not math.isfinite(result):
        raise ValueError(f"non-finite value: {text.strip()!r}")
    return result


# ── Delimiter auto-detection ─────────────────────────────────────────────

def _detect_delimiter(sample_line: str) -> str:
    """Detect CSV delimiter from a sample line.

    Priority: tab → semicolon → comma.
    European CSVs use semicolons as field delimiters with comma decimals.
    """
    if '\t' in sample_line:
        return '\t'
    if ';' in sample_line:
        return ';'
    return ','


def _split_line(line: str, delimiter: str) -> List[str]:
    """Split one line with csv.reader so quoted names keep their commas."""
    rows = list(csv.reader([line], delimiter=delimiter))
    if rows:
        return [t.strip() for t in rows[0]]
    return []


# ── Loader ───────────────────────────────────────────────────────────────

def _read_lines(filepath: str) -> List[str]:
    lines: List[str] = []
    with open(filepath, 'r', encoding='utf-8-sig') as fh:
        for line in fh:
            stripped = line.rstrip('\n\r')
            if stripped.strip() == '' or stripped.strip().startswith('#'):
                continue
            lines.append(stripped)
    return lines


def load_dataset_csv(filepath: str, *, label_column: bool = True) -> Dataset:
    """Load a grouped-readings CSV into a ``Dataset``.

    Parameters
    ----------
    filepath : str
        Path to the CSV file.  The first non-comment line is a header.
    label_column : bool
        ``True`` when column 2 holds a label (region / category);
        ``False`` when readings start right after the group name.

    Returns
    -------
    Dataset

    Raises
    ------
    FileNotFoundError
        If *filepath* does not exist.
    EmptyDatasetError
        If no row yields at least one valid reading.
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"CSV file not found: {filepath}")
    base = os.path.basename(filepath)
    data_start = COL_DATA_START if label_column else COL_LABEL

    raw_lines = _read_lines(filepath)
    if len(raw_lines) < 2:
        raise EmptyDatasetError(
            f"CSV file '{base}' must have a header row and at least one data row."
        )
    delimiter = _detect_delimiter(raw_lines[0])

    groups: Dict[str, Tuple[float, ...]] = OrderedDict()
    labels: Dict[str, str] = {}
    bad_tokens: List[str] = []

    for line_idx, raw_line in enumerate(raw_lines[1:], start=2):
        tokens = _split_line(raw_line, delimiter)
        name = tokens[COL_GROUP] if tokens else ""
        if not name:
            warnings.warn(
                f"Line {line_idx} in '{base}' has a blank group name; skipping.",
                stacklevel=2,
            )
            continue
        if name in groups:
            warnings.warn(
                f"Duplicate group '{name}' at line {line_idx} in '{base}'; "
                f"skipping duplicate.",
                stacklevel=2,
            )
            continue

        readings: List[float] = []
        for col_idx, cell in enumerate(tokens[data_start:], start=data_start + 1):
            if not cell:
                continue
            try:
                readings.append(_locale_float(cell))
            except ValueError:
                bad_tokens.append(f"line {line_idx} col {col_idx}: '{cell}'")

        if not readings:
            warnings.warn(
                f"Group '{name}' at line {line_idx} in '{base}' has no valid "
                f"readings; skipping.",
                stacklevel=2,
            )
            continue

        groups[name] = tuple(readings)
        if label_column and len(tokens) > COL_LABEL and tokens[COL_LABEL]:
            labels[name] = tokens[COL_LABEL]

    if bad_tokens:
        detail = "; ".join(bad_tokens[:10])
        if len(bad_tokens) > 10:
            detail += f" ... and {len(bad_tokens) - 10} more"
        warnings.warn(
            f"Non-numeric values in '{base}': {detail}. "
            f"These cells were treated as missing data.",
            stacklevel=2,
        )

    if not groups:
        raise EmptyDatasetError(f"No valid data rows found in '{base}'.")

    logger.debug("Loaded %d group(s) from %s", len(groups), filepath)
    return Dataset(groups=groups, labels=labels, source=filepath)
