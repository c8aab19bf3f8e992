# records.py
import sys
import numpy as np

from trigrid.errors import InputError


def n_input_columns(has_z: bool, has_uncertainty: bool) -> int:
    return 2 + int(has_z) + 2 * int(has_uncertainty)


def _data_lines(fh):
    for line in fh:
        text = line.strip()
        if not text or text[0] in "#>":
            continue
        yield text.replace(",", " ")


def read_table(source, n_columns: int) -> np.ndarray:
    """
    Read the first n_columns numeric columns of a text table. Whitespace or
    comma separated; '#' comments and '>' segment headers are skipped.
    source: path, '-' for stdin, or an open text stream.
    """
    if source is None or source == "-":
        return read_table(sys.stdin, n_columns)
    if not hasattr(source, "read"):
        try:
            fh = open(source, "r")
        except OSError as e:
            raise InputError(f"Cannot read input table {source}: {e.strerror or e}") from e
        with fh:
            return read_table(fh, n_columns)

    name = getattr(source, "name", "<stream>")
    lines = list(_data_lines(source))
    if not lines:
        return np.empty((0, n_columns), dtype=np.float64)
    try:
        arr = np.loadtxt(lines, ndmin=2, usecols=range(n_columns), dtype=np.float64)
    except ValueError as e:
        raise InputError(f"{name}: expected {n_columns} numeric columns per record ({e})") from e
    return arr.reshape(-1, n_columns)
