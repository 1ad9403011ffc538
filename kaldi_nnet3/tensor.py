# Copyright 2017-2018    Daniel Povey
#           2026         kaldi-nnet3 authors
# Apache 2.0.

"""Reading of the numeric literals that appear as component attributes:
matrices, vectors and scalars, returned as numpy arrays.
"""

import logging
import re

import numpy as np

from kaldi_nnet3.exceptions import ParseError
from kaldi_nnet3.primitives import (MULTISPACE, SPACE, read_integer, skip,
                                    spaced, tag)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_FLOAT_RE = re.compile(
    br'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def read_float(s, pos):
    m = _FLOAT_RE.match(s, pos)
    if m is None:
        raise ParseError("float", s, pos)
    return (float(m.group(0)), m.end())


def read_row(s, pos):
    """Reads a run of floats separated by spaces or tabs (possibly an empty
    run) and returns the pair (list_of_floats, new_pos).  The position after
    the last float is returned, so trailing spaces are left unconsumed."""
    row = []
    try:
        (f, pos) = read_float(s, pos)
    except ParseError:
        return (row, pos)
    row.append(f)
    while True:
        after_space = skip(s, pos, SPACE)
        if after_space == pos:
            break
        try:
            (f, after_float) = read_float(s, after_space)
        except ParseError:
            break
        row.append(f)
        pos = after_float
    return (row, pos)


def check_for_newline(s, pos):
    """Eats up all the whitespace it can starting at 'pos' and returns the
    pair (saw_newline, new_pos)."""
    end = skip(s, pos, MULTISPACE)
    return (s.find(b"\n", pos, end) != -1, end)


def read_matrix(s, pos):
    """Reads a text-format matrix like "[\\n 1.0 2.0\\n 3.0 4.0 ]" and
    returns it as a 2-dimensional float32 array.

    The literal has to span more than one line; "[ 1.0 2.0 ]" is a vector
    and is rejected here.  Blank lines are not rows.  The number of columns
    is the total number of elements divided by the number of rows, so rows
    of unequal length get reshaped (with a warning) as long as the total
    divides evenly.
    """
    orig_pos = pos
    (_, pos) = tag(s, skip(s, pos, MULTISPACE), b"[")
    (saw_newline, pos) = check_for_newline(s, pos)
    rows = []
    while True:
        (row, pos) = read_row(s, pos)
        if len(row) > 0:
            rows.append(row)
        (newline, pos) = check_for_newline(s, pos)
        if not newline:
            break
        saw_newline = True
    (_, pos) = tag(s, pos, b"]")
    if not saw_newline:
        raise ParseError("matrix spanning more than one line", s, orig_pos)
    pos = skip(s, pos, MULTISPACE)

    num_rows = len(rows)
    if num_rows == 0:
        return (np.zeros((0, 0), dtype=np.float32), pos)
    data = np.array([f for row in rows for f in row], dtype=np.float32)
    if data.size % num_rows != 0:
        raise ParseError("matrix rows of equal length", s, orig_pos)
    num_cols = data.size // num_rows
    if any(len(row) != num_cols for row in rows):
        logger.warning("Matrix at position {0} has rows of unequal length; "
                       "reshaping {1} elements to {2}x{3}".format(
                           orig_pos, data.size, num_rows, num_cols))
    return (data.reshape(num_rows, num_cols), pos)


_open_bracket = spaced(lambda s, pos: tag(s, pos, b"["))
_close_bracket = spaced(lambda s, pos: tag(s, pos, b"]"))


def read_vector(s, pos):
    """Reads a one-line text-format vector like "[ 1.0 2.0 3.0 ]" as a
    1-dimensional float32 array."""
    (_, pos) = _open_bracket(s, pos)
    (row, pos) = read_row(s, pos)
    (_, pos) = _close_bracket(s, pos)
    return (np.array(row, dtype=np.float32), pos)


def read_scalar(s, pos):
    """Reads a scalar as a 0-dimensional array.  The alternatives are tried
    in a fixed order: float, integer, then the booleans F and T.  Because the
    float grammar accepts bare integers, "3" comes back as float32."""
    try:
        (f, new_pos) = read_float(s, pos)
        return (np.array(f, dtype=np.float32), new_pos)
    except ParseError:
        pass
    try:
        (i, new_pos) = read_integer(s, pos)
        return (np.array(i, dtype=np.int32), new_pos)
    except ParseError:
        pass
    if s.startswith(b"F", pos):
        return (np.array(False), pos + 1)
    if s.startswith(b"T", pos):
        return (np.array(True), pos + 1)
    raise ParseError("scalar (float, integer, F or T)", s, pos)


def read_tensor(s, pos):
    """Reads a matrix, a vector or a scalar, whichever matches first."""
    for read_func in (read_matrix, read_vector, read_scalar):
        try:
            return read_func(s, pos)
        except ParseError:
            continue
    raise ParseError("matrix, vector or scalar", s, pos)
