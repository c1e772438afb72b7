# ProgressParser.py
"""
Split training progress text into per-run loss sequences.

Recognized lines (everything else is ignored):

    0.693147 ...                <- iteration line, leading number is the loss
    average loss = 0.412345     <- run summary, closes the current run

Several logs concatenated on one stream are split into one run per
summary line. A trailing run without a summary line is kept as well.
"""

import collections
import fileinput
import re

import numpy as np

from lossplot.Configurations import TransformMode
from lossplot.LossTransform import transform
from lossplot.errors import InputFileError, NoProgressDataError


ITERATION = "iteration"
SUMMARY = "summary"
UNRECOGNIZED = "unrecognized"

LineEvent = collections.namedtuple("LineEvent", ["kind", "value"])

_UNRECOGNIZED = LineEvent(UNRECOGNIZED, None)

# Evaluated in order, first match wins
_LINE_RULES = (
    (ITERATION, re.compile(r"^([0-9.]+)")),
    (SUMMARY, re.compile(r"^average loss\s*=\s*([0-9.]+)")),
)


def classify_line(line):
    for kind, pattern in _LINE_RULES:
        m = pattern.match(line)
        if m is None:
            continue
        try:
            value = float(m.group(1))
        except ValueError:
            # "..." or "1.2.3" look numeric to the pattern only
            return _UNRECOGNIZED
        return LineEvent(kind, value)
    return _UNRECOGNIZED


def _snapshot(values):
    seq = np.array(values, dtype=np.float64)
    seq.setflags(write=False)
    return seq


def parse(lines, mode=TransformMode.IDENTITY):
    """
    lines: iterable of text lines, in order
    returns: list of read-only float64 arrays, one per run, none empty
    """
    runs = []
    current = []

    for line in lines:
        event = classify_line(line)
        if event.kind == UNRECOGNIZED:
            continue

        current.append(transform(event.value, mode))

        if event.kind == SUMMARY:
            runs.append(_snapshot(current))
            current = []

    # Truncated log: last run never reached its summary line
    if current:
        runs.append(_snapshot(current))

    if len(runs) == 0:
        raise NoProgressDataError("No progress data found in input")

    return runs


def parse_files(paths, mode=TransformMode.IDENTITY):
    """Parse the concatenation of paths, or standard input when paths is empty."""
    # Stray non-UTF-8 bytes are replaced rather than aborting the whole log
    try:
        with fileinput.input(
            files=paths or ("-",), encoding="utf-8", errors="replace"
        ) as f:
            return parse(f, mode)
    except OSError as e:
        raise InputFileError(
            "Cannot read %s: %s" % (e.filename or "input", e.strerror or e)
        ) from e
