# remarkscope/errors.py
from __future__ import annotations


class RemarkUtilError(Exception):
    """Base class for failures surfaced to the caller of a diff/count run."""


class InvalidPattern(RemarkUtilError, ValueError):
    """A regular expression filter failed to compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Regex: invalid pattern '{pattern}': {reason}")


class RecordSourceFailure(RemarkUtilError):
    """The record source could not produce the next remark."""


class OutputSinkFailure(RemarkUtilError):
    """The rendered report could not be written to its destination."""
