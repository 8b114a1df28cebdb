# remarkscope/filters.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidPattern
from .remark import Remark, RemarkType, parse_remark_type


class FilterMatcher:
    """
    Matches a string either literally or with a regular expression.

    Literal mode compares against the candidate with surrounding whitespace
    stripped. Regex mode searches anywhere in the candidate (unanchored); anchor
    the pattern with ^...$ for a full match. The regex is compiled on
    construction, so a bad pattern raises InvalidPattern before any remark is
    looked at.
    """

    def __init__(self, pattern: str, is_regex: bool = False):
        self.pattern = pattern
        self.is_regex = is_regex
        self._matcher: Union[str, re.Pattern[str]]
        if is_regex:
            try:
                self._matcher = re.compile(pattern)
            except re.error as e:
                raise InvalidPattern(pattern, str(e)) from e
        else:
            self._matcher = pattern

    @classmethod
    def literal(cls, text: str) -> "FilterMatcher":
        return cls(text, False)

    @classmethod
    def regex(cls, pattern: str) -> "FilterMatcher":
        return cls(pattern, True)

    def match(self, candidate: str) -> bool:
        if isinstance(self._matcher, str):
            return self._matcher == candidate.strip()
        return self._matcher.search(candidate) is not None

    def __repr__(self) -> str:
        kind = "regex" if self.is_regex else "literal"
        return f"FilterMatcher({kind}={self.pattern!r})"


class Filters:
    """
    Predicate over remarks built from optional name, pass, argument and type filters.

    Known limitation: when a type filter is configured it decides the outcome on
    its own and the argument filter is never consulted.
    """

    def __init__(
        self,
        remark_name: Optional[FilterMatcher] = None,
        pass_name: Optional[FilterMatcher] = None,
        arg: Optional[FilterMatcher] = None,
        remark_type: Optional[RemarkType] = None,
    ):
        self.remark_name = remark_name
        self.pass_name = pass_name
        self.arg = arg
        self.remark_type = remark_type

    def is_empty(self) -> bool:
        return self.remark_name is None and self.pass_name is None and self.arg is None and self.remark_type is None

    def filter_remark(self, remark: Remark) -> bool:
        if self.remark_name is not None and not self.remark_name.match(remark.name):
            return False
        if self.pass_name is not None and not self.pass_name.match(remark.pass_name):
            return False
        if self.remark_type is not None:
            return self.remark_type == remark.type
        if self.arg is not None:
            return any(self.arg.match(a.value) for a in remark.args)
        return True

    __call__ = filter_remark


@dataclass(frozen=True)
class FilterSpec:
    """Filter settings as supplied by configuration; empty strings mean "not set"."""
    remark_name: str = ""
    remark_name_regex: str = ""
    pass_name: str = ""
    pass_name_regex: str = ""
    arg: str = ""
    arg_regex: str = ""
    remark_type: Optional[str] = None


def _pick(literal: str, regex: str) -> Optional[FilterMatcher]:
    # literal form wins when both are given
    if literal:
        return FilterMatcher.literal(literal)
    if regex:
        return FilterMatcher.regex(regex)
    return None


def build_filters(spec: Optional[FilterSpec] = None) -> Filters:
    """Compile a FilterSpec. Raises InvalidPattern or ValueError (unknown type) up front."""
    spec = spec or FilterSpec()
    remark_type = parse_remark_type(spec.remark_type) if spec.remark_type else None
    return Filters(
        remark_name=_pick(spec.remark_name, spec.remark_name_regex),
        pass_name=_pick(spec.pass_name, spec.pass_name_regex),
        arg=_pick(spec.arg, spec.arg_regex),
        remark_type=remark_type,
    )
