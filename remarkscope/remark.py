# remarkscope/remark.py
from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional, Tuple

_INT_PAT = re.compile(r"-?[0-9]+")


class RemarkType(Enum):
    UNKNOWN = "Unknown"
    PASSED = "Passed"
    MISSED = "Missed"
    ANALYSIS = "Analysis"
    ANALYSIS_FP_COMMUTE = "AnalysisFPCommute"
    ANALYSIS_ALIASING = "AnalysisAliasing"
    FAILURE = "Failure"

    def __str__(self) -> str:
        return self.value


# Accepts both the display name ("Missed") and the YAML tag form ("!Missed").
_TYPE_LOOKUP = {t.value.lower(): t for t in RemarkType}


def parse_remark_type(raw: Any) -> RemarkType:
    if isinstance(raw, RemarkType):
        return raw
    s = str(raw or "").strip().lstrip("!").lower()
    try:
        return _TYPE_LOOKUP[s]
    except KeyError:
        raise ValueError(f"Unknown remark type '{raw}'. Allowed: {sorted(t.value for t in RemarkType)}") from None


@dataclass(frozen=True)
class Location:
    file: str
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Argument:
    """
    One key/value argument of a remark.
    Equality looks at key and value only; ``loc`` is the optional debug
    location some arguments carry and only matters under strict comparison.
    """
    key: str
    value: str
    loc: Optional[Location] = field(default=None, compare=False)

    def is_int(self) -> bool:
        return _INT_PAT.fullmatch(self.value) is not None

    def as_int(self) -> Optional[int]:
        return int(self.value) if self.is_int() else None

    def compare_key(self, strict: bool = False) -> Tuple[Any, ...]:
        if strict:
            return (self.key, self.value, self.loc)
        return (self.key, self.value)

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"


@dataclass(frozen=True)
class Remark:
    name: str
    function: str
    pass_name: str
    type: RemarkType = RemarkType.UNKNOWN
    loc: Optional[Location] = None
    args: Tuple[Argument, ...] = ()

    def header(self) -> Tuple[str, str, str]:
        return (self.name, self.function, self.pass_name)

    def has_same_header(self, other: "Remark") -> bool:
        return self.header() == other.header()

    def compare_key(self, strict: bool = False) -> Tuple[Any, ...]:
        """Identity used by the exact-match pass of the diff."""
        return (
            self.name,
            self.function,
            self.pass_name,
            self.type,
            tuple(a.compare_key(strict) for a in self.args),
        )

    def int_arg(self, key: str) -> Optional[int]:
        """Integer value of the first argument named ``key`` whose value is an integer."""
        for a in self.args:
            if a.key == key and a.is_int():
                return a.as_int()
        return None


class LocationKey(NamedTuple):
    """(file, function, line, column). The all-empty key means "no location known"."""
    file: str = ""
    function: str = ""
    line: int = 0
    column: int = 0

    @classmethod
    def for_remark(cls, remark: Remark) -> "LocationKey":
        if remark.loc is None:
            return NO_LOCATION
        return cls(remark.loc.file, remark.function, remark.loc.line, remark.loc.column)

    def is_unknown(self) -> bool:
        return self == NO_LOCATION


NO_LOCATION = LocationKey()
