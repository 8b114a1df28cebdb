# remarkscope/counters/interface.py
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from ..filters import FilterMatcher, Filters
from ..remark import Remark


class GroupBy(Enum):
    TOTAL = "total"
    PER_SOURCE = "source"
    PER_FUNCTION = "function"
    PER_FUNCTION_WITH_DEBUG_LOC = "function-with-loc"


_GROUP_BY_NAMES = {
    GroupBy.TOTAL: "Total",
    GroupBy.PER_SOURCE: "Source",
    GroupBy.PER_FUNCTION: "Function",
    GroupBy.PER_FUNCTION_WITH_DEBUG_LOC: "FunctionWithDebugLoc",
}


def group_by_to_str(group_by: GroupBy) -> str:
    return _GROUP_BY_NAMES[group_by]


def parse_group_by(raw: Union[str, GroupBy]) -> GroupBy:
    if isinstance(raw, GroupBy):
        return raw
    try:
        return GroupBy(str(raw or "").strip().lower())
    except ValueError:
        raise ValueError(f"Unknown group-by '{raw}'. Allowed: {[g.value for g in GroupBy]}") from None


@dataclass(frozen=True)
class CountOptions:
    count_by: str = "remark-name"
    group_by: GroupBy = GroupBy.PER_SOURCE
    keys: Tuple[str, ...] = ()
    rkeys: Tuple[str, ...] = ()

    def key_matchers(self) -> List[FilterMatcher]:
        """Literal keys win over regex keys; with neither, every key is matched."""
        if self.keys:
            return [FilterMatcher.literal(k) for k in self.keys]
        if self.rkeys:
            return [FilterMatcher.regex(k) for k in self.rkeys]
        return [FilterMatcher.regex(".*")]


@dataclass
class CountTable:
    """Header row plus one row per group; rows[i][0] is the group key."""
    header: List[str]
    rows: List[List[Union[str, int]]] = field(default_factory=list)

    def column(self, name: str) -> List[int]:
        idx = self.header.index(name)
        return [int(r[idx]) for r in self.rows]

    def row(self, group: str) -> Optional[List[Union[str, int]]]:
        for r in self.rows:
            if r[0] == group:
                return r
        return None


class Counter(ABC):
    """
    Accumulates remarks into per-group tallies.
    Callers apply Filters before ``collect``; counters never filter.
    """

    # input must be scanned by prepare() before collect()
    two_pass = False

    def __init__(self, group_by: GroupBy = GroupBy.PER_SOURCE):
        self.group_by = group_by

    @classmethod
    def from_options(cls, options: CountOptions) -> "Counter":
        return cls(options.group_by)

    def prepare(self, records: Iterable[Remark], filters: Optional[Filters] = None) -> None:
        pass

    def get_group_by_key(self, remark: Remark) -> Optional[str]:
        """Group key for ``remark``, or None when the grouping needs a location it lacks."""
        if self.group_by is GroupBy.TOTAL:
            return "Total"
        if self.group_by is GroupBy.PER_FUNCTION:
            return remark.function
        if remark.loc is None:
            return None
        if self.group_by is GroupBy.PER_FUNCTION_WITH_DEBUG_LOC:
            return f"{remark.loc.file}:{remark.function}"
        return remark.loc.file

    @abstractmethod
    def collect(self, remark: Remark) -> None:
        ...

    @abstractmethod
    def table(self) -> CountTable:
        ...
