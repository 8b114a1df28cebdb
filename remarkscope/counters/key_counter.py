# remarkscope/counters/key_counter.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence

from remarkscope import logging as slog
from ..filters import FilterMatcher, Filters
from ..remark import Remark
from .interface import Counter, CountOptions, CountTable, GroupBy, group_by_to_str
from .registry import register


class KeyCounter(Counter):
    """
    Sums integer-valued arguments per group.

    Two passes over the same input:
      - prepare() discovers every argument key that matches one of the key
        matchers and carries an integer value, assigning each a column in
        first-seen order;
      - collect() adds each remark's integer values into its group's row.

    A remark contributes the value of the first integer-valued argument per
    key; later duplicates of the same key are ignored.
    """

    two_pass = True

    def __init__(self, group_by: GroupBy = GroupBy.PER_SOURCE, keys: Sequence[FilterMatcher] = ()):
        super().__init__(group_by)
        self.keys: List[FilterMatcher] = list(keys) or [FilterMatcher.regex(".*")]
        self.key_columns: Dict[str, int] = {}
        self.counts: Dict[str, List[int]] = {}

    @classmethod
    def from_options(cls, options: CountOptions) -> "KeyCounter":
        return cls(options.group_by, options.key_matchers())

    def discover_keys(self, records: Iterable[Remark], filters: Optional[Filters] = None) -> None:
        for remark in records:
            if filters is not None and not filters.filter_remark(remark):
                continue
            for matcher in self.keys:
                for arg in remark.args:
                    if arg.key not in self.key_columns and matcher.match(arg.key) and arg.is_int():
                        self.key_columns[arg.key] = len(self.key_columns)
        slog.log_debug(f"key counter: discovered {len(self.key_columns)} key(s): {list(self.key_columns)}")

    prepare = discover_keys

    def collect(self, remark: Remark) -> None:
        group = self.get_group_by_key(remark)
        if group is None:
            return
        row = self.counts.setdefault(group, [0] * len(self.key_columns))
        for key, idx in self.key_columns.items():
            val = remark.int_arg(key)
            if val is not None:
                row[idx] += val

    def table(self) -> CountTable:
        return CountTable(
            header=[group_by_to_str(self.group_by), *self.key_columns.keys()],
            rows=[[group, *row] for group, row in self.counts.items()],
        )


register("key", KeyCounter)
