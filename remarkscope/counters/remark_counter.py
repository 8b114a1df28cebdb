# remarkscope/counters/remark_counter.py
from __future__ import annotations
from typing import Dict

from ..remark import Remark
from .interface import Counter, CountTable, GroupBy, group_by_to_str
from .registry import register


class RemarkCounter(Counter):
    """One tally per remark, grouped by the configured key."""

    def __init__(self, group_by: GroupBy = GroupBy.PER_SOURCE):
        super().__init__(group_by)
        self.counts: Dict[str, int] = {}

    def collect(self, remark: Remark) -> None:
        key = self.get_group_by_key(remark)
        if key is None:
            return
        self.counts[key] = self.counts.get(key, 0) + 1

    def table(self) -> CountTable:
        return CountTable(
            header=[group_by_to_str(self.group_by), "Count"],
            rows=[[k, v] for k, v in self.counts.items()],
        )


register("remark-name", RemarkCounter)
