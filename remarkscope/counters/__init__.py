# remarkscope/counters/__init__.py
from __future__ import annotations
from typing import Iterable, Optional

from ..filters import Filters
from ..remark import Remark
from .interface import Counter, CountOptions, CountTable, GroupBy, group_by_to_str, parse_group_by
from .registry import get as get_counter, available
from .remark_counter import RemarkCounter
from .key_counter import KeyCounter


def count_remarks(
    records: Iterable[Remark],
    filters: Optional[Filters] = None,
    options: Optional[CountOptions] = None,
) -> Counter:
    """
    Run the counter selected by ``options.count_by`` over ``records``.
    Two-pass counters get the input materialised once and scanned twice.
    """
    options = options or CountOptions()
    cls = get_counter(options.count_by)
    if cls is None:
        raise ValueError(f"Unknown count-by '{options.count_by}'. Allowed: {sorted(available())}")
    counter = cls.from_options(options)

    if cls.two_pass:
        records = list(records)
        counter.prepare(records, filters)

    for remark in records:
        if filters is None or filters.filter_remark(remark):
            counter.collect(remark)
    return counter


__all__ = [
    "Counter",
    "CountOptions",
    "CountTable",
    "GroupBy",
    "KeyCounter",
    "RemarkCounter",
    "count_remarks",
    "get_counter",
    "group_by_to_str",
    "parse_group_by",
]
