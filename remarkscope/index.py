# remarkscope/index.py
from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from remarkscope import logging as slog
from .filters import Filters
from .remark import LocationKey, Remark


class LocationIndex:
    """
    Remarks bucketed by LocationKey.
    Keys iterate in first-seen order; each bucket keeps arrival order.
    """

    def __init__(self) -> None:
        self._buckets: Dict[LocationKey, List[Remark]] = {}

    def add(self, remark: Remark) -> LocationKey:
        key = LocationKey.for_remark(remark)
        self._buckets.setdefault(key, []).append(remark)
        return key

    def get(self, key: LocationKey) -> List[Remark]:
        return list(self._buckets.get(key, []))

    def keys(self) -> List[LocationKey]:
        return list(self._buckets.keys())

    def items(self) -> Iterator[Tuple[LocationKey, List[Remark]]]:
        return iter(self._buckets.items())

    def remark_count(self) -> int:
        return sum(len(v) for v in self._buckets.values())

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __iter__(self) -> Iterator[LocationKey]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)


def build_location_index(records: Iterable[Remark], filters: Optional[Filters] = None) -> LocationIndex:
    """Consume ``records`` fully and index the ones passing ``filters``."""
    index = LocationIndex()
    seen = 0
    for remark in records:
        seen += 1
        if filters is not None and not filters.filter_remark(remark):
            continue
        index.add(remark)
    slog.log_debug(f"indexed {index.remark_count()}/{seen} remark(s) at {len(index)} location(s)")
    return index


def union_keys(a: LocationIndex, b: LocationIndex) -> List[LocationKey]:
    """Keys of ``a`` in order, then keys only ``b`` has, in order."""
    out = a.keys()
    known = set(out)
    for k in b:
        if k not in known:
            known.add(k)
            out.append(k)
    return out
