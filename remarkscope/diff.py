# remarkscope/diff.py
"""
Location-by-location diff of two remark runs.

Both runs are bucketed by LocationKey. Within one location, remarks are matched
in two passes:

  1. exact match: a remark equal to some remark on the other side is "found"
     and drops out of the result;
  2. header match: every remaining A remark is paired with the first remaining
     B remark sharing its (name, function, pass) header. The pair is reported
     with its type and argument differences.

Whatever is left is reported as present only in A or only in B.

Arguments of a header-matched pair are compared positionally, index by index.
Reordered arguments therefore show up as differences.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Set, Tuple

from remarkscope import logging as slog
from .filters import Filters
from .index import LocationIndex, build_location_index, union_keys
from .remark import NO_LOCATION, Argument, LocationKey, Remark, RemarkType


@dataclass(frozen=True)
class DiffOptions:
    # compare argument debug locations too
    strict_compare: bool = False
    # drop the only-in-A / only-in-B lists
    only_show_common: bool = False
    # drop header-matched pairs
    only_show_different: bool = False
    # keep header-matched pairs whose type differs
    show_type_diff_only: bool = False
    # keep header-matched pairs with equal type and differing arguments
    show_arg_diff_only: bool = False


@dataclass
class DiffAtRemark:
    base: Remark
    type_diff: Optional[Tuple[RemarkType, RemarkType]] = None
    only_a: List[Argument] = field(default_factory=list)
    only_b: List[Argument] = field(default_factory=list)
    in_both: List[Argument] = field(default_factory=list)

    def has_arg_diff(self) -> bool:
        return bool(self.only_a or self.only_b)


@dataclass
class DiffAtLocation:
    location: LocationKey = NO_LOCATION
    only_a: List[Remark] = field(default_factory=list)
    only_b: List[Remark] = field(default_factory=list)
    has_same_header: List[DiffAtRemark] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.only_a or self.only_b or self.has_same_header)


def compute_arg_diff_at_remark(ra: Remark, rb: Remark, *, strict: bool = False) -> DiffAtRemark:
    diff = DiffAtRemark(base=ra)
    common = min(len(ra.args), len(rb.args))
    for a, b in zip(ra.args[:common], rb.args[:common]):
        if a.compare_key(strict) == b.compare_key(strict):
            diff.in_both.append(a)
        else:
            diff.only_a.append(a)
            diff.only_b.append(b)

    # tail of the longer list
    diff.only_a.extend(ra.args[common:])
    diff.only_b.extend(rb.args[common:])

    if ra.type != rb.type:
        diff.type_diff = (ra.type, rb.type)
    return diff


def _keep_pair(d: DiffAtRemark, options: DiffOptions) -> bool:
    if not (options.show_type_diff_only or options.show_arg_diff_only):
        return True
    if options.show_type_diff_only and d.type_diff is not None:
        return True
    if options.show_arg_diff_only and d.type_diff is None and d.has_arg_diff():
        return True
    return False


def compute_diff_at_loc(
    remarks_a: List[Remark],
    remarks_b: List[Remark],
    options: Optional[DiffOptions] = None,
    location: LocationKey = NO_LOCATION,
) -> DiffAtLocation:
    options = options or DiffOptions()
    strict = options.strict_compare
    out = DiffAtLocation(location=location)

    # "found" is tracked by value: duplicates of a matched remark are matched too
    found: Set[Tuple[Any, ...]] = set()
    for ra in remarks_a:
        ka = ra.compare_key(strict)
        for rb in remarks_b:
            if ka == rb.compare_key(strict):
                found.add(ka)
                break

    pairs: List[Tuple[Remark, Remark]] = []
    for ra in remarks_a:
        ka = ra.compare_key(strict)
        if ka in found:
            continue
        for rb in remarks_b:
            kb = rb.compare_key(strict)
            if kb in found:
                continue
            if ra.has_same_header(rb):
                pairs.append((ra, rb))
                found.add(ka)
                found.add(kb)
                break

    if not options.only_show_common:
        out.only_a = [r for r in remarks_a if r.compare_key(strict) not in found]
        out.only_b = [r for r in remarks_b if r.compare_key(strict) not in found]

    if options.only_show_different:
        return out

    for ra, rb in pairs:
        d = compute_arg_diff_at_remark(ra, rb, strict=strict)
        if _keep_pair(d, options):
            out.has_same_header.append(d)
    return out


def compute_diff(a: LocationIndex, b: LocationIndex, options: Optional[DiffOptions] = None) -> List[DiffAtLocation]:
    """One DiffAtLocation per key in the union of both indexes, A's keys first."""
    options = options or DiffOptions()
    out: List[DiffAtLocation] = []
    for key in union_keys(a, b):
        out.append(compute_diff_at_loc(a.get(key), b.get(key), options, location=key))
    changed = sum(1 for d in out if not d.is_empty())
    slog.log_debug(f"diff: {changed}/{len(out)} location(s) differ")
    return out


def diff_remarks(
    records_a: Iterable[Remark],
    records_b: Iterable[Remark],
    filters: Optional[Filters] = None,
    options: Optional[DiffOptions] = None,
) -> List[DiffAtLocation]:
    """Index both record streams and diff them. Source failures propagate unchanged."""
    index_a = build_location_index(records_a, filters)
    index_b = build_location_index(records_b, filters)
    return compute_diff(index_a, index_b, options)
