# remarkscope/tests/test_diff.py
from __future__ import annotations
from remarkscope.diff import (
    DiffOptions,
    compute_arg_diff_at_remark,
    compute_diff,
    compute_diff_at_loc,
    diff_remarks,
)
from remarkscope.filters import FilterMatcher, Filters
from remarkscope.index import build_location_index
from remarkscope.remark import NO_LOCATION, Argument, Location, LocationKey, Remark, RemarkType
from utility import arg_at, make_remark

LOC = LocationKey("a.c", "f", 10, 1)


# Same header, different argument value: one pair with the differing values on each side.
def test_cost_change_reported_as_same_header_pair():
    a = [make_remark(args=[("cost", "5")])]
    b = [make_remark(args=[("cost", "7")])]
    diffs = diff_remarks(a, b)

    assert len(diffs) == 1
    d = diffs[0]
    assert d.location == LOC
    assert d.only_a == [] and d.only_b == []
    assert len(d.has_same_header) == 1
    pair = d.has_same_header[0]
    assert pair.only_a == [Argument("cost", "5")]
    assert pair.only_b == [Argument("cost", "7")]
    assert pair.in_both == []
    assert pair.type_diff is None


# Different names at one location: nothing pairs, each side keeps its own remark.
def test_different_names_are_one_sided():
    a = [make_remark(name="inline")]
    b = [make_remark(name="hoist")]
    d = compute_diff_at_loc(a, b, location=LOC)
    assert d.has_same_header == []
    assert [r.name for r in d.only_a] == ["inline"]
    assert [r.name for r in d.only_b] == ["hoist"]


# Diffing a run against itself yields only empty locations.
def test_self_diff_is_empty():
    run = [
        make_remark(args=[("cost", "5")]),
        make_remark(name="hoist", pass_name="licm", loc=("b.c", 2, 3)),
        make_remark(name="vectorize", rtype=RemarkType.MISSED, loc=None),
    ]
    diffs = diff_remarks(run, run)
    assert diffs
    assert all(d.is_empty() for d in diffs)


# Swapping A and B mirrors every one-sided list and argument diff.
def test_diff_is_symmetric():
    a = [
        make_remark(args=[("cost", "5")]),
        make_remark(name="t", rtype=RemarkType.PASSED),
        make_remark(name="only-a", loc=("x.c", 1, 1)),
    ]
    b = [
        make_remark(args=[("cost", "7")]),
        make_remark(name="t", rtype=RemarkType.MISSED),
        make_remark(name="only-b", loc=("y.c", 1, 1)),
    ]
    ab = {d.location: d for d in diff_remarks(a, b)}
    ba = {d.location: d for d in diff_remarks(b, a)}

    assert set(ab) == set(ba)
    for key in ab:
        assert ab[key].only_a == ba[key].only_b
        assert ab[key].only_b == ba[key].only_a
        assert len(ab[key].has_same_header) == len(ba[key].has_same_header)
        for p, q in zip(ab[key].has_same_header, ba[key].has_same_header):
            assert p.only_a == q.only_b
            assert p.only_b == q.only_a
            assert p.in_both == q.in_both
            if p.type_diff is not None:
                assert q.type_diff == (p.type_diff[1], p.type_diff[0])
    assert ab[LOC].has_same_header[1].type_diff == (RemarkType.PASSED, RemarkType.MISSED)


# Exact matches drop out; duplicates of a matched remark are matched as well.
def test_exact_match_by_value_absorbs_duplicates():
    r = make_remark(args=[("cost", "5")])
    d = compute_diff_at_loc([r, r], [r], location=LOC)
    assert d.is_empty()


# Header pass pairs each A remark with the first free B remark only.
def test_header_pass_is_first_fit():
    a = [make_remark(args=[("cost", "1")])]
    b = [make_remark(args=[("cost", "2")]), make_remark(args=[("cost", "3")])]
    d = compute_diff_at_loc(a, b, location=LOC)

    assert len(d.has_same_header) == 1
    assert d.has_same_header[0].only_b == [Argument("cost", "2")]
    assert d.only_a == []
    assert d.only_b == [make_remark(args=[("cost", "3")])]


# Type change with identical arguments: pair carries (A type, B type) and no argument diff.
def test_type_diff_recorded():
    a = [make_remark(rtype=RemarkType.PASSED, args=[("Callee", "g")])]
    b = [make_remark(rtype=RemarkType.MISSED, args=[("Callee", "g")])]
    d = compute_diff_at_loc(a, b, location=LOC)
    pair = d.has_same_header[0]
    assert pair.type_diff == (RemarkType.PASSED, RemarkType.MISSED)
    assert not pair.has_arg_diff()
    assert pair.in_both == [Argument("Callee", "g")]


# Arguments compare by position; the longer side's tail is one-sided.
def test_arg_diff_is_positional_with_tail():
    ra = make_remark(args=[("Callee", "g"), ("cost", "5"), ("threshold", "10")])
    rb = make_remark(args=[("Callee", "g"), ("cost", "6")])
    pair = compute_arg_diff_at_remark(ra, rb)
    assert pair.in_both == [Argument("Callee", "g")]
    assert pair.only_a == [Argument("cost", "5"), Argument("threshold", "10")]
    assert pair.only_b == [Argument("cost", "6")]


# Reordered arguments show up as differences.
def test_arg_diff_reordered_arguments_differ():
    ra = make_remark(args=[("x", "1"), ("y", "2")])
    rb = make_remark(args=[("y", "2"), ("x", "1")])
    pair = compute_arg_diff_at_remark(ra, rb)
    assert pair.in_both == []
    assert len(pair.only_a) == 2 and len(pair.only_b) == 2


# Argument debug locations are ignored unless strict comparison is on.
def test_strict_compare_sees_argument_locations():
    base = dict(name="inline", function="f", pass_name="inliner", type=RemarkType.PASSED, loc=Location("a.c", 10, 1))
    ra = Remark(args=(arg_at("Callee", "g", "g.h", 3),), **base)
    rb = Remark(args=(arg_at("Callee", "g", "g.h", 4),), **base)

    assert compute_diff_at_loc([ra], [rb], DiffOptions(), location=LOC).is_empty()

    d = compute_diff_at_loc([ra], [rb], DiffOptions(strict_compare=True), location=LOC)
    assert len(d.has_same_header) == 1
    assert d.has_same_header[0].only_a[0].loc == Location("g.h", 3, 0)
    assert d.has_same_header[0].only_b[0].loc == Location("g.h", 4, 0)


# only_show_common: one-sided lists are always empty, pairs still reported.
def test_only_show_common_drops_one_sided():
    a = [make_remark(args=[("cost", "5")]), make_remark(name="extra")]
    b = [make_remark(args=[("cost", "7")])]
    d = compute_diff_at_loc(a, b, DiffOptions(only_show_common=True), location=LOC)
    assert d.only_a == [] and d.only_b == []
    assert len(d.has_same_header) == 1


# only_show_different: pairs are skipped, but paired remarks do not reappear as one-sided.
def test_only_show_different_drops_pairs():
    a = [make_remark(args=[("cost", "5")]), make_remark(name="extra")]
    b = [make_remark(args=[("cost", "7")])]
    d = compute_diff_at_loc(a, b, DiffOptions(only_show_different=True), location=LOC)
    assert d.has_same_header == []
    assert [r.name for r in d.only_a] == ["extra"]
    assert d.only_b == []


# show_type_diff_only keeps pairs whose type changed.
def test_show_type_diff_only():
    a = [make_remark(name="t", rtype=RemarkType.PASSED), make_remark(name="g", args=[("cost", "1")])]
    b = [make_remark(name="t", rtype=RemarkType.MISSED), make_remark(name="g", args=[("cost", "2")])]
    d = compute_diff_at_loc(a, b, DiffOptions(show_type_diff_only=True), location=LOC)
    assert [p.base.name for p in d.has_same_header] == ["t"]


# show_arg_diff_only keeps same-type pairs whose arguments changed.
def test_show_arg_diff_only():
    a = [make_remark(name="t", rtype=RemarkType.PASSED), make_remark(name="g", args=[("cost", "1")])]
    b = [make_remark(name="t", rtype=RemarkType.MISSED), make_remark(name="g", args=[("cost", "2")])]
    d = compute_diff_at_loc(a, b, DiffOptions(show_arg_diff_only=True), location=LOC)
    assert [p.base.name for p in d.has_same_header] == ["g"]


# Both narrowing flags together keep the union of what each keeps.
def test_type_and_arg_narrowing_union():
    a = [make_remark(name="t", rtype=RemarkType.PASSED), make_remark(name="g", args=[("cost", "1")])]
    b = [make_remark(name="t", rtype=RemarkType.MISSED), make_remark(name="g", args=[("cost", "2")])]
    opts = DiffOptions(show_type_diff_only=True, show_arg_diff_only=True)
    d = compute_diff_at_loc(a, b, opts, location=LOC)
    assert sorted(p.base.name for p in d.has_same_header) == ["g", "t"]


# compute_diff covers the union of keys, A's order first; a key on one side only is fully one-sided.
def test_compute_diff_union_of_locations():
    ia = build_location_index([make_remark(loc=("a.c", 1, 1)), make_remark(loc=("a.c", 2, 1))])
    ib = build_location_index([make_remark(loc=("b.c", 1, 1)), make_remark(loc=("a.c", 1, 1))])
    diffs = compute_diff(ia, ib)

    assert [d.location.file for d in diffs] == ["a.c", "a.c", "b.c"]
    assert diffs[0].is_empty()
    assert len(diffs[1].only_a) == 1 and diffs[1].only_b == []
    assert diffs[2].only_a == [] and len(diffs[2].only_b) == 1


# Remarks without a location are compared under the sentinel key.
def test_unlocated_remarks_share_sentinel_location():
    a = [make_remark(function="f", loc=None)]
    b = [make_remark(function="g", loc=None)]
    diffs = diff_remarks(a, b)
    assert [d.location for d in diffs] == [NO_LOCATION]
    assert len(diffs[0].only_a) == 1 and len(diffs[0].only_b) == 1


# Filters are applied to both runs before diffing.
def test_diff_remarks_applies_filters():
    a = [make_remark(name="inline", args=[("cost", "5")]), make_remark(name="noise")]
    b = [make_remark(name="inline", args=[("cost", "7")])]
    f = Filters(remark_name=FilterMatcher.literal("inline"))
    d = diff_remarks(a, b, f)[0]
    assert d.only_a == []
    assert len(d.has_same_header) == 1
