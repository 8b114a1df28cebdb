# remarkscope/reporting/html.py
from __future__ import annotations
import re
from typing import Any, List, Optional, Sequence

from dominate import document, tags
from dominate.util import raw

from ..counters import CountTable
from ..diff import DiffAtLocation, DiffOptions
from ..remark import LocationKey, Remark

_STYLE = """
body { font-family: sans-serif; margin: 1.5em; }
.report-table { border-collapse: collapse; margin-bottom: 1em; }
.report-table th, .report-table td { border: 1px solid #ccc; padding: 0.25em 0.6em; text-align: left; }
.report-table th { background: #f0f0f0; }
.only-a { color: #a00; }
.only-b { color: #060; }
"""

_id_pat = re.compile(r"[^A-Za-z0-9_-]+")
def safe_id(s: str) -> str:
    return _id_pat.sub("_", s)


def render_table_block(headers: List[str], rows: List[List[Any]]):
    """Render a generic table block."""
    container = tags.div(_class="table-container")

    with container:
        t = tags.table(_class="report-table")
        with t:
            with tags.thead():
                with tags.tr():
                    for h in headers:
                        tags.th(str(h))

            with tags.tbody():
                for r in rows or []:
                    cells = r if isinstance(r, (list, tuple)) else [r]
                    with tags.tr():
                        for c in cells:
                            # (text, css class) pairs style a single cell
                            if isinstance(c, tuple):
                                text, cls = c
                                tags.td(str(text), cls=cls)
                            else:
                                tags.td(str(c))
    return container


def _args_text(args) -> str:
    return ", ".join(str(a) for a in args)


def _remark_row(side: str, r: Remark) -> List[Any]:
    return [(side, "only-a" if side == "A" else "only-b"),
            r.name, r.pass_name, r.type.value, _args_text(r.args)]


def _location_title(loc: LocationKey) -> str:
    if loc.is_unknown():
        return "<no location>"
    return f"{loc.file}:{loc.function}  Ln {loc.line} Col {loc.column}"


def render_location_card(d: DiffAtLocation, idx: int, *, options: DiffOptions):
    title = _location_title(d.location)
    tags.h2(title, id=f"loc-{idx}-{safe_id(title)}")

    if not options.only_show_common and (d.only_a or d.only_b):
        tags.h3("Present on one side only")
        rows = [_remark_row("A", r) for r in d.only_a] + [_remark_row("B", r) for r in d.only_b]
        render_table_block(["Side", "Name", "Pass", "Type", "Args"], rows)

    if d.has_same_header:
        tags.h3("Same header, different type or arguments")
        rows = []
        for h in d.has_same_header:
            type_cell = (f"{h.type_diff[0].value} → {h.type_diff[1].value}"
                         if h.type_diff is not None else h.base.type.value)
            rows.append([h.base.name, h.base.pass_name, type_cell,
                         (_args_text(h.only_a), "only-a"),
                         (_args_text(h.only_b), "only-b"),
                         _args_text(h.in_both)])
        render_table_block(["Name", "Pass", "Type", "Args only at A", "Args only at B", "Args in both"], rows)
    tags.hr()


def _new_document(title: str, subtitle_lines: Sequence[str]) -> document:
    doc = document(title=title)
    with doc.head:
        tags.meta(charset="utf-8")
        tags.style(raw(_STYLE))
    with doc:
        tags.h1(title)
        for line in subtitle_lines:
            tags.p(line)
    return doc


def render_diff_html(
    diffs: Sequence[DiffAtLocation],
    *,
    file_a: str,
    file_b: str,
    options: Optional[DiffOptions] = None,
) -> str:
    options = options or DiffOptions()
    changed = [d for d in diffs if not d.is_empty()]
    doc = _new_document("Remark diff", [f"A: {file_a}", f"B: {file_b}"])
    with doc:
        tags.p(f"{len(changed)} of {len(diffs)} location(s) differ.")
        if not changed:
            tags.p("No differences.")
        for idx, d in enumerate(changed):
            render_location_card(d, idx, options=options)
    return str(doc)


def render_count_html(table: CountTable, *, source: str = "") -> str:
    doc = _new_document("Remark count", [f"Input: {source}"] if source else [])
    with doc:
        render_table_block(list(table.header), [list(r) for r in table.rows])
    return str(doc)
