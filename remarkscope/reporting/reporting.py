# remarkscope/reporting/reporting.py
from __future__ import annotations
import csv
import io
import json
import sys
from typing import Any, Dict, List, Sequence

from ..counters import CountTable
from ..diff import DiffAtLocation, DiffAtRemark, DiffOptions
from ..errors import OutputSinkFailure
from ..remark import Argument, LocationKey, Remark
from .html import render_count_html, render_diff_html

# --------------------------- JSON ---------------------------


def args_to_json(args: Sequence[Argument]) -> List[Dict[str, str]]:
    return [{a.key: a.value} for a in args]


def location_to_json(loc: LocationKey) -> Dict[str, Any]:
    return {"File": loc.file, "Function": loc.function, "Line": loc.line, "Column": loc.column}


def remark_to_json(remark: Remark, *, verbose: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "RemarkName": remark.name,
        "FunctionName": remark.function,
        "PassName": remark.pass_name,
        "RemarkType": remark.type.value,
    }
    if verbose:
        out["Args"] = args_to_json(remark.args)
    return out


def diff_at_remark_to_json(d: DiffAtRemark, *, verbose: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "FunctionName": d.base.function,
        "PassName": d.base.pass_name,
        "RemarkName": d.base.name,
    }
    # the type is only shown when both sides agree on it
    if d.type_diff is None:
        out["RemarkType"] = d.base.type.value

    diff: Dict[str, Any] = {}
    if d.type_diff is not None:
        diff["RemarkTypeA"] = d.type_diff[0].value
        diff["RemarkTypeB"] = d.type_diff[1].value
    if d.only_a:
        diff["ArgsAtA"] = args_to_json(d.only_a)
    if d.only_b:
        diff["ArgsAtB"] = args_to_json(d.only_b)
    if verbose:
        out["ArgsInBoth"] = args_to_json(d.in_both)
    out["Diff"] = diff
    return out


def diff_at_location_to_json(d: DiffAtLocation, *, options: DiffOptions, verbose: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {"Location": location_to_json(d.location)}
    if not options.only_show_common:
        out["OnlyA"] = [remark_to_json(r, verbose=verbose) for r in d.only_a]
        out["OnlyB"] = [remark_to_json(r, verbose=verbose) for r in d.only_b]
    out["HasSameHeader"] = [diff_at_remark_to_json(r, verbose=verbose) for r in d.has_same_header]
    return out


def assemble_diff_report(
    diffs: Sequence[DiffAtLocation],
    *,
    file_a: str,
    file_b: str,
    options: DiffOptions | None = None,
    verbose: bool = False,
) -> Dict[str, Any]:
    """JSON-ready diff report; locations without differences are left out."""
    options = options or DiffOptions()
    return {
        "Files": {"A": file_a, "B": file_b},
        "Diff": [diff_at_location_to_json(d, options=options, verbose=verbose) for d in diffs if not d.is_empty()],
    }


# --------------------------- human text ---------------------------

_SEP = "=====\n"
_AT_A = "Only at A >>>>\n"
_AT_B = "Only at B <<<<\n"


def format_header(remark: Remark) -> str:
    return (f"Name: {remark.name}\n"
            f"FunctionName: {remark.function}\n"
            f"PassName: {remark.pass_name}\n")


def format_remark(remark: Remark) -> str:
    text = format_header(remark) + f"Type: {remark.type.value}\n"
    if remark.args:
        text += "Args:\n" + "".join(f"\t{a}\n" for a in remark.args)
    return text


def _block(title: str, items: Sequence[str], sep: str = "\n") -> str:
    if not items:
        return ""
    return title + sep.join(items) + _SEP


def format_diff_at_remark(d: DiffAtRemark) -> str:
    text = format_header(d.base)
    if d.type_diff is not None:
        text += _AT_A + f"Type: {d.type_diff[0].value}\n" + _SEP
        text += _AT_B + f"Type: {d.type_diff[1].value}\n" + _SEP
    text += _block(_AT_A, [f"{a}\n" for a in d.only_a], sep="")
    text += _block(_AT_B, [f"{a}\n" for a in d.only_b], sep="")
    text += "".join(f"{a}\n" for a in d.in_both)
    return text


def format_location(loc: LocationKey) -> str:
    return f"{loc.file}:{loc.function}  Ln {loc.line} Col {loc.column}\n"


def format_diff_at_location(d: DiffAtLocation) -> str:
    text = _block(_AT_A, [format_remark(r) for r in d.only_a])
    text += _block(_AT_B, [format_remark(r) for r in d.only_b])
    if d.has_same_header:
        text += "--- Has the same header ---\n"
        text += "".join(format_diff_at_remark(r) for r in d.has_same_header)
    return text


def format_diff_text(diffs: Sequence[DiffAtLocation]) -> str:
    parts: List[str] = []
    for d in diffs:
        if d.is_empty():
            continue
        parts.append("----------\n" + format_location(d.location) + format_diff_at_location(d))
    return "".join(parts)


# --------------------------- counts ---------------------------


def format_count_csv(table: CountTable) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(table.header)
    for row in table.rows:
        w.writerow(row)
    return buf.getvalue()


def count_table_to_json(table: CountTable) -> Dict[str, Any]:
    return {"header": list(table.header), "rows": [list(r) for r in table.rows]}


# --------------------------- dispatch & output ---------------------------


def render_diff(
    diffs: Sequence[DiffAtLocation],
    *,
    style: str,
    file_a: str,
    file_b: str,
    options: DiffOptions | None = None,
    verbose: bool = False,
) -> str:
    if style == "json":
        report = assemble_diff_report(diffs, file_a=file_a, file_b=file_b, options=options, verbose=verbose)
        return json.dumps(report, indent=2, ensure_ascii=False) + "\n"
    if style == "html":
        return render_diff_html(diffs, file_a=file_a, file_b=file_b, options=options)
    if style in ("human", "csv"):
        return format_diff_text(diffs)
    raise ValueError(f"Unsupported report style for diff: '{style}'")


def render_count(table: CountTable, *, style: str, source: str = "") -> str:
    if style == "json":
        return json.dumps(count_table_to_json(table), indent=2, ensure_ascii=False) + "\n"
    if style == "html":
        return render_count_html(table, source=source)
    if style in ("human", "csv"):
        return format_count_csv(table)
    raise ValueError(f"Unsupported report style for count: '{style}'")


def write_output(text: str, output: str = "-") -> None:
    """Write ``text`` to stdout ('-' or empty) or to a file; failures raise OutputSinkFailure."""
    try:
        if not output or output == "-":
            sys.stdout.write(text)
            sys.stdout.flush()
            return
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise OutputSinkFailure(f"Cannot write output '{output}': {e.strerror or e}") from e
