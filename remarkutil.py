#!/usr/bin/env python3
import sys
import argparse
from typing import Any, Dict, List, Optional

from remarkscope import logging as slog
from remarkscope.configloader import ConfigLoader, RunConfig, describe
from remarkscope.counters import count_remarks
from remarkscope.diff import diff_remarks
from remarkscope.errors import RemarkUtilError
from remarkscope.filters import build_filters
from remarkscope.ingest import JsonRemarkSource
from remarkscope.reporting import render_count, render_diff, write_output


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", default=None, help="YAML run configuration")
    p.add_argument("-o", "--output-file", default=None, help="Output file ('-' for stdout)")
    p.add_argument("--report-style", choices=["human", "json", "csv", "html"], default=None,
                   help="Report output format")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    p.add_argument("--log-file", default=None, help="Also write log messages to this file")

    g = p.add_argument_group("filters")
    g.add_argument("--remark-name", default=None, help="Keep remarks with this exact name")
    g.add_argument("--rremark-name", default=None, help="Keep remarks whose name matches this regex")
    g.add_argument("--pass-name", default=None, help="Keep remarks from this exact pass")
    g.add_argument("--rpass-name", default=None, help="Keep remarks whose pass matches this regex")
    g.add_argument("--filter-arg-by", default=None, help="Keep remarks with an argument value equal to this")
    g.add_argument("--rfilter-arg-by", default=None, help="Keep remarks with an argument value matching this regex")
    g.add_argument("--remark-type", default=None,
                   help="Keep remarks of this type (passed, missed, analysis, ...). "
                        "When set, --filter-arg-by/--rfilter-arg-by are ignored.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Diff and count compiler optimization remarks.")
    sub = p.add_subparsers(dest="command", required=True)

    d = sub.add_parser("diff", help="Diff remarks between two remark files, location by location.")
    d.add_argument("file_a", help="Remarks of run A (JSON)")
    d.add_argument("file_b", help="Remarks of run B (JSON)")
    _add_common_options(d)
    d.add_argument("--verbose-args", action="store_true", default=None,
                   help="Include remark arguments in the report")
    d.add_argument("--strict", dest="strict_compare", action="store_true", default=None,
                   help="Also compare the debug locations attached to arguments")
    d.add_argument("--only-show-common-remarks", dest="only_show_common", action="store_true", default=None,
                   help="Ignore remarks that don't exist in both files")
    d.add_argument("--only-show-different-remarks", dest="only_show_different", action="store_true", default=None,
                   help="Show only remarks that exist exclusively in A or in B")
    d.add_argument("--show-remark-type-diff-only", dest="show_type_diff_only", action="store_true", default=None,
                   help="Only show same-header remarks whose type differs")
    d.add_argument("--show-arg-diff-only", dest="show_arg_diff_only", action="store_true", default=None,
                   help="Only show same-header remarks whose arguments differ")

    c = sub.add_parser("count", help="Count remarks, grouped by source, function or in total.")
    c.add_argument("file", help="Remarks file (JSON)")
    _add_common_options(c)
    c.add_argument("--count-by", choices=["remark-name", "key"], default=None,
                   help="Count remarks, or sum integer values of argument keys")
    c.add_argument("--group-by", choices=["source", "function", "function-with-loc", "total"], default=None,
                   help="Property to group the counts by")
    c.add_argument("--keys", nargs="*", default=None, help="Argument keys to sum (exact)")
    c.add_argument("--rkeys", nargs="*", default=None, help="Argument keys to sum (regex)")
    return p


def _overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """CLI flags that were actually given, in ConfigLoader bucket shape."""
    def given(mapping: Dict[str, Optional[str]]) -> Dict[str, Any]:
        return {k: getattr(args, v) for k, v in mapping.items() if getattr(args, v, None) is not None}

    out: Dict[str, Dict[str, Any]] = {
        "filters": given({
            "remark_name": "remark_name", "remark_name_regex": "rremark_name",
            "pass_name": "pass_name", "pass_name_regex": "rpass_name",
            "arg": "filter_arg_by", "arg_regex": "rfilter_arg_by",
            "remark_type": "remark_type",
        }),
        "report": given({"style": "report_style", "output": "output_file"}),
    }
    if args.command == "diff":
        out["diff"] = given({k: k for k in ("strict_compare", "only_show_common", "only_show_different",
                                            "show_type_diff_only", "show_arg_diff_only")})
        if args.verbose_args:
            out["report"]["verbose"] = True
    else:
        out["count"] = given({"count_by": "count_by", "group_by": "group_by", "keys": "keys", "rkeys": "rkeys"})
    return out


def _load_config(args: argparse.Namespace) -> RunConfig:
    if args.config:
        slog.log_step("Loading config:", args.config)
    cfg = ConfigLoader(args.config).load(overrides=_overrides(args))
    for line in describe(cfg):
        slog.log_debug(f"    {line}")
    return cfg


def run_diff(args: argparse.Namespace, cfg: RunConfig) -> None:
    filters = build_filters(cfg.filters)

    slog.log_step("Reading remarks A:", args.file_a)
    slog.log_step("Reading remarks B:", args.file_b)
    diffs = diff_remarks(JsonRemarkSource(args.file_a), JsonRemarkSource(args.file_b), filters, cfg.diff)

    changed = sum(1 for d in diffs if not d.is_empty())
    slog.log_info(f"    • {changed}/{len(diffs)} location(s) differ")

    text = render_diff(diffs, style=cfg.report.style, file_a=args.file_a, file_b=args.file_b,
                       options=cfg.diff, verbose=cfg.report.verbose)
    slog.log_step("Writing output:", cfg.report.output)
    write_output(text, cfg.report.output)


def run_count(args: argparse.Namespace, cfg: RunConfig) -> None:
    filters = build_filters(cfg.filters)

    slog.log_step("Counting remarks:", f"{args.file} count_by={cfg.count.count_by} group_by={cfg.count.group_by.value}")
    counter = count_remarks(JsonRemarkSource(args.file), filters, cfg.count)
    table = counter.table()
    slog.log_info(f"    • {len(table.rows)} group(s)")

    text = render_count(table, style=cfg.report.style, source=args.file)
    slog.log_step("Writing output:", cfg.report.output)
    write_output(text, cfg.report.output)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    slog.setup_logging(args.verbose, args.log_file)

    try:
        cfg = _load_config(args)
        if args.command == "diff":
            run_diff(args, cfg)
        else:
            run_count(args, cfg)
    except (RemarkUtilError, ValueError, OSError) as e:
        slog.log_err(f"Error: {e}")
        return 1

    slog.log_ok("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
