# remarkscope/configloader.py
from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from remarkscope import logging as slog
from .counters import CountOptions, available as available_counters, parse_group_by
from .diff import DiffOptions
from .filters import FilterSpec
from .remark import parse_remark_type

_SUPPORTED_CONFIG_VERSIONS = {"1"}
_REPORT_STYLES = {"human", "json", "csv", "html"}

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "filters": {
        "remark_name": "",
        "remark_name_regex": "",
        "pass_name": "",
        "pass_name_regex": "",
        "arg": "",
        "arg_regex": "",
        "remark_type": None,
    },
    "diff": {
        "strict_compare": False,
        "only_show_common": False,
        "only_show_different": False,
        "show_type_diff_only": False,
        "show_arg_diff_only": False,
    },
    "count": {
        "count_by": "remark-name",
        "group_by": "source",
        "keys": [],
        "rkeys": [],
    },
    "report": {
        "style": "human",
        "verbose": False,
        "output": "-",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge dicts with 'explicit null clears default' semantics."""
    out = deepcopy(base) if base else {}
    for k, v in (override or {}).items():
        if v is None:
            out[k] = None
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


@dataclass(frozen=True)
class ReportOptions:
    style: str = "human"
    verbose: bool = False
    output: str = "-"


@dataclass(frozen=True)
class RunConfig:
    filters: FilterSpec = field(default_factory=FilterSpec)
    diff: DiffOptions = field(default_factory=DiffOptions)
    count: CountOptions = field(default_factory=CountOptions)
    report: ReportOptions = field(default_factory=ReportOptions)


class ConfigLoader:
    """
    Loads a YAML run configuration:
      config_version: "1"            (optional)
      filters: { remark_name, remark_name_regex, pass_name, pass_name_regex,
                 arg, arg_regex, remark_type }
      diff:    { strict_compare, only_show_common, only_show_different,
                 show_type_diff_only, show_arg_diff_only }
      count:   { count_by: remark-name|key, group_by: source|function|function-with-loc|total,
                 keys: [..], rkeys: [..] }
      report:  { style: human|json|csv|html, verbose, output }

    Every bucket is merged over DEFAULTS; an explicit null resets a value.
    ``overrides`` (same shape) is merged last, which is how CLI flags win.
    Regex validity is checked later, when the filters are built.
    """

    def __init__(self, yaml_path: Optional[str] = None, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            slog.log_err(msg)
            raise ValueError(msg)
        slog.log_warn(msg)

    def _read_yaml(self) -> Dict[str, Any]:
        if not self.yaml_path:
            return {}
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                self._warn_or_raise(f"Config '{self.yaml_path}' is not valid YAML: {e}", fatal=True)
        if not isinstance(raw, dict):
            self._warn_or_raise(f"Config '{self.yaml_path}' must be a mapping.", fatal=True)
        return raw

    def _check_unknown(self, bucket: str, cfg: Dict[str, Any]) -> None:
        unknown = sorted(set(cfg) - set(DEFAULTS[bucket]))
        if unknown:
            self._warn_or_raise(f"{bucket}: unknown option(s) {unknown}. Allowed: {sorted(DEFAULTS[bucket])}")

    def _bool(self, bucket: str, name: str, value: Any) -> bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            self._warn_or_raise(f"{bucket}.{name} must be true/false, got {value!r}.", fatal=True)
        return bool(value)

    def _str(self, value: Any) -> str:
        return "" if value is None else str(value)

    def _str_list(self, bucket: str, name: str, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(x.strip() for x in value.split(",") if x.strip())
        if not isinstance(value, list):
            self._warn_or_raise(f"{bucket}.{name} must be a list or comma separated string.", fatal=True)
        return tuple(str(x) for x in value if x is not None and str(x) != "")

    def _normalize_filters(self, cfg: Dict[str, Any]) -> FilterSpec:
        rtype = cfg.get("remark_type")
        if rtype is not None and str(rtype).strip():
            try:
                rtype = parse_remark_type(rtype).value
            except ValueError as e:
                self._warn_or_raise(f"filters.remark_type: {e}", fatal=True)
        else:
            rtype = None

        for lit, rx in (("remark_name", "remark_name_regex"), ("pass_name", "pass_name_regex"), ("arg", "arg_regex")):
            if cfg.get(lit) and cfg.get(rx):
                slog.log_warn(f"filters: both '{lit}' and '{rx}' set; '{lit}' takes precedence.")

        return FilterSpec(
            remark_name=self._str(cfg.get("remark_name")),
            remark_name_regex=self._str(cfg.get("remark_name_regex")),
            pass_name=self._str(cfg.get("pass_name")),
            pass_name_regex=self._str(cfg.get("pass_name_regex")),
            arg=self._str(cfg.get("arg")),
            arg_regex=self._str(cfg.get("arg_regex")),
            remark_type=rtype,
        )

    def _normalize_diff(self, cfg: Dict[str, Any]) -> DiffOptions:
        return DiffOptions(**{k: self._bool("diff", k, cfg.get(k)) for k in DEFAULTS["diff"]})

    def _normalize_count(self, cfg: Dict[str, Any]) -> CountOptions:
        count_by = str(cfg.get("count_by") or "remark-name").strip().lower()
        if count_by not in available_counters():
            self._warn_or_raise(
                f"count.count_by '{count_by}' is not supported. Allowed: {sorted(available_counters())}",
                fatal=True,
            )
        try:
            group_by = parse_group_by(cfg.get("group_by") or "source")
        except ValueError as e:
            self._warn_or_raise(f"count.group_by: {e}", fatal=True)

        keys = self._str_list("count", "keys", cfg.get("keys"))
        rkeys = self._str_list("count", "rkeys", cfg.get("rkeys"))
        if keys and rkeys:
            slog.log_warn("count: both 'keys' and 'rkeys' set; 'keys' takes precedence.")
        if (keys or rkeys) and count_by != "key":
            slog.log_warn("count: keys are only used with count_by 'key'.")

        return CountOptions(count_by=count_by, group_by=group_by, keys=keys, rkeys=rkeys)

    def _normalize_report(self, cfg: Dict[str, Any]) -> ReportOptions:
        style = str(cfg.get("style") or "human").strip().lower()
        if style not in _REPORT_STYLES:
            self._warn_or_raise(f"report.style must be one of {sorted(_REPORT_STYLES)}, got '{style}'.", fatal=True)
        return ReportOptions(
            style=style,
            verbose=self._bool("report", "verbose", cfg.get("verbose")),
            output=str(cfg.get("output") or "-"),
        )

    def load(self, overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> RunConfig:
        raw = self._read_yaml()

        if "config_version" in raw:
            version = str(raw.get("config_version", "")).strip()
            if version not in _SUPPORTED_CONFIG_VERSIONS:
                self._warn_or_raise(
                    f"Unsupported config_version '{version}'. Supported: {sorted(_SUPPORTED_CONFIG_VERSIONS)}",
                    fatal=True,
                )

        extra = sorted(set(raw) - set(DEFAULTS) - {"config_version"})
        if extra:
            self._warn_or_raise(f"Unknown top-level section(s) {extra}. Allowed: {sorted(DEFAULTS)}")

        merged: Dict[str, Dict[str, Any]] = {}
        for bucket in DEFAULTS:
            section = raw.get(bucket) or {}
            if not isinstance(section, dict):
                self._warn_or_raise(f"Section '{bucket}' must be a mapping.", fatal=True)
            self._check_unknown(bucket, section)
            merged[bucket] = _deep_merge(DEFAULTS[bucket], section)
            merged[bucket] = _deep_merge(merged[bucket], (overrides or {}).get(bucket) or {})

        return RunConfig(
            filters=self._normalize_filters(merged["filters"]),
            diff=self._normalize_diff(merged["diff"]),
            count=self._normalize_count(merged["count"]),
            report=self._normalize_report(merged["report"]),
        )


def describe(config: RunConfig) -> List[str]:
    """One line per non-default option, for -v logging."""
    lines: List[str] = []
    for bucket in ("filters", "diff", "count", "report"):
        value = getattr(config, bucket)
        default = getattr(RunConfig(), bucket)
        for name in DEFAULTS[bucket]:
            v = getattr(value, name)
            if v != getattr(default, name):
                shown = v.value if hasattr(v, "value") else v
                lines.append(f"{bucket}.{name} = {shown}")
    return lines
