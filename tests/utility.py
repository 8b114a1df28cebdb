# remarkscope/tests/utility.py
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from remarkscope.ingest import remark_to_dict
from remarkscope.remark import Argument, Location, Remark, RemarkType


# -------------------------
# Builders
# -------------------------

# Builds a Remark with short positional defaults; args are (key, value) pairs.
def make_remark(
    name: str = "inline",
    function: str = "f",
    pass_name: str = "inliner",
    rtype: RemarkType = RemarkType.PASSED,
    loc: Optional[Tuple[str, int, int]] = ("a.c", 10, 1),
    args: Sequence[Tuple[str, str]] = (),
) -> Remark:
    return Remark(
        name=name,
        function=function,
        pass_name=pass_name,
        type=rtype,
        loc=Location(*loc) if loc is not None else None,
        args=tuple(Argument(k, v) for k, v in args),
    )


# Builds an Argument carrying its own debug location.
def arg_at(key: str, value: str, file: str, line: int, column: int = 0) -> Argument:
    return Argument(key, value, Location(file, line, column))


# -------------------------
# Files
# -------------------------

# Writes remarks as the plain JSON list read by JsonRemarkSource.
def write_remarks_json(path: Path, remarks: Iterable[Remark]) -> Path:
    path.write_text(json.dumps([remark_to_dict(r) for r in remarks], indent=2), encoding="utf-8")
    return path


# Writes a YAML config mapping to path.
def write_yaml(path: Path, data: Dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


# Loads a JSON file into a dict (fails if the root isn't a mapping).
def load_json(path: Path) -> Dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise AssertionError(f"JSON did not parse into dict: {path}")
    return data


# Parses CSV text produced by format_count_csv into rows of strings.
def csv_rows(text: str) -> List[List[str]]:
    return [line.split(",") for line in text.strip().splitlines()]
