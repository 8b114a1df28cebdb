# remarkscope/ingest.py
from __future__ import annotations
import json
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import RecordSourceFailure
from .remark import Argument, Location, Remark, parse_remark_type

_REQUIRED_FIELDS = ("Name", "Pass", "Function")


def _parse_location(raw: Any, where: str) -> Optional[Location]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise RecordSourceFailure(f"{where}: DebugLoc must be an object, got {type(raw).__name__}")
    if "File" not in raw:
        raise RecordSourceFailure(f"{where}: DebugLoc missing required field 'File'")
    try:
        return Location(str(raw["File"]), int(raw.get("Line", 0) or 0), int(raw.get("Column", 0) or 0))
    except (TypeError, ValueError) as e:
        raise RecordSourceFailure(f"{where}: DebugLoc line/column must be integers ({e})") from e


def _parse_args(raw: Any, where: str) -> List[Argument]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise RecordSourceFailure(f"{where}: Args must be a list, got {type(raw).__name__}")
    out: List[Argument] = []
    for i, a in enumerate(raw):
        if not isinstance(a, dict) or "Key" not in a or "Value" not in a:
            raise RecordSourceFailure(f"{where}: argument #{i} must be an object with 'Key' and 'Value'")
        out.append(Argument(str(a["Key"]), str(a["Value"]), _parse_location(a.get("DebugLoc"), f"{where} argument #{i}")))
    return out


def remark_from_dict(entry: Any, idx: int = 0, source: str = "<memory>") -> Remark:
    """
    Build one Remark from its plain-JSON form:
      {"Name", "Pass", "Function", "Type"?, "DebugLoc"?: {"File", "Line", "Column"},
       "Args"?: [{"Key", "Value", "DebugLoc"?}, ...]}
    """
    where = f"{source}: entry #{idx}"
    if not isinstance(entry, dict):
        raise RecordSourceFailure(f"{where} is not an object")
    for fname in _REQUIRED_FIELDS:
        if fname not in entry:
            raise RecordSourceFailure(f"{where} missing required field '{fname}'")
    try:
        rtype = parse_remark_type(entry.get("Type", "Unknown"))
    except ValueError as e:
        raise RecordSourceFailure(f"{where}: {e}") from e

    return Remark(
        name=str(entry["Name"]),
        function=str(entry["Function"]),
        pass_name=str(entry["Pass"]),
        type=rtype,
        loc=_parse_location(entry.get("DebugLoc"), where),
        args=tuple(_parse_args(entry.get("Args"), where)),
    )


def remarks_from_dicts(entries: Iterable[Any], source: str = "<memory>") -> Iterator[Remark]:
    for idx, entry in enumerate(entries):
        yield remark_from_dict(entry, idx, source)


class JsonRemarkSource:
    """
    Record source over a JSON file holding a list of remark objects
    (or an object with a "remarks" list).

    Iterating re-reads the file, so the source can be scanned more than once.
    Unreadable files and malformed entries raise RecordSourceFailure; entries
    before the bad one have already been yielded by then.
    """

    def __init__(self, json_path: str):
        self.json_path = json_path

    def _load(self) -> List[Any]:
        try:
            with open(self.json_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise RecordSourceFailure(f"Cannot open file '{self.json_path}': {e.strerror or e}") from e
        except json.JSONDecodeError as e:
            raise RecordSourceFailure(f"'{self.json_path}' is not valid JSON: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("remarks")
        if not isinstance(raw, list):
            raise RecordSourceFailure(f"'{self.json_path}' must hold a list of remarks (or {{\"remarks\": [...]}})")
        return raw

    def __iter__(self) -> Iterator[Remark]:
        return remarks_from_dicts(self._load(), source=self.json_path)


def remark_to_dict(remark: Remark) -> Dict[str, Any]:
    """Inverse of remark_from_dict."""
    out: Dict[str, Any] = {
        "Name": remark.name,
        "Pass": remark.pass_name,
        "Function": remark.function,
        "Type": remark.type.value,
    }
    if remark.loc is not None:
        out["DebugLoc"] = {"File": remark.loc.file, "Line": remark.loc.line, "Column": remark.loc.column}
    if remark.args:
        args = []
        for a in remark.args:
            item: Dict[str, Any] = {"Key": a.key, "Value": a.value}
            if a.loc is not None:
                item["DebugLoc"] = {"File": a.loc.file, "Line": a.loc.line, "Column": a.loc.column}
            args.append(item)
        out["Args"] = args
    return out
