# remarkscope/counters/registry.py
from __future__ import annotations
from typing import Dict, Type
from .interface import Counter

_REGISTRY: Dict[str, Type[Counter]] = {}

def register(name: str, cls: Type[Counter]) -> None:
    key = (name or "").strip().lower()
    if not key:
        raise ValueError("Counter name must be non-empty")
    _REGISTRY[key] = cls

def get(name: str) -> Type[Counter] | None:
    return _REGISTRY.get((name or "").strip().lower())

def available() -> Dict[str, Type[Counter]]:
    return dict(_REGISTRY)
