from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List

from .paths import Step, path_for, key_step, index_step

@dataclass(frozen=True)
class PendingUnit:
    path: str
    source: str

def is_leaf(value: Any) -> bool:
    # empty containers have no children, so they are addressed like scalars
    if isinstance(value, (dict, list)):
        return len(value) == 0
    return True

def flatten(root: Any) -> Dict[str, Any]:
    """
    Map every leaf's path key to its value, in document order.

    Objects are walked in iteration order and arrays by index. Only leaves
    (str/int/float/bool/None and empty containers) appear as values.
    """
    out: Dict[str, Any] = {}

    def walk(o: Any, steps: List[Step]):
        if is_leaf(o):
            out[path_for(steps)] = o
        elif isinstance(o, dict):
            for k, v in o.items():
                walk(v, steps + [key_step(k)])
        else:
            for i, v in enumerate(o):
                walk(v, steps + [index_step(i)])

    walk(root, [])
    return out

def pending_units(flat: Dict[str, Any]) -> List[PendingUnit]:
    # blank strings have nothing to translate and would only cost delimiter space
    return [PendingUnit(path, v) for path, v in flat.items() if isinstance(v, str) and v.strip()]
