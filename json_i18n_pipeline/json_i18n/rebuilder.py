from __future__ import annotations
import copy
from typing import Any, Dict, List

from .paths import KEY, Step, steps_for

_MISSING = object()

def _empty_for(step: Step) -> Any:
    return {} if step[0] == KEY else []

def _ensure_slot(container: List[Any], i: int) -> None:
    while len(container) <= i:
        container.append(_MISSING)

def _insert(root: Any, steps: List[Step], value: Any) -> Any:
    if not steps:
        return value
    if root is _MISSING:
        root = _empty_for(steps[0])
    node = root
    for pos, (kind, label) in enumerate(steps):
        last = pos == len(steps) - 1
        if kind == KEY:
            if last:
                node[label] = value
            else:
                node = node.setdefault(label, _empty_for(steps[pos + 1]))
        else:
            _ensure_slot(node, label)
            if last:
                node[label] = value
            else:
                if node[label] is _MISSING:
                    node[label] = _empty_for(steps[pos + 1])
                node = node[label]
    return root

def rebuild(flat: Dict[str, Any], translations: Dict[str, str]) -> Any:
    """
    Rebuild a document from its flattened leaves, substituting translations by path.

    Leaves without a translation keep their original value. The result has the
    same key sets, array lengths and nesting as the flattened document.
    """
    root: Any = _MISSING
    for path, original in flat.items():
        value = translations.get(path, original)
        if isinstance(value, (dict, list)):
            value = copy.copy(value)
        root = _insert(root, steps_for(path), value)
    if root is _MISSING:
        raise ValueError("Cannot rebuild a document from an empty leaf map")
    _check_filled(root)
    return root

def _check_filled(node: Any) -> None:
    if isinstance(node, dict):
        for v in node.values():
            _check_filled(v)
    elif isinstance(node, list):
        for v in node:
            if v is _MISSING:
                raise ValueError("Leaf map has gaps: an array index was never assigned")
            _check_filled(v)
