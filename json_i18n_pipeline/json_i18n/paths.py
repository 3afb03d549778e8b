"""
Path keys: a reversible string address for every leaf of a JSON document.

Object descent joins keys with "->" and array descent appends "[i]":

    {"items": [{"name": "x"}]}  ->  "items[0]->name"

An empty key directly under the root renders as a leading "->" so it stays
distinct from the root itself: {"": "x"} -> "->".

Keys that would make the encoding ambiguous (containing "->" or ending in
"[<digits>]") are rejected with PathKeyError instead of producing a key that
rebuilds into the wrong shape.
"""
from __future__ import annotations
import re
from typing import List, Sequence, Tuple, Union

from .errors import PathKeyError

KEY_SEP = "->"
KEY = "key"
INDEX = "index"

Step = Tuple[str, Union[str, int]]

_TRAILING_INDEX_RE = re.compile(r"\[(\d+)\]$")

def key_step(name: str) -> Step:
    return (KEY, name)

def index_step(i: int) -> Step:
    return (INDEX, i)

def _render(steps: Sequence[Step]) -> str:
    out: List[str] = []
    for pos, (kind, label) in enumerate(steps):
        if kind == KEY:
            if pos > 0 or label == "":
                out.append(KEY_SEP)
            out.append(str(label))
        elif kind == INDEX:
            out.append(f"[{int(label)}]")
        else:
            raise ValueError(f"Unknown step kind {kind!r}")
    return "".join(out)

def path_for(steps: Sequence[Step]) -> str:
    path = _render(steps)
    if steps_for(path) != list(steps):
        raise PathKeyError(f"Cannot address {list(steps)!r} unambiguously (path {path!r})")
    return path

def _split_segment(seg: str) -> Tuple[str, List[int]]:
    indices: List[int] = []
    while True:
        m = _TRAILING_INDEX_RE.search(seg)
        if not m:
            break
        indices.append(int(m.group(1)))
        seg = seg[:m.start()]
    indices.reverse()
    return seg, indices

def steps_for(path: str) -> List[Step]:
    if path == "":
        return []
    steps: List[Step] = []
    for pos, seg in enumerate(path.split(KEY_SEP)):
        name, indices = _split_segment(seg)
        # every segment after the first exists because a key was descended into
        if pos > 0 or name:
            steps.append(key_step(name))
        steps.extend(index_step(i) for i in indices)
    return steps
