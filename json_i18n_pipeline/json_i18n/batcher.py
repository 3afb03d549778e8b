from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import DecodeError, DelimiterCollisionError
from .flattener import PendingUnit
from .logger import get_logger

@dataclass
class Batch:
    units: List[PendingUnit] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        return [u.source for u in self.units]

    def serialized_length(self, delimiter: str) -> int:
        return sum(len(u.source) + len(delimiter) for u in self.units)

    def __len__(self) -> int:
        return len(self.units)

def build_batches(units: Iterable[PendingUnit], limit: int, delimiter: str) -> List[Batch]:
    """
    Greedy, order-preserving packing of units into batches of at most ``limit`` characters.

    A unit that alone exceeds the limit still goes out, as a batch of one.
    """
    batches: List[Batch] = []
    cur, cur_chars = Batch(), 0
    for u in units:
        size = len(u.source) + len(delimiter)
        if cur.units and cur_chars + size > limit:
            batches.append(cur)
            cur, cur_chars = Batch(), 0
        cur.units.append(u); cur_chars += size
    if cur.units:
        batches.append(cur)
    return batches

def check_delimiter(units: Iterable[PendingUnit], delimiter: str) -> None:
    """
    Reject sources the reply could not be split back into.

    Splitting takes the leftmost delimiter, so a source must neither contain
    the delimiter nor end in a prefix of it ("Name:" + "::" reads as "Name" + ":").
    """
    for u in units:
        if (u.source + delimiter).find(delimiter) != len(u.source):
            raise DelimiterCollisionError(u.path, delimiter)

def encode_batch(sources: List[str], delimiter: str) -> str:
    return "".join(s + delimiter for s in sources)

def _strip_trailing(s: str, delimiter: str) -> str:
    return s[:-len(delimiter)] if s.endswith(delimiter) else s

def split_segments(text: str, delimiter: str) -> List[str]:
    body = _strip_trailing(text, delimiter)
    return [_strip_trailing(seg, delimiter) for seg in body.split(delimiter)]

def decode_batch(
    text: str,
    count: int,
    delimiter: str,
    policy: str = "error",
    logger: logging.Logger | None = None,
) -> List[str]:
    """
    Split a translated payload back into ``count`` segments, position for position.

    On a count mismatch, ``"truncate"`` pairs up to the shorter side and the
    caller gets fewer results than it asked for; any other policy raises
    DecodeError so the caller can decide what to do. A single input takes the
    whole reply, except under ``"truncate"`` which keeps only the first segment.
    """
    if count == 1 and policy != "truncate":
        return [_strip_trailing(text, delimiter)]
    segments = split_segments(text, delimiter)
    if len(segments) == count:
        return segments
    if policy == "truncate":
        (logger or get_logger()).warning(
            f"Batch came back with {len(segments)} segments for {count} inputs; keeping the first {min(count, len(segments))}"
        )
        return segments[:count]
    raise DecodeError(f"Expected {count} segments in translated batch, got {len(segments)}")
