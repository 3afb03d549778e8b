from __future__ import annotations
import os
from typing import Optional

from .errors import OutputWriteError

def read_bytes(path: str) -> Optional[bytes]:
    """Return the file content, or None when the file does not exist."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return None

def load_text(path: str) -> str:
    # utf-8-sig drops a leading BOM that editors like to add to JSON files
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read()

def save_text(path: str, text: str) -> None:
    """Write atomically: a crash mid-write never leaves a truncated file behind."""
    parent = os.path.dirname(path)
    tmp = path + ".tmp"
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError as e:
        raise OutputWriteError(f"Failed writing {path}: {e}") from e
