from __future__ import annotations
import json
import logging
import threading
from typing import Dict, Optional

from .errors import CacheLoadError
from .logger import get_logger
from .utils import read_bytes, save_text

class TranslationCache:
    """
    Source string -> translation for one target language.

    Keyed by the source text, never by path: the same string anywhere in the
    document, or in a later run, resolves to one entry. Loading never fails;
    a missing or corrupt cache simply starts empty and the reason is kept in
    ``load_error``.
    """

    def __init__(self, target_lang: str, entries: Optional[Dict[str, str]] = None, logger: logging.Logger | None = None) -> None:
        self.target_lang = target_lang
        self.entries: Dict[str, str] = dict(entries or {})
        self.load_error: Optional[CacheLoadError] = None
        self.logger = logger or get_logger()
        self._lock = threading.Lock()

    @classmethod
    def load(cls, data: Optional[bytes], target_lang: str, logger: logging.Logger | None = None) -> "TranslationCache":
        cache = cls(target_lang, logger=logger)
        if not data:
            return cache
        try:
            obj = json.loads(data.decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as e:
            cache._degrade(CacheLoadError(f"Cache for {target_lang} is not valid JSON: {e}"))
            return cache
        if not isinstance(obj, dict):
            cache._degrade(CacheLoadError(f"Cache for {target_lang} is a JSON {type(obj).__name__}, expected an object"))
            return cache
        skipped = 0
        for k, v in obj.items():
            if isinstance(v, str):
                cache.entries[k] = v
            else:
                skipped += 1
        if skipped:
            cache.logger.warning(f"Ignored {skipped} non-string cache entries for {target_lang}")
        return cache

    @classmethod
    def from_file(cls, path: str, target_lang: str, logger: logging.Logger | None = None) -> "TranslationCache":
        try:
            data = read_bytes(path)
        except OSError as e:
            cache = cls(target_lang, logger=logger)
            cache._degrade(CacheLoadError(f"Cannot read cache {path}: {e}"))
            return cache
        cache = cls.load(data, target_lang, logger=logger)
        if data is None:
            cache.logger.info(f"No cache at {path}; starting empty")
        else:
            cache.logger.info(f"Loaded {len(cache)} cached translations from {path}")
        return cache

    def _degrade(self, err: CacheLoadError) -> None:
        self.load_error = err
        self.entries = {}
        self.logger.warning(f"{err}; continuing with an empty cache")

    def get(self, source: str) -> Optional[str]:
        with self._lock:
            return self.entries.get(source)

    def put(self, source: str, translated: str) -> None:
        with self._lock:
            self.entries[source] = translated

    def dumps(self) -> bytes:
        with self._lock:
            text = json.dumps(self.entries, ensure_ascii=False, indent=2, sort_keys=True)
        return text.encode("utf-8")

    def save(self, path: str) -> None:
        save_text(path, self.dumps().decode("utf-8"))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, source: object) -> bool:
        return source in self.entries
