from __future__ import annotations
from typing import Optional


class JsonI18nError(Exception):
    """Base class for every failure the pipeline reports to the caller."""


class ConfigError(JsonI18nError):
    pass


class InputError(JsonI18nError):
    pass


class PathKeyError(InputError):
    """A key in the document cannot be addressed unambiguously."""


class DelimiterCollisionError(InputError):
    def __init__(self, path: str, delimiter: str):
        super().__init__(f"Value at '{path}' contains or ends in part of the batch delimiter {delimiter!r}; choose another --delimiter")
        self.path = path
        self.delimiter = delimiter


class CacheLoadError(JsonI18nError):
    """Recorded, never raised: a bad cache only costs extra API calls."""


class TranslationError(JsonI18nError):
    pass


class TransportError(TranslationError):
    pass


class ProviderError(TranslationError):
    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Provider returned HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class DecodeError(TranslationError):
    pass


class DeadlineExceededError(TranslationError):
    def __init__(self, deadline: float, done: Optional[int] = None, total: Optional[int] = None):
        progress = f" after {done}/{total} batches" if done is not None else ""
        super().__init__(f"Overall deadline of {deadline:.1f}s exceeded{progress}")
        self.deadline = deadline


class OutputWriteError(JsonI18nError):
    pass
