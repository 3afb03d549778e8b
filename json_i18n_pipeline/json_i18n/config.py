from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

DEFAULT_API_URL = "https://api-free.deepl.com/v2/translate"
MISMATCH_POLICIES = ("heal", "truncate", "error")

def load_env(env_file: Optional[str] = None) -> bool:
    """Merge a .env file into os.environ without overriding variables already set."""
    if env_file:
        if not os.path.exists(env_file):
            raise ConfigError(f"Env file not found: {env_file}")
        return load_dotenv(env_file, override=False)
    found = find_dotenv(usecwd=True)
    return load_dotenv(found, override=False) if found else False

@dataclass
class TranslateConfig:
    target_lang: str
    api_key: str = ""
    input_path: str = "data/input.json"
    output_dir: str = "data"
    cache_dir: str = "data"

    api_url: str = DEFAULT_API_URL
    batch_chars: int = 1500
    delimiter: str = "::"
    timeout: float = 30.0
    deadline: Optional[float] = None
    max_retries: int = 3
    backoff_base: float = 1.5
    qps: float = 5.0
    mismatch_policy: str = "heal"
    persist_each_batch: bool = True
    cost_per_million: float = 20.0
    length_ratio_min: float = 0.3
    length_ratio_max: float = 3.0
    indent: Optional[int] = None
    glossary_path: Optional[str] = None
    report_path: Optional[str] = None
    log_level: str = "INFO"
    dry_run: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "TranslateConfig":
        """Build a config from DEEPL_API_KEY / TARGET_LANG / DEEPL_API_URL; explicit overrides win."""
        values = {
            "api_key": os.getenv("DEEPL_API_KEY", ""),
            "target_lang": os.getenv("TARGET_LANG", ""),
            "api_url": os.getenv("DEEPL_API_URL", "") or DEFAULT_API_URL,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def cache_path(self) -> str:
        return os.path.join(self.cache_dir, f"cache_{self.target_lang}.json")

    def validate(self) -> None:
        if not self.target_lang:
            raise ConfigError("TARGET_LANG must be set")
        if not self.api_key and not self.dry_run:
            raise ConfigError("DEEPL_API_KEY must be set")
        if not self.delimiter:
            raise ConfigError("Delimiter must not be empty")
        if self.batch_chars <= 0:
            raise ConfigError(f"batch_chars must be positive, got {self.batch_chars}")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.mismatch_policy not in MISMATCH_POLICIES:
            raise ConfigError(f"Unknown mismatch policy {self.mismatch_policy!r}; expected one of {', '.join(MISMATCH_POLICIES)}")
        if self.deadline is not None and self.deadline <= 0:
            raise ConfigError(f"deadline must be positive, got {self.deadline}")
