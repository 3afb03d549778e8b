from __future__ import annotations
import time, logging, random
from typing import Callable, List

import requests

from .batcher import decode_batch, encode_batch
from .cost_tracker import CostTracker
from .errors import DecodeError, ProviderError, TransportError
from .logger import get_logger
from .translator_base import Translator

def _post_deepl(url: str, api_key: str, text: str, target_lang: str, timeout: float = 30.0) -> str:
    headers = {"Authorization": f"DeepL-Auth-Key {api_key}"}
    data = {"text": text, "target_lang": target_lang}
    try:
        resp = requests.post(url, headers=headers, data=data, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}") from e
    if resp.status_code != 200:
        raise ProviderError(resp.status_code, resp.text)
    if not resp.text:
        raise DecodeError("Empty response from DeepL API")
    try:
        body = resp.json()
    except ValueError as e:
        raise DecodeError(f"DeepL response is not JSON: {resp.text[:200]}") from e
    try:
        translated = body["translations"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise DecodeError(f"Unexpected response: {str(body)[:200]}") from e
    if not isinstance(translated, str):
        raise DecodeError(f"Unexpected translation type {type(translated).__name__}")
    return translated

class DeepLTranslator(Translator):
    """
    Packs a batch into one delimiter-joined request and splits the reply back apart.

    Transport failures and retryable provider statuses (429, 5xx) are retried
    up to ``max_retries`` attempts in total with exponential backoff. When the
    reply has the wrong number of segments, ``mismatch_policy`` decides:
    ``heal`` re-requests halves down to single strings, ``truncate`` keeps the
    pairs that line up, ``error`` fails the batch.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        delimiter: str = "::",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 1.5,
        qps: float = 5.0,
        mismatch_policy: str = "heal",
        cost: CostTracker | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not api_key:
            raise ValueError("DeepL API key is required")
        self.api_key = api_key
        self.api_url = api_url
        self.delimiter = delimiter
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_base = backoff_base
        self.qps = qps
        self.mismatch_policy = mismatch_policy
        self.cost = cost or CostTracker()
        self.logger = logger or get_logger()
        self._sleep = sleep
        self._last_call = 0.0

    def _respect_qps(self):
        if self.qps <= 0:
            return
        min_interval = 1.0 / self.qps
        dt = time.monotonic() - self._last_call
        if dt < min_interval:
            self._sleep(min_interval - dt)

    def _request(self, payload: str, target_lang: str) -> str:
        for attempt in range(self.max_retries):
            self._respect_qps()
            try:
                text = _post_deepl(self.api_url, self.api_key, payload, target_lang, timeout=self.timeout)
                self._last_call = time.monotonic()
                self.cost.add(len(payload), len(text))
                return text
            except (TransportError, ProviderError) as e:
                self._last_call = time.monotonic()
                if isinstance(e, ProviderError) and not e.retryable:
                    raise
                if attempt + 1 >= self.max_retries:
                    raise
                delay = (self.backoff_base ** attempt) + random.uniform(0, 0.6)
                self.logger.warning(f"DeepL request failed ({e}); retrying in {delay:.1f}s")
                self._sleep(delay)
        raise TransportError(f"No attempt made for {self.api_url}; max_retries={self.max_retries}")

    def translate_batch(self, src_texts: List[str], target_lang: str) -> List[str]:
        if not src_texts:
            return []
        payload = encode_batch(src_texts, self.delimiter)
        text = self._request(payload, target_lang)
        policy = "error" if self.mismatch_policy == "heal" else self.mismatch_policy
        try:
            return decode_batch(text, len(src_texts), self.delimiter, policy=policy, logger=self.logger)
        except DecodeError as e:
            if self.mismatch_policy != "heal":
                raise
            mid = len(src_texts) // 2
            self.logger.warning(f"{e}; re-requesting as {mid} + {len(src_texts) - mid}")
            return self.translate_batch(src_texts[:mid], target_lang) + self.translate_batch(src_texts[mid:], target_lang)
