import json
import logging

import pytest

from json_i18n.config import TranslateConfig
from json_i18n.logger import LOGGER_NAME


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    def json(self):
        return json.loads(self.text)


def deepl_body(text):
    return FakeResponse(body={"translations": [{"detected_source_language": "EN", "text": text}]})


class FakeDeepL:
    """Stands in for requests.post; translates segment by segment from a word list."""

    def __init__(self, words=None, delimiter="::"):
        self.words = dict(words or {})
        self.delimiter = delimiter
        self.calls = []
        # scripted replies: a FakeResponse, an exception to raise, or None for the default
        self.queue = []

    def __call__(self, url, headers=None, data=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "data": data, "timeout": timeout})
        if self.queue:
            item = self.queue.pop(0)
            if isinstance(item, Exception):
                raise item
            if item is not None:
                return item
        return deepl_body(self.translate(data["text"]))

    def translate(self, text):
        parts = text.split(self.delimiter)
        return self.delimiter.join(self.words.get(p, p.upper()) for p in parts)

    @property
    def texts(self):
        return [c["data"]["text"] for c in self.calls]


WORDS = {
    "hello": "bonjour",
    "world": "monde",
    "red": "rouge",
    "blue": "bleu",
    "Good morning": "Bonjour",
}


@pytest.fixture(autouse=True)
def quiet_logger():
    # keeps setup_logger from binding a handler to pytest's captured stderr
    logger = logging.getLogger(LOGGER_NAME)
    handler = logging.NullHandler()
    logger.addHandler(handler)
    yield logger
    logger.removeHandler(handler)


@pytest.fixture
def deepl(monkeypatch):
    fake = FakeDeepL(WORDS)
    monkeypatch.setattr("json_i18n.translator_deepl.requests.post", fake)
    return fake


@pytest.fixture
def make_cfg(tmp_path):
    def _make(**overrides):
        values = dict(
            target_lang="FR",
            api_key="test-key",
            api_url="https://deepl.test/v2/translate",
            input_path=str(tmp_path / "input.json"),
            output_dir=str(tmp_path / "out"),
            cache_dir=str(tmp_path / "cache"),
            qps=0,
            max_retries=1,
        )
        values.update(overrides)
        return TranslateConfig(**values)
    return _make


@pytest.fixture
def write_input(tmp_path):
    def _write(doc):
        path = tmp_path / "input.json"
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path
    return _write
