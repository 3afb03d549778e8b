import json

import pytest

from json_i18n.cli import main
from json_i18n.config import TranslateConfig

from conftest import FakeResponse


@pytest.fixture
def env(monkeypatch, tmp_path):
    # set-then-delete so whatever load_dotenv writes is rolled back afterwards
    for name in ("DEEPL_API_KEY", "TARGET_LANG", "DEEPL_API_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    return env_file


def base_args(tmp_path, env_file):
    return [
        "translate",
        "--input", str(tmp_path / "input.json"),
        "--output-dir", str(tmp_path / "out"),
        "--cache-dir", str(tmp_path / "cache"),
        "--env-file", str(env_file),
        "--qps", "0",
        "--max-retries", "1",
    ]


def test_translate_exits_zero(deepl, env, tmp_path, write_input):
    env.write_text("DEEPL_API_KEY=from-dotenv\nTARGET_LANG=FR\n", encoding="utf-8")
    write_input({"a": "hello", "b": ["world", 1]})

    assert main(base_args(tmp_path, env)) == 0

    [out] = list((tmp_path / "out").glob("*_FR.json"))
    assert json.loads(out.read_text(encoding="utf-8")) == {"a": "bonjour", "b": ["monde", 1]}
    assert deepl.calls[0]["headers"] == {"Authorization": "DeepL-Auth-Key from-dotenv"}


def test_target_lang_flag_overrides_env(deepl, env, tmp_path, write_input, monkeypatch):
    monkeypatch.setenv("DEEPL_API_KEY", "k")
    monkeypatch.setenv("TARGET_LANG", "FR")
    write_input({"a": "hello"})

    assert main(base_args(tmp_path, env) + ["--target-lang", "DE"]) == 0
    assert deepl.calls[0]["data"]["target_lang"] == "DE"


def test_missing_config_exits_non_zero(deepl, env, tmp_path, write_input):
    write_input({"a": "hello"})
    assert main(base_args(tmp_path, env)) == 1
    assert deepl.calls == []


def test_provider_failure_exits_non_zero(deepl, env, tmp_path, write_input, monkeypatch):
    monkeypatch.setenv("DEEPL_API_KEY", "k")
    monkeypatch.setenv("TARGET_LANG", "FR")
    deepl.queue = [FakeResponse(456, text="Quota exceeded")]
    write_input({"a": "hello"})

    assert main(base_args(tmp_path, env)) == 1
    assert not (tmp_path / "out").exists()


def test_unknown_mismatch_policy_is_a_usage_error(env, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(base_args(tmp_path, env) + ["--mismatch-policy", "guess"])
    assert exc.value.code == 2


def test_from_env_defaults(monkeypatch):
    monkeypatch.setenv("DEEPL_API_KEY", "k")
    monkeypatch.setenv("TARGET_LANG", "ES")
    monkeypatch.delenv("DEEPL_API_URL", raising=False)
    cfg = TranslateConfig.from_env(cache_dir="c")
    assert cfg.api_url == "https://api-free.deepl.com/v2/translate"
    assert cfg.cache_path().endswith("cache_ES.json")
