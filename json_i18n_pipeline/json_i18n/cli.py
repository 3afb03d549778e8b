from __future__ import annotations
import argparse
from typing import List, Optional

from .config import MISMATCH_POLICIES, TranslateConfig, load_env
from .errors import JsonI18nError
from .logger import setup_logger
from .pipeline import run

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="json-i18n", description="Translate the strings of a JSON document with DeepL")
    sub = ap.add_subparsers(dest="cmd", required=True)

    t = sub.add_parser("translate", help="Translate one JSON document into one language")
    t.add_argument("--input", dest="input_path", default="data/input.json")
    t.add_argument("--output-dir", default="data")
    t.add_argument("--cache-dir", default="data", help="Holds one cache_<LANG>.json per target language")
    t.add_argument("--target-lang", default=None, help="Overrides TARGET_LANG")
    t.add_argument("--api-url", default=None, help="Overrides DEEPL_API_URL")
    t.add_argument("--batch-chars", type=int, default=1500)
    t.add_argument("--delimiter", default="::")
    t.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    t.add_argument("--deadline", type=float, default=None, help="Overall time budget in seconds")
    t.add_argument("--max-retries", type=int, default=3, help="Attempts per request, 1 disables retrying")
    t.add_argument("--backoff-base", type=float, default=1.5)
    t.add_argument("--qps", type=float, default=5.0)
    t.add_argument("--mismatch-policy", choices=MISMATCH_POLICIES, default="heal",
                   help="What to do when a reply has the wrong number of segments")
    t.add_argument("--no-incremental-cache", dest="persist_each_batch", action="store_false",
                   help="Only write the cache once the whole run succeeded")
    t.add_argument("--cost-per-million", type=float, default=20.0)
    t.add_argument("--indent", type=int, default=None)
    t.add_argument("--glossary", dest="glossary_path", default=None)
    t.add_argument("--report", dest="report_path", default=None)
    t.add_argument("--env-file", default=None)
    t.add_argument("--log-level", default="INFO")
    t.add_argument("--dry-run", action="store_true")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(args.log_level)
    try:
        load_env(args.env_file)
        cfg = TranslateConfig.from_env(
            target_lang=args.target_lang, api_url=args.api_url,
            input_path=args.input_path, output_dir=args.output_dir, cache_dir=args.cache_dir,
            batch_chars=args.batch_chars, delimiter=args.delimiter, timeout=args.timeout,
            deadline=args.deadline, max_retries=args.max_retries, backoff_base=args.backoff_base,
            qps=args.qps, mismatch_policy=args.mismatch_policy, persist_each_batch=args.persist_each_batch,
            cost_per_million=args.cost_per_million, indent=args.indent,
            glossary_path=args.glossary_path, report_path=args.report_path,
            log_level=args.log_level, dry_run=args.dry_run,
        )
        report = run(cfg, logger=logger)
    except JsonI18nError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    logger.info(f"Done: {report.output_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
