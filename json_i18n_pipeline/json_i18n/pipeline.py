from __future__ import annotations
import os, json, time, logging
from dataclasses import dataclass, field, asdict
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional

from .batcher import Batch, build_batches, check_delimiter
from .cache import TranslationCache
from .config import TranslateConfig
from .cost_tracker import CostTracker
from .errors import DeadlineExceededError, InputError
from .flattener import PendingUnit, flatten, pending_units
from .logger import get_logger
from .rebuilder import rebuild
from .translator_base import IdentityTranslator, Translator
from .translator_deepl import DeepLTranslator
from .utils import load_text, save_text
from .validators import ValidationIssue, load_glossary, validate_translations


class RunState(IntEnum):
    LOADED = 1
    FLATTENED = 2
    CACHE_FILTERED = 3
    BATCHED = 4
    TRANSLATING = 5
    MERGED = 6
    REBUILT = 7
    PERSISTED = 8


class TranslationRun:
    """One-way progress tracker; TRANSLATING repeats once per batch."""

    def __init__(self, logger: logging.Logger | None = None):
        self.state = RunState.LOADED
        self.history: List[RunState] = [RunState.LOADED]
        self.logger = logger or get_logger()

    def advance(self, state: RunState) -> None:
        if state < self.state or (state == self.state and state != RunState.TRANSLATING):
            raise RuntimeError(f"Illegal transition {self.state.name} -> {state.name}")
        self.state = state
        self.history.append(state)
        self.logger.debug(f"Run state: {state.name}")


@dataclass
class DocumentResult:
    value: Any
    flat: Dict[str, Any]
    translations: Dict[str, str]
    string_leaves: int = 0
    cache_hits: int = 0
    sent_units: int = 0
    batches: int = 0
    untranslated: int = 0


@dataclass
class RunReport:
    output_path: str
    cache_path: Optional[str]
    target_lang: str
    string_leaves: int
    cache_hits: int
    sent_units: int
    batches: int
    untranslated: int
    cache_entries: int
    cost: Dict[str, Any] = field(default_factory=dict)
    issues: List[ValidationIssue] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["issues"] = [asdict(i) for i in self.issues]
        return d


def translate_document(
    doc: Any,
    translator: Translator,
    cache: TranslationCache,
    cfg: TranslateConfig,
    run: TranslationRun | None = None,
    on_batch: Optional[Callable[[int, Batch], None]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> DocumentResult:
    """
    Translate every string leaf of ``doc`` and rebuild it with the same shape.

    Strings already in the cache are never sent. Each distinct source string
    is sent once however many paths share it, and every successful batch is
    written into the cache before the next one starts. A dry run reads the
    cache but never writes to it.
    """
    logger = cache.logger
    run = run or TranslationRun(logger)
    started = clock()

    flat = flatten(doc)
    units = pending_units(flat)
    run.advance(RunState.FLATTENED)
    logger.info(f"Flattened {len(flat)} leaves, {len(units)} translatable strings")

    translations: Dict[str, str] = {}
    pending: List[PendingUnit] = []
    for u in units:
        hit = cache.get(u.source)
        if hit is None:
            pending.append(u)
        else:
            translations[u.path] = hit
    cache_hits = len(units) - len(pending)

    first_by_source: Dict[str, PendingUnit] = {}
    for u in pending:
        first_by_source.setdefault(u.source, u)
    to_send = list(first_by_source.values())
    run.advance(RunState.CACHE_FILTERED)
    logger.info(f"Cache hits: {cache_hits}; unique strings to translate: {len(to_send)}")

    check_delimiter(to_send, cfg.delimiter)
    batches = build_batches(to_send, cfg.batch_chars, cfg.delimiter)
    run.advance(RunState.BATCHED)

    fresh: Dict[str, str] = {}
    for i, batch in enumerate(batches):
        if cfg.deadline is not None and clock() - started > cfg.deadline:
            raise DeadlineExceededError(cfg.deadline, done=i, total=len(batches))
        run.advance(RunState.TRANSLATING)
        logger.info(f"Translating batch {i + 1}/{len(batches)} ({len(batch)} strings, {batch.serialized_length(cfg.delimiter)} chars)")
        out = translator.translate_batch(batch.sources, cfg.target_lang)
        for u, tgt in zip(batch.units, out):
            if not cfg.dry_run:
                cache.put(u.source, tgt)
            fresh[u.source] = tgt
        if len(out) < len(batch):
            logger.warning(f"Batch {i + 1}: {len(batch) - len(out)} strings left untranslated")
        if on_batch:
            on_batch(i, batch)

    untranslated = 0
    for u in pending:
        if u.source in fresh:
            translations[u.path] = fresh[u.source]
        else:
            untranslated += 1
    run.advance(RunState.MERGED)

    value = rebuild(flat, translations)
    run.advance(RunState.REBUILT)

    return DocumentResult(
        value=value,
        flat=flat,
        translations=translations,
        string_leaves=len(units),
        cache_hits=cache_hits,
        sent_units=len(to_send),
        batches=len(batches),
        untranslated=untranslated,
    )


def configure_translator(cfg: TranslateConfig, cost: CostTracker, logger: logging.Logger) -> Translator:
    if cfg.dry_run:
        logger.info("Dry run: strings are passed through untranslated")
        return IdentityTranslator()
    return DeepLTranslator(
        cfg.api_key,
        cfg.api_url,
        delimiter=cfg.delimiter,
        timeout=cfg.timeout,
        max_retries=cfg.max_retries,
        backoff_base=cfg.backoff_base,
        qps=cfg.qps,
        mismatch_policy=cfg.mismatch_policy,
        cost=cost,
        logger=logger,
    )


def load_document(path: str) -> Any:
    try:
        text = load_text(path)
    except FileNotFoundError as e:
        raise InputError(f"Input file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read input file {path}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Input file {path} is not valid JSON: {e}") from e


def output_path_for(cfg: TranslateConfig, timestamp: float) -> str:
    return os.path.join(cfg.output_dir, f"{int(timestamp)}_{cfg.target_lang}.json")


def run(
    cfg: TranslateConfig,
    translator: Translator | None = None,
    logger: logging.Logger | None = None,
    now: Callable[[], float] = time.time,
) -> RunReport:
    cfg.validate()
    logger = logger or get_logger()

    logger.info(f"Reading {cfg.input_path}")
    doc = load_document(cfg.input_path)
    state = TranslationRun(logger)

    cache_path = cfg.cache_path()
    cache = TranslationCache.from_file(cache_path, cfg.target_lang, logger=logger)
    glossary = load_glossary(cfg.glossary_path, logger) if cfg.glossary_path else None

    cost = CostTracker(cfg.cost_per_million)
    translator = translator or configure_translator(cfg, cost, logger)

    def persist_cache(i: int, batch: Batch) -> None:
        cache.save(cache_path)
        logger.debug(f"Cache persisted after batch {i + 1} ({len(cache)} entries)")

    on_batch = persist_cache if cfg.persist_each_batch and not cfg.dry_run else None
    result = translate_document(doc, translator, cache, cfg, run=state, on_batch=on_batch)

    sources = {path: v for path, v in result.flat.items() if isinstance(v, str)}
    issues = validate_translations(
        sources, result.translations, cfg.target_lang,
        cfg.length_ratio_min, cfg.length_ratio_max, glossary,
    )
    for issue in issues[:10]:
        logger.warning(f"[{issue.kind}] {issue.path}: {issue.detail}")
    if issues:
        logger.info(f"Validation issues for {cfg.target_lang}: {len(issues)}")

    out_path = output_path_for(cfg, now())
    save_text(out_path, json.dumps(result.value, ensure_ascii=False, indent=cfg.indent))
    logger.info(f"Wrote {out_path}")

    saved_cache: Optional[str] = None
    if not cfg.dry_run:
        cache.save(cache_path)
        saved_cache = cache_path
        logger.info(f"Saved {len(cache)} cached translations to {cache_path}")
    state.advance(RunState.PERSISTED)

    report = RunReport(
        output_path=out_path,
        cache_path=saved_cache,
        target_lang=cfg.target_lang,
        string_leaves=result.string_leaves,
        cache_hits=result.cache_hits,
        sent_units=result.sent_units,
        batches=result.batches,
        untranslated=result.untranslated,
        cache_entries=len(cache),
        cost=cost.as_dict(),
        issues=issues,
    )
    if cfg.report_path:
        save_text(cfg.report_path, json.dumps(report.as_dict(), ensure_ascii=False, indent=2))
        logger.info(f"Wrote run report {cfg.report_path}")
    logger.info(f"Requests: {cost.requests}; billed chars: {cost.billed_chars}; estimated cost: ${cost.est_cost_usd:.4f}")
    return report
