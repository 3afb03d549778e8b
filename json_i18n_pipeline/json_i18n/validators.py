from __future__ import annotations
import logging
from typing import List, Dict, Optional
from dataclasses import dataclass

import yaml

from .errors import ConfigError

@dataclass
class ValidationIssue:
    kind: str
    detail: str
    path: str
    source: str
    target: str
    target_lang: str

def check_length_ratio(path: str, src: str, tgt: str, target_lang: str, lo: float, hi: float) -> List[ValidationIssue]:
    issues = []
    if len(src) == 0:
        return issues
    ratio = len(tgt) / max(len(src), 1)
    if ratio < lo or ratio > hi:
        issues.append(ValidationIssue("length_ratio", f"Length ratio {ratio:.2f} not in [{lo},{hi}]", path, src, tgt, target_lang))
    return issues

def check_untranslated(path: str, src: str, tgt: str, target_lang: str) -> List[ValidationIssue]:
    # single words and codes often legitimately stay the same, so only flag prose
    if tgt == src and len(src.split()) > 2:
        return [ValidationIssue("untranslated", "Target is identical to source", path, src, tgt, target_lang)]
    return []

def check_glossary_consistency(path: str, src: str, tgt: str, target_lang: str, glossary: Dict[str, Dict[str, str]] | None) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not glossary:
        return issues
    # glossary format: {term: {LANG: expected_translation, ...}, ...}
    for term, per_lang in glossary.items():
        expected = (per_lang or {}).get(target_lang)
        if expected and term.lower() in src.lower() and expected not in tgt:
            issues.append(ValidationIssue("glossary", f"Expected glossary term not found: '{expected}'", path, src, tgt, target_lang))
    return issues

def load_glossary(path: str, logger: Optional[logging.Logger] = None) -> Dict[str, Dict[str, str]]:
    try:
        with open(path, "r", encoding="utf-8") as gf:
            data = yaml.safe_load(gf) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load glossary {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Glossary {path} must map terms to {{LANG: translation}}")
    glossary: Dict[str, Dict[str, str]] = {}
    for term, per_lang in data.items():
        if isinstance(per_lang, dict):
            glossary[str(term)] = {str(lang): str(t) for lang, t in per_lang.items()}
    if logger:
        logger.info(f"Loaded glossary with {len(glossary)} root terms from {path}")
    return glossary

def validate_translations(
    sources: Dict[str, str],
    translations: Dict[str, str],
    target_lang: str,
    lo: float,
    hi: float,
    glossary: Dict[str, Dict[str, str]] | None = None,
) -> List[ValidationIssue]:
    """Run every check over the path -> translation map; issues are advisory only."""
    issues: List[ValidationIssue] = []
    for path, tgt in translations.items():
        src = sources.get(path)
        if src is None:
            continue
        issues.extend(check_length_ratio(path, src, tgt, target_lang, lo, hi))
        issues.extend(check_untranslated(path, src, tgt, target_lang))
        issues.extend(check_glossary_consistency(path, src, tgt, target_lang, glossary))
    return issues
