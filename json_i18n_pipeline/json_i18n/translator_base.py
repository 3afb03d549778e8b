from abc import ABC, abstractmethod
from typing import List

class Translator(ABC):
    @abstractmethod
    def translate_batch(self, src_texts: List[str], target_lang: str) -> List[str]:
        """Return translations in the same order as ``src_texts``; may be shorter only under a truncating policy."""
        ...

class IdentityTranslator(Translator):
    """Dry-run stand-in: every string translates to itself and nothing leaves the machine."""

    def translate_batch(self, src_texts: List[str], target_lang: str) -> List[str]:
        return list(src_texts)
