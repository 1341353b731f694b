from __future__ import annotations
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Set, Union

from .config import Config

logger = logging.getLogger(__name__)

class DictionaryService:
    def __init__(self, words: Optional[Iterable[str]] = None):
        # Words are matched exactly, no case folding or final-form fixing here
        self._words: Set[str] = set()
        for word in words or ():
            word = word.strip()
            if word:
                self._words.add(word)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'DictionaryService':
        with open(path, encoding='utf-8') as f:
            service = cls(f)
        logger.info('Loaded %d words from %s', len(service), path)
        return service

    def is_valid(self, word: str) -> bool:
        if not word:
            return False
        return word in self._words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.is_valid(word)

    def __len__(self) -> int:
        return len(self._words)

@lru_cache(maxsize=1)
def get_service() -> DictionaryService:
    return DictionaryService.from_file(Config.DICTIONARY_PATH)
