from __future__ import annotations
import logging
from typing import Container, Iterable

from .schemas import Evaluation, WordResult

logger = logging.getLogger(__name__)


def word_score(word: str) -> int:
    # Two points per letter after the first; no letter values or multipliers
    return max(0, (len(word) - 1) * 2)


def evaluate(new_words: Iterable[str], dictionary: Container[str]) -> Evaluation:
    # a single invalid word rejects the whole turn
    result = Evaluation()
    for word in sorted(set(new_words)):
        if word in dictionary:
            score = word_score(word)
            result.validWords.append(word)
            result.totalScore += score
            result.words.append(WordResult(word=word, valid=True, score=score))
        else:
            result.invalidWords.append(word)
            result.words.append(WordResult(word=word, valid=False))
    logger.debug('evaluated %d words: valid=%s invalid=%s total=%d',
                  len(result.words), result.validWords, result.invalidWords, result.totalScore)
    return result
