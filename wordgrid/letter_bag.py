from __future__ import annotations
import logging
import random
from datetime import date
from itertools import accumulate
from typing import Dict, List, Mapping, Optional, Sequence

from .config import Config

logger = logging.getLogger(__name__)

# Relative frequency of each letter in Hebrew text (percent, need not sum to 100)
LETTER_WEIGHTS: Dict[str, float] = {
    'י': 15.4836,
    'ו': 10.3197,
    'נ': 10.1562,
    'מ': 8.5153,
    'ת': 8.4439,
    'ה': 6.6506,
    'כ': 6.4263,
    'ר': 4.2524,
    'ש': 3.4131,
    'ל': 2.9258,
    'ב': 2.7679,
    'פ': 2.4766,
    'ק': 2.406,
    'ח': 2.3625,
    'ע': 2.3024,
    'א': 2.2773,
    'ד': 2.044,
    'ס': 1.6438,
    'ט': 1.4591,
    'צ': 1.399,
    'ג': 1.1855,
    'ז': 1.0892,
}


def daily_seed(day: date) -> int:
    return day.day * 10000 + day.month * 100 + (day.year % 100)


# Letters are never used up; every draw is independent
class LetterBag:
    def __init__(self, weights: Optional[Mapping[str, float]] = None, rng: Optional[random.Random] = None):
        weights = dict(LETTER_WEIGHTS if weights is None else weights)
        if not weights:
            raise ValueError('Letter weights must not be empty')
        if any(w < 0 for w in weights.values()):
            raise ValueError('Letter weights must not be negative')
        total = sum(weights.values())
        if total <= 0:
            raise ValueError('Letter weights must add up to more than zero')
        self._letters: List[str] = list(weights)
        self._cum_weights: List[float] = [w / total for w in accumulate(weights.values())]
        self._rng = rng or random.Random()

    @classmethod
    def seeded(cls, seed: int, weights: Optional[Mapping[str, float]] = None) -> 'LetterBag':
        return cls(weights, random.Random(seed))

    @classmethod
    def for_day(cls, day: date, weights: Optional[Mapping[str, float]] = None) -> 'LetterBag':
        return cls.seeded(daily_seed(day), weights)

    @property
    def letters(self) -> List[str]:
        return list(self._letters)

    def draw(self, n: int) -> List[str]:
        if n < 0:
            raise ValueError(f'Cannot draw {n} letters')
        return self._rng.choices(self._letters, cum_weights=self._cum_weights, k=n)

    def refill(self, rack: Sequence[str], size: int = Config.RACK_SIZE) -> List[str]:
        missing = max(0, size - len(rack))
        drawn = self.draw(missing)
        if drawn:
            logger.debug('refilled rack with %s', drawn)
        return list(rack) + drawn
