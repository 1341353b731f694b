from __future__ import annotations
from typing import Iterator, List, Optional, Sequence, Set

from .grid import GridModel

MIN_WORD_LENGTH = 2

# Letters written differently at the end of a word; the dictionary only has the final forms
FINAL_FORMS = {
    'כ': 'ך',
    'נ': 'ן',
    'מ': 'ם',
    'פ': 'ף',
    'צ': 'ץ',
}


def normalize_final(word: str) -> str:
    if not word:
        return word
    final = FINAL_FORMS.get(word[-1])
    if final is None:
        return word
    return word[:-1] + final


def _line_words(line: Sequence[Optional[str]]) -> Iterator[str]:
    # Index 0 is where reading starts (the right edge on an RTL board).
    # Scanning from the far edge builds each run backwards, so it is reversed on emit.
    run = ''
    for letter in reversed(line):
        if letter:
            run += letter
            continue
        if len(run) >= MIN_WORD_LENGTH:
            yield normalize_final(run[::-1])
        run = ''
    if len(run) >= MIN_WORD_LENGTH:
        yield normalize_final(run[::-1])


def scan_words(grid: GridModel) -> List[str]:
    words: List[str] = []
    for row in grid.rows():
        words.extend(_line_words(row))
    for column in grid.columns():
        words.extend(_line_words(column))
    return words


def extract_words(grid: GridModel) -> Set[str]:
    return set(scan_words(grid))


def new_words(current: GridModel, previous: GridModel) -> Set[str]:
    return extract_words(current) - extract_words(previous)
