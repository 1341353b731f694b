from __future__ import annotations
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import Evaluation


class GameError(Exception):
    pass


class CellOutOfBounds(GameError):
    def __init__(self, row: int, col: int):
        super().__init__(f'Cell ({row}, {col}) is outside the grid')
        self.row = row
        self.col = col


class CellOccupied(GameError):
    def __init__(self, row: int, col: int):
        super().__init__(f'Cell ({row}, {col}) already holds a letter')
        self.row = row
        self.col = col


class NotTentative(GameError):
    def __init__(self, row: int, col: int):
        super().__init__(f'Cell ({row}, {col}) has no letter placed this turn')
        self.row = row
        self.col = col


class LetterNotInRack(GameError):
    def __init__(self, letter: str):
        super().__init__(f'Letter {letter!r} is not in the rack')
        self.letter = letter


class EditWithoutPermission(GameError):
    pass


class InvalidWordsOnCommit(GameError):
    def __init__(self, evaluation: 'Evaluation'):
        self.evaluation = evaluation
        super().__init__('Invalid words: ' + ', '.join(evaluation.invalidWords))

    @property
    def invalid_words(self) -> List[str]:
        return list(self.evaluation.invalidWords)


class StaleSnapshot(GameError):
    def __init__(self, received: int, applied: int):
        super().__init__(f'Snapshot revision {received} is older than applied revision {applied}')
        self.received = received
        self.applied = applied


class GameNotFound(GameError):
    def __init__(self, game_id: str):
        super().__init__(f'Game {game_id} not found')
        self.game_id = game_id


class StoreError(GameError):
    pass
