from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Awaitable, Callable, Dict, Optional

from ..config import Config
from ..errors import EditWithoutPermission, InvalidWordsOnCommit, LetterNotInRack, StaleSnapshot
from ..grid import GridModel, Position
from ..schemas import Evaluation, GameState
from ..scoring import evaluate
from ..words import new_words
from .session import GameSession

logger = logging.getLogger(__name__)

Publish = Callable[[Dict[str, Any]], Awaitable[GameState]]

# Grid edits are refused unless the game is active and the local player owns currentTurn
class TurnController:
    def __init__(self, session: GameSession, publish: Optional[Publish] = None):
        self.session = session
        self.publish = publish
        self._committing = False

    def _holds_turn(self, state: Optional[GameState]) -> bool:
        return (
            state is not None
            and state.status == 'active'
            and state.slot_of(self.session.player_id) is not None
            and state.currentTurn == self.session.player_id
        )

    @property
    def can_edit(self) -> bool:
        return not self._committing and self._holds_turn(self.session.state)

    def _require_edit(self):
        if self._committing:
            raise EditWithoutPermission('A turn is being committed')
        if not self._holds_turn(self.session.state):
            raise EditWithoutPermission(f'{self.session.player_id} does not hold the turn')

    # Local edits

    def place(self, row: int, col: int, letter: str):
        self._require_edit()
        if letter not in self.session.rack:
            raise LetterNotInRack(letter)
        self.session.grid.place_tentative(row, col, letter)
        self.session.rack.remove(letter)

    def retract(self, row: int, col: int) -> str:
        self._require_edit()
        letter = self.session.grid.retract_tentative(row, col)
        self.session.rack.append(letter)
        return letter

    def move(self, from_row: int, from_col: int, to_row: int, to_col: int):
        self._require_edit()
        self.session.grid.move_tentative(from_row, from_col, to_row, to_col)

    def reset_turn(self):
        self._require_edit()
        self.session.rack.extend(self.session.grid.discard_tentative())

    def review(self) -> Evaluation:
        words = new_words(self.session.grid, self.session.snapshot)
        return evaluate(words, self.session.dictionary)

    # Commit

    async def finish_turn(self) -> Evaluation:
        self._require_edit()
        if self.publish is None:
            raise RuntimeError('TurnController has no publisher to commit through')
        evaluation = self.review()
        if not evaluation.accepted:
            logger.info('Turn rejected for %s, invalid words: %s',
                        self.session.player_id, evaluation.invalidWords)
            raise InvalidWordsOnCommit(evaluation)

        fields = self._commit_fields(evaluation)
        placed = len(self.session.grid.tentative_cells())
        self._committing = True
        try:
            stored = await self.publish(fields)
        finally:
            self._committing = False
        logger.info('%s committed %d tiles for %d points (%s)', self.session.player_id,
                    placed, evaluation.totalScore,
                    ', '.join(evaluation.validWords))
        try:
            self.apply_snapshot(stored)
        except StaleSnapshot:
            # the change feed already delivered something newer
            pass
        return evaluation

    def _commit_fields(self, evaluation: Evaluation) -> Dict[str, Any]:
        state = self.session.state
        slot = state.slot_of(self.session.player_id)
        rack = self.session.letter_bag.refill(self.session.rack, Config.RACK_SIZE)
        fields: Dict[str, Any] = {
            'board': self.session.grid.to_sparse_map(),
            'player1Letters': list(state.player1Letters),
            'player2Letters': list(state.player2Letters),
            'player1Score': state.player1Score,
            'player2Score': state.player2Score,
            'currentTurn': state.opponent_of(self.session.player_id),
        }
        fields[f'{slot}Letters'] = rack
        fields[f'{slot}Score'] = state.score_of(self.session.player_id) + evaluation.totalScore
        return fields

    # Remote snapshots

    def apply_snapshot(self, state: GameState):
        session = self.session
        previous = session.state
        if previous is not None and previous.id == state.id and state.updatedAt < previous.updatedAt:
            raise StaleSnapshot(state.updatedAt, previous.updatedAt)

        grid = GridModel.from_sparse_map(state.board, session.grid.size)
        had_turn = self._holds_turn(previous)
        overlay = session.grid.tentative_letters()

        session.state = state.model_copy(deep=True)
        session.grid = grid
        session.snapshot = grid.copy()
        session.rack = state.letters_of(session.player_id)

        holds_turn = self._holds_turn(state)
        if overlay:
            if all(session.grid.letter_at(row, col) == letter for (row, col), letter in overlay.items()):
                logger.debug('Tentative tiles are committed at revision %d', state.updatedAt)
            elif holds_turn and self._restore(overlay):
                logger.debug('Kept %d tentative tiles over revision %d', len(overlay), state.updatedAt)
            else:
                logger.info('Discarded %d tentative tiles for %s at revision %d',
                            len(overlay), session.player_id, state.updatedAt)
        if holds_turn and not had_turn:
            logger.info('Turn granted to %s at revision %d', session.player_id, state.updatedAt)

    def _restore(self, overlay: Dict[Position, str]) -> bool:
        grid = self.session.grid
        if any(grid.letter_at(row, col) for row, col in overlay):
            return False
        if Counter(overlay.values()) - Counter(self.session.rack):
            return False
        for (row, col), letter in overlay.items():
            grid.place_tentative(row, col, letter)
            self.session.rack.remove(letter)
        return True
