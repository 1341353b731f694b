from unittest.mock import AsyncMock

import pytest

from conftest import make_state
from wordgrid.errors import (CellOccupied, EditWithoutPermission, InvalidWordsOnCommit,
                             LetterNotInRack, StaleSnapshot, StoreError)
from wordgrid.letter_bag import LETTER_WEIGHTS
from wordgrid.schemas import COMMIT_FIELDS
from wordgrid.words import new_words

# row 0 reads "שלו", column 3 reads "ים"; placing מ at (0,3) makes "שלום" and "מים"
BOARD = {'0,0': 'ש', '0,1': 'ל', '0,2': 'ו', '1,3': 'י', '2,3': 'מ'}


def echo_publisher(controller):
    """Stands in for the store: merges the fields and bumps the revision."""
    async def publish(fields):
        state = controller.session.state
        return state.model_copy(update={**fields, 'updatedAt': state.updatedAt + 1}, deep=True)
    return AsyncMock(side_effect=publish)


@pytest.mark.parametrize('overrides', [
    {'status': 'waiting', 'player2': None, 'player2Name': None},
    {'status': 'finished'},
    {'currentTurn': 'bob'},
])
def test_edits_refused_without_the_turn(controller, overrides):
    controller.apply_snapshot(make_state(**overrides))
    assert not controller.can_edit
    with pytest.raises(EditWithoutPermission):
        controller.place(0, 0, 'מ')
    assert controller.session.grid.occupied_count == 0


def test_edits_refused_before_any_snapshot(controller):
    assert not controller.can_edit
    with pytest.raises(EditWithoutPermission):
        controller.place(0, 0, 'מ')


def test_spectator_never_edits(dictionary):
    from wordgrid.managers.session import GameSession
    from wordgrid.managers.turn import TurnController
    controller = TurnController(GameSession('carol', dictionary=dictionary))
    controller.apply_snapshot(make_state(currentTurn='carol'))
    assert not controller.can_edit
    assert controller.session.rack == []


def test_place_moves_letter_from_rack_to_grid(controller):
    controller.apply_snapshot(make_state())
    assert controller.can_edit
    controller.place(4, 4, 'א')
    assert controller.session.grid.tentative_letters() == {(4, 4): 'א'}
    assert controller.session.rack == list('מבגדהוז')


def test_place_requires_the_letter_in_rack(controller):
    controller.apply_snapshot(make_state())
    with pytest.raises(LetterNotInRack):
        controller.place(4, 4, 'ת')


def test_place_on_occupied_cell_keeps_rack(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    with pytest.raises(CellOccupied):
        controller.place(0, 0, 'א')
    assert controller.session.rack == list('מאבגדהוז')


def test_retract_and_move(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.place(5, 5, 'א')
    controller.move(5, 5, 6, 6)
    assert controller.session.grid.letter_at(6, 6) == 'א'
    assert controller.retract(6, 6) == 'א'
    assert controller.session.rack == list('מבגדהוזא')
    assert controller.session.grid.to_sparse_map() == BOARD


def test_reset_turn_returns_every_tile(controller):
    controller.apply_snapshot(make_state())
    controller.place(0, 0, 'א')
    controller.place(0, 1, 'ב')
    controller.reset_turn()
    assert controller.session.grid.occupied_count == 0
    assert sorted(controller.session.rack) == sorted('מאבגדהוז')


def test_snapshot_taken_when_turn_is_granted(controller):
    controller.apply_snapshot(make_state(board=BOARD, currentTurn='bob'))
    controller.apply_snapshot(make_state(board=BOARD, updatedAt=2))
    assert controller.can_edit
    assert controller.session.snapshot.to_sparse_map() == BOARD
    controller.place(0, 3, 'מ')
    assert controller.session.snapshot.to_sparse_map() == BOARD


def test_review_lists_new_words(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.place(0, 3, 'מ')
    result = controller.review()
    assert result.validWords == sorted(['שלום', 'מים'])
    assert result.totalScore == 10
    assert controller.session.grid.is_tentative(0, 3)


@pytest.mark.asyncio
async def test_finish_turn_commits_and_passes_the_turn(controller):
    controller.apply_snapshot(make_state(board=BOARD, player1Score=3, player2Score=7))
    controller.publish = echo_publisher(controller)
    controller.place(0, 3, 'מ')

    result = await controller.finish_turn()

    assert result.totalScore == 10
    fields = controller.publish.await_args.args[0]
    assert set(fields) == set(COMMIT_FIELDS)
    assert fields['board'] == {**BOARD, '0,3': 'מ'}
    assert fields['currentTurn'] == 'bob'
    assert fields['player1Score'] == 13
    assert fields['player2Score'] == 7
    assert fields['player2Letters'] == list('ימתנכהרש')

    session = controller.session
    assert session.current_turn == 'bob'
    assert session.score == 13
    assert not controller.can_edit
    assert session.grid.tentative_cells() == []
    assert session.grid.letter_at(0, 3) == 'מ'
    assert new_words(session.grid, session.snapshot) == set()


@pytest.mark.asyncio
async def test_rack_is_replenished_in_order(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.publish = echo_publisher(controller)
    controller.place(0, 3, 'מ')
    controller.place(7, 7, 'ב')
    kept = list(controller.session.rack)
    assert len(kept) == 6

    await controller.finish_turn()

    rack = controller.session.rack
    assert len(rack) == 8
    assert rack[:6] == kept
    assert set(rack[6:]) <= set(LETTER_WEIGHTS)


@pytest.mark.asyncio
async def test_invalid_word_rejects_the_whole_turn(controller):
    board = {'0,0': 'ש', '0,1': 'ל', '0,2': 'ו', '1,3': 'ז', '2,3': 'ז'}
    controller.apply_snapshot(make_state(board=board, player1Score=3))
    controller.publish = AsyncMock()
    controller.place(0, 3, 'מ')

    with pytest.raises(InvalidWordsOnCommit) as info:
        await controller.finish_turn()

    assert info.value.invalid_words == ['מזז']
    assert info.value.evaluation.validWords == ['שלום']
    controller.publish.assert_not_awaited()
    session = controller.session
    assert session.grid.tentative_letters() == {(0, 3): 'מ'}
    assert session.score == 3
    assert session.current_turn == 'alice'
    assert controller.can_edit


@pytest.mark.asyncio
async def test_failed_push_keeps_the_turn_open(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.publish = AsyncMock(side_effect=StoreError('offline'))
    controller.place(0, 3, 'מ')

    with pytest.raises(StoreError):
        await controller.finish_turn()

    assert controller.can_edit
    assert controller.session.grid.tentative_letters() == {(0, 3): 'מ'}
    assert controller.session.rack == list('אבגדהוז')


@pytest.mark.asyncio
async def test_edits_refused_while_commit_in_flight(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.place(0, 3, 'מ')
    seen = []

    async def publish(fields):
        seen.append(controller.can_edit)
        with pytest.raises(EditWithoutPermission):
            controller.place(5, 5, 'א')
        state = controller.session.state
        return state.model_copy(update={**fields, 'updatedAt': 2}, deep=True)

    controller.publish = publish
    await controller.finish_turn()
    assert seen == [False]


@pytest.mark.asyncio
async def test_finish_turn_needs_a_publisher(controller):
    controller.apply_snapshot(make_state())
    with pytest.raises(RuntimeError):
        await controller.finish_turn()


def test_same_snapshot_twice_is_idempotent(controller):
    state = make_state(board=BOARD, updatedAt=4)
    controller.apply_snapshot(state)
    controller.place(0, 3, 'מ')
    before = (controller.session.grid.to_sparse_map(), list(controller.session.rack),
              controller.session.current_turn)

    controller.apply_snapshot(state)
    first = (controller.session.grid.to_sparse_map(), list(controller.session.rack),
             controller.session.current_turn)
    controller.apply_snapshot(state)
    second = (controller.session.grid.to_sparse_map(), list(controller.session.rack),
              controller.session.current_turn)

    assert before == first == second
    assert controller.session.grid.tentative_cells() == [(0, 3)]


def test_older_snapshot_is_refused(controller):
    controller.apply_snapshot(make_state(updatedAt=5))
    with pytest.raises(StaleSnapshot):
        controller.apply_snapshot(make_state(board=BOARD, updatedAt=3))
    assert controller.session.grid.occupied_count == 0
    assert controller.session.state.updatedAt == 5


def test_losing_the_turn_discards_tentative_tiles(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.place(0, 3, 'מ')
    controller.place(5, 5, 'א')

    controller.apply_snapshot(make_state(board=BOARD, status='finished', updatedAt=2))

    assert controller.session.grid.tentative_cells() == []
    assert controller.session.grid.to_sparse_map() == BOARD
    assert controller.session.rack == list('מאבגדהוז')
    assert not controller.can_edit


def test_tiles_dropped_when_cell_taken_remotely(controller):
    controller.apply_snapshot(make_state())
    controller.place(0, 0, 'א')
    controller.apply_snapshot(make_state(board={'0,0': 'ת'}, updatedAt=2))
    assert controller.session.grid.to_sparse_map() == {'0,0': 'ת'}
    assert controller.session.grid.tentative_cells() == []
    assert controller.session.rack == list('מאבגדהוז')
    assert controller.can_edit


def test_tiles_dropped_when_rack_changed_remotely(controller):
    controller.apply_snapshot(make_state())
    controller.place(0, 0, 'א')
    controller.apply_snapshot(make_state(player1Letters=list('בגד'), updatedAt=2))
    assert controller.session.grid.occupied_count == 0
    assert controller.session.rack == list('בגד')


def test_tiles_survive_unrelated_update(controller):
    controller.apply_snapshot(make_state())
    controller.place(0, 0, 'א')
    controller.apply_snapshot(make_state(player2Name='Robert', updatedAt=2))
    assert controller.session.grid.tentative_letters() == {(0, 0): 'א'}
    assert controller.session.rack == list('מבגדהוז')


def test_malformed_snapshot_leaves_session_untouched(controller):
    controller.apply_snapshot(make_state(board=BOARD))
    controller.place(0, 3, 'מ')
    with pytest.raises(ValueError):
        controller.apply_snapshot(make_state(board={'11,0': 'א'}, updatedAt=2))
    assert controller.session.state.updatedAt == 1
    assert controller.session.grid.tentative_letters() == {(0, 3): 'מ'}
