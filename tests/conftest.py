import pytest

from wordgrid.dictionary import DictionaryService
from wordgrid.letter_bag import LetterBag
from wordgrid.managers.session import GameSession
from wordgrid.managers.turn import TurnController
from wordgrid.schemas import GameState

WORDS = ['שלום', 'מים', 'ים', 'שלו', 'אב', 'שש', 'ששש', 'בית']


def make_state(**overrides) -> GameState:
    fields = dict(
        id='g1',
        player1='alice',
        player1Name='Alice',
        player2='bob',
        player2Name='Bob',
        board={},
        player1Letters=list('מאבגדהוז'),
        player2Letters=list('ימתנכהרש'),
        player1Score=0,
        player2Score=0,
        currentTurn='alice',
        status='active',
        updatedAt=1,
    )
    fields.update(overrides)
    return GameState(**fields)


@pytest.fixture()
def dictionary():
    return DictionaryService(WORDS)


@pytest.fixture()
def session(dictionary):
    return GameSession('alice', dictionary=dictionary, letter_bag=LetterBag.seeded(7))


@pytest.fixture()
def controller(session):
    return TurnController(session)
