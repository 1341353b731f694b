from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .config import Config
from .errors import CellOccupied, CellOutOfBounds, NotTentative

Position = Tuple[int, int]


def cell_key(row: int, col: int) -> str:
    return f'{row},{col}'


def parse_cell_key(key: str) -> Position:
    parts = key.split(',')
    if len(parts) != 2:
        raise ValueError(f'Malformed cell key {key!r}')
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f'Malformed cell key {key!r}') from None


# Committed cells are never overwritten; tentative ones belong to the current turn
class GridModel:
    def __init__(self, size: int = Config.GRID_SIZE):
        self.size = size
        self._cells: List[List[Optional[str]]] = [[None] * size for _ in range(size)]
        self._tentative: Set[Position] = set()

    def _check(self, row: int, col: int):
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise CellOutOfBounds(row, col)

    def letter_at(self, row: int, col: int) -> Optional[str]:
        self._check(row, col)
        return self._cells[row][col]

    def is_tentative(self, row: int, col: int) -> bool:
        return (row, col) in self._tentative

    def tentative_cells(self) -> List[Position]:
        return sorted(self._tentative)

    def tentative_letters(self) -> Dict[Position, str]:
        return {pos: self._cells[pos[0]][pos[1]] for pos in sorted(self._tentative)}

    @property
    def occupied_count(self) -> int:
        return sum(1 for row in self._cells for letter in row if letter)

    def place_tentative(self, row: int, col: int, letter: str):
        self._check(row, col)
        if self._cells[row][col]:
            raise CellOccupied(row, col)
        self._cells[row][col] = letter
        self._tentative.add((row, col))

    def retract_tentative(self, row: int, col: int) -> str:
        self._check(row, col)
        if (row, col) not in self._tentative:
            raise NotTentative(row, col)
        letter = self._cells[row][col]
        self._cells[row][col] = None
        self._tentative.discard((row, col))
        return letter

    def move_tentative(self, from_row: int, from_col: int, to_row: int, to_col: int):
        self._check(to_row, to_col)
        if (from_row, from_col) == (to_row, to_col):
            if not self.is_tentative(from_row, from_col):
                raise NotTentative(from_row, from_col)
            return
        if self._cells[to_row][to_col]:
            raise CellOccupied(to_row, to_col)
        letter = self.retract_tentative(from_row, from_col)
        self.place_tentative(to_row, to_col, letter)

    def commit(self) -> List[Position]:
        committed = sorted(self._tentative)
        self._tentative.clear()
        return committed

    def discard_tentative(self) -> List[str]:
        letters = []
        for row, col in sorted(self._tentative):
            letters.append(self._cells[row][col])
            self._cells[row][col] = None
        self._tentative.clear()
        return letters

    def to_sparse_map(self) -> Dict[str, str]:
        return {
            cell_key(r, c): letter
            for r, row in enumerate(self._cells)
            for c, letter in enumerate(row)
            if letter
        }

    def load_from_sparse_map(self, board: Mapping[str, str]):
        cells: List[List[Optional[str]]] = [[None] * self.size for _ in range(self.size)]
        for key, letter in board.items():
            row, col = parse_cell_key(key)
            if not (0 <= row < self.size and 0 <= col < self.size):
                raise ValueError(f'Cell key {key!r} is outside a {self.size}x{self.size} grid')
            if not isinstance(letter, str) or len(letter) != 1:
                raise ValueError(f'Cell {key!r} must hold a single letter, got {letter!r}')
            cells[row][col] = letter
        self._cells = cells
        self._tentative.clear()

    @classmethod
    def from_sparse_map(cls, board: Mapping[str, str], size: int = Config.GRID_SIZE) -> 'GridModel':
        grid = cls(size)
        grid.load_from_sparse_map(board)
        return grid

    @classmethod
    def from_rows(cls, rows: Iterable[str], size: int = Config.GRID_SIZE) -> 'GridModel':
        # '.' or ' ' is an empty cell
        board = {}
        for r, line in enumerate(rows):
            for c, ch in enumerate(line):
                if ch not in '. ':
                    board[cell_key(r, c)] = ch
        return cls.from_sparse_map(board, size)

    def copy(self) -> 'GridModel':
        other = GridModel(self.size)
        other._cells = [list(row) for row in self._cells]
        other._tentative = set(self._tentative)
        return other

    def rows(self) -> List[List[Optional[str]]]:
        return [list(row) for row in self._cells]

    def columns(self) -> List[List[Optional[str]]]:
        return [[self._cells[r][c] for r in range(self.size)] for c in range(self.size)]
