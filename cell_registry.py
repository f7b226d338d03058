# cell_registry.py - Cell Variants and Compact Codes

from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum


class CellType(Enum):
    EMPTY = "empty"
    WALL = "wall"
    IMPASSABLE = "impassable"
    FLOOR = "floor"
    MAN = "man"
    ACTIVE_MAN = "active_man"
    BOX = "box"


class Kind(Enum):
    """Behavioral tag shared by floors, men (their floor) and boxes."""
    SIMPLE = "simple"
    EXIT = "exit"
    TELEPORT = "teleport"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_HORIZONTAL = "move_horizontal"
    MOVE_VERTICAL = "move_vertical"
    MOVE_ANY = "move_any"


# Types that never carry a kind
BARE_TYPES = (CellType.EMPTY, CellType.WALL, CellType.IMPASSABLE)
# Types whose kind is a floor kind
FLOOR_TYPES = (CellType.FLOOR, CellType.MAN, CellType.ACTIVE_MAN)
MAN_TYPES = (CellType.MAN, CellType.ACTIVE_MAN)


class InvalidCellCode(ValueError):
    """Raised for a code (or type/kind combination) the registry does not know."""


@dataclass(frozen=True)
class Cell:
    """One grid value: a type tag plus the floor kind or box kind it carries."""
    type: CellType
    kind: Optional[Kind] = None

    @property
    def floor_kind(self) -> Optional[Kind]:
        return self.kind if self.type in FLOOR_TYPES else None

    @property
    def box_kind(self) -> Optional[Kind]:
        return self.kind if self.type == CellType.BOX else None

    def is_man(self) -> bool:
        return self.type in MAN_TYPES


EMPTY = Cell(CellType.EMPTY)
WALL = Cell(CellType.WALL)
IMPASSABLE = Cell(CellType.IMPASSABLE)


def floor(kind: Kind = Kind.SIMPLE) -> Cell:
    return Cell(CellType.FLOOR, kind)


def box(kind: Kind) -> Cell:
    return Cell(CellType.BOX, kind)


def man(kind: Kind, active: bool = False) -> Cell:
    return Cell(CellType.ACTIVE_MAN if active else CellType.MAN, kind)


def all_cells() -> List[Cell]:
    """Every valid cell value, in code order."""
    cells = [Cell(t) for t in BARE_TYPES]
    for cell_type in FLOOR_TYPES + (CellType.BOX,):
        cells.extend(Cell(cell_type, kind) for kind in Kind)
    return cells


class CellRegistry:
    """Bidirectional mapping between cells and dense integer codes.

    Codes are what the undo log stores and what the rendering boundary reads;
    the engine itself works on Cell values.
    """

    def __init__(self):
        self._cells: List[Cell] = all_cells()
        self._codes: Dict[Cell, int] = {cell: code for code, cell in enumerate(self._cells)}

    def __len__(self) -> int:
        return len(self._cells)

    def encode(self, cell_type: CellType, floor_kind: Optional[Kind] = None,
               box_kind: Optional[Kind] = None) -> int:
        if cell_type in BARE_TYPES:
            if floor_kind is not None or box_kind is not None:
                raise InvalidCellCode(f"{cell_type.value} cannot carry a kind")
            kind = None
        elif cell_type == CellType.BOX:
            if floor_kind is not None:
                raise InvalidCellCode("box cells carry a box kind, not a floor kind")
            kind = box_kind
        else:
            if box_kind is not None:
                raise InvalidCellCode(f"{cell_type.value} cells carry a floor kind, not a box kind")
            kind = floor_kind
        return self.code_of(Cell(cell_type, kind))

    def code_of(self, cell: Cell) -> int:
        try:
            return self._codes[cell]
        except KeyError:
            raise InvalidCellCode(f"No code for {cell}") from None

    def decode(self, code: int) -> Cell:
        if isinstance(code, bool) or not isinstance(code, int) or not 0 <= code < len(self._cells):
            raise InvalidCellCode(f"Unknown cell code: {code!r}")
        return self._cells[code]


REGISTRY = CellRegistry()
