# board_system.py - Session State and Undo Log

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum, IntEnum

from cell_registry import REGISTRY, Cell, Kind

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class MoveKind(IntEnum):
    """Move-history codes.

    ACTION shares its value with LEFT|RIGHT, so it must be compared
    explicitly before a value is treated as a direction.
    """
    LEFT = 1
    RIGHT = 2
    ACTION = 3
    UP = 4
    DOWN = 8


DIRECTION_DELTA: Dict[MoveKind, Position] = {
    MoveKind.LEFT: (-1, 0),
    MoveKind.RIGHT: (1, 0),
    MoveKind.UP: (0, -1),
    MoveKind.DOWN: (0, 1),
}

ALL_DIRECTIONS = MoveKind.LEFT | MoveKind.RIGHT | MoveKind.UP | MoveKind.DOWN

# Directions a rider may be carried in, as a bitmask of MoveKind values
PERMITTED_DIRECTIONS: Dict[Kind, int] = {
    Kind.MOVE_LEFT: MoveKind.LEFT,
    Kind.MOVE_RIGHT: MoveKind.RIGHT,
    Kind.MOVE_UP: MoveKind.UP,
    Kind.MOVE_DOWN: MoveKind.DOWN,
    Kind.MOVE_HORIZONTAL: MoveKind.LEFT | MoveKind.RIGHT,
    Kind.MOVE_VERTICAL: MoveKind.UP | MoveKind.DOWN,
    Kind.MOVE_ANY: ALL_DIRECTIONS,
}


class MoveResult(Enum):
    OK = "ok"
    BLOCKED = "blocked by terrain"
    INSUFFICIENT_POWER = "not enough power"
    TELEPORT_BROKEN = "teleport is broken"
    TELEPORT_BLOCKED = "teleport is blocked"
    NOTHING_TO_DO = "nothing interesting here"
    NO_ACTOR = "no actor to control"
    UNDO_STACK_EMPTY = "nothing to undo"


# ===== Static Configuration =====
@dataclass
class LevelSource:
    """Initial level produced by map_parser"""
    width: int
    height: int
    cells: List[List[Cell]]  # cells[y][x]
    actors: List[Position]
    active_index: int
    teleports: List[Position]
    solution: List[Tuple[int, MoveKind]] = field(default_factory=list)
    # most recent first, same as the move history


# ===== Undo Log =====
@dataclass
class UndoFrame:
    """Prior values needed to reverse one move.

    Every field except `writes` is captured on first touch only.
    """
    writes: List[Tuple[Position, int]] = field(default_factory=list)
    actors: Dict[int, Optional[Position]] = field(default_factory=dict)
    active_index: Optional[int] = None
    teleports: Optional[List[Position]] = None

    def is_empty(self) -> bool:
        return (not self.writes and not self.actors
                and self.active_index is None and self.teleports is None)


class UndoManager:
    def __init__(self):
        self.scratch = UndoFrame()
        self.frames: List[UndoFrame] = []

    def record_write(self, pos: Position, prior: Cell):
        self.scratch.writes.append((pos, REGISTRY.code_of(prior)))

    def record_actor(self, slot: int, prior: Optional[Position]):
        if slot not in self.scratch.actors:
            self.scratch.actors[slot] = prior

    def record_active(self, prior: int):
        if self.scratch.active_index is None:
            self.scratch.active_index = prior

    def record_teleports(self, prior: List[Position]):
        if self.scratch.teleports is None:
            self.scratch.teleports = list(prior)

    def commit(self):
        """Close the in-progress delta as one committed move."""
        self.frames.append(self.scratch)
        self.scratch = UndoFrame()

    def undo(self, state: 'SessionState') -> bool:
        """Reverse the uncommitted delta, then the last committed frame.

        Returns True if a committed frame was reversed.
        """
        self._reverse(state, self.scratch)
        self.scratch = UndoFrame()
        if not self.frames:
            return False
        self._reverse(state, self.frames.pop())
        return True

    @staticmethod
    def _reverse(state: 'SessionState', frame: UndoFrame):
        # Newest write first so the earliest prior of a cell is left standing
        for (x, y), code in reversed(frame.writes):
            state.cells[y][x] = REGISTRY.decode(code)
        for slot, pos in frame.actors.items():
            state.actors[slot] = pos
        if frame.active_index is not None:
            state.active_index = frame.active_index
        if frame.teleports is not None:
            state.teleports = list(frame.teleports)


# ===== Session State =====
class SessionState:
    """The mutable world of one level instance.

    All writes go through set_cell/set_actor/set_active/add_teleport so that
    the undo log sees them.
    """

    def __init__(self, width: int = 0, height: int = 0):
        self.width = width
        self.height = height
        self.cells: List[List[Cell]] = []
        self.actors: List[Optional[Position]] = []
        self.active_index: int = 0
        self.teleports: List[Position] = []
        self.undo_log = UndoManager()

    def in_bound(self, pos: Position) -> bool:
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def cell_at(self, pos: Position) -> Cell:
        x, y = pos
        return self.cells[y][x]

    def set_cell(self, pos: Position, cell: Cell):
        """The single cell-mutation primitive"""
        x, y = pos
        self.undo_log.record_write(pos, self.cells[y][x])
        self.cells[y][x] = cell

    def set_actor(self, slot: int, pos: Optional[Position]):
        self.undo_log.record_actor(slot, self.actors[slot])
        self.actors[slot] = pos

    def set_active(self, index: int):
        if index == self.active_index:
            return
        self.undo_log.record_active(self.active_index)
        self.active_index = index

    def add_teleport(self, pos: Position):
        if pos in self.teleports:
            return
        self.undo_log.record_teleports(self.teleports)
        self.teleports.append(pos)
        logger.debug("teleport registered at %s", pos)

    def actor_at(self, pos: Position) -> Optional[int]:
        """Slot index of the actor standing on pos"""
        for slot, actor_pos in enumerate(self.actors):
            if actor_pos == pos:
                return slot
        return None

    @property
    def active_pos(self) -> Optional[Position]:
        if not self.actors:
            return None
        return self.actors[self.active_index]

    @property
    def solved_count(self) -> int:
        return sum(1 for pos in self.actors if pos is None)

    @property
    def total_count(self) -> int:
        return len(self.actors)

    def is_solved(self) -> bool:
        return self.solved_count == self.total_count

    def snapshot(self) -> tuple:
        """Comparable copy of grid, actors, active index and teleports"""
        return (
            tuple(tuple(row) for row in self.cells),
            tuple(self.actors),
            self.active_index,
            tuple(self.teleports),
        )


# ===== Initialization Utility =====
def init_session_from_source(source: LevelSource) -> SessionState:
    """Create a fresh SessionState from LevelSource"""
    state = SessionState(source.width, source.height)
    state.cells = [list(row) for row in source.cells]
    state.actors = list(source.actors)
    state.active_index = source.active_index
    state.teleports = list(source.teleports)
    return state
