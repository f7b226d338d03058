# game_logic.py - Game Rules and Actions

import logging
from typing import Optional

from board_system import (
    SessionState, Position, MoveKind, MoveResult, DIRECTION_DELTA, PERMITTED_DIRECTIONS
)
from cell_registry import Cell, CellType, Kind, EMPTY, floor, man

logger = logging.getLogger(__name__)

WALL_BREAK_POWER = 3


def step(pos: Position, direction: MoveKind) -> Position:
    dx, dy = DIRECTION_DELTA[direction]
    return (pos[0] + dx, pos[1] + dy)


class GameLogic:
    @staticmethod
    def underlying_kind(cell: Cell) -> Kind:
        """Floor kind left under a cell; boxes replace the floor they sit on."""
        if cell.type == CellType.BOX or cell.kind is None:
            return Kind.SIMPLE
        return cell.kind

    @staticmethod
    def permits(kind: Optional[Kind], direction: MoveKind) -> bool:
        """Check if a moving floor of this kind carries a rider in direction"""
        return bool(PERMITTED_DIRECTIONS.get(kind, 0) & direction)

    @staticmethod
    def try_move(state: SessionState, pos: Position, direction: MoveKind, power: int) -> bool:
        """Resolve the mover at pos one step in direction.

        power is the pushing strength accumulated behind the mover. Nothing is
        written unless the whole chain in front of it can move.
        """
        cell = state.cell_at(pos)

        if cell.is_man():
            power += 1
        elif cell.type == CellType.BOX:
            if power <= 0:
                return False
            power -= 1
        else:
            return False

        dest = step(pos, direction)
        if not state.in_bound(dest):
            return False
        target = state.cell_at(dest)

        # Floor, or something that moves out of the way
        if target.type == CellType.FLOOR or (
                (target.is_man() or target.type == CellType.BOX)
                and GameLogic.try_move(state, dest, direction, power)):
            GameLogic._settle(state, pos, dest, cell, GameLogic.underlying_kind(state.cell_at(dest)))
            return True

        # Breakable wall
        if target.type == CellType.WALL and power >= WALL_BREAK_POWER:
            logger.debug("wall at %s broken with power %s", dest, power)
            state.set_cell(dest, floor(Kind.SIMPLE))
            GameLogic._settle(state, pos, dest, cell, Kind.SIMPLE)
            return True

        if target.type != CellType.EMPTY:
            return False

        # Box into empty space becomes terrain
        if cell.type == CellType.BOX:
            state.set_cell(dest, floor(cell.kind))
            if cell.kind == Kind.TELEPORT:
                state.add_teleport(dest)
            return True

        # Active man rides a moving floor across the empty run
        if cell.type == CellType.ACTIVE_MAN and GameLogic.permits(cell.kind, direction):
            landing = dest
            ahead = step(landing, direction)
            while state.in_bound(ahead) and state.cell_at(ahead).type == CellType.EMPTY:
                landing = ahead
                ahead = step(landing, direction)
            logger.debug("ride from %s to %s", pos, landing)
            state.set_cell(landing, cell)
            state.set_cell(pos, EMPTY)
            GameLogic._move_actor(state, pos, landing)
            return True

        return False

    @staticmethod
    def _settle(state: SessionState, origin: Position, dest: Position, cell: Cell, dest_kind: Kind):
        """Put the mover on dest; a man leaves its own floor behind."""
        if cell.type == CellType.BOX:
            # The pusher behind overwrites the origin
            state.set_cell(dest, cell)
            return
        state.set_cell(dest, Cell(cell.type, dest_kind))
        state.set_cell(origin, floor(cell.kind))
        GameLogic._move_actor(state, origin, dest)

    @staticmethod
    def _move_actor(state: SessionState, origin: Position, dest: Position):
        slot = state.actor_at(origin)
        if slot is not None:
            state.set_actor(slot, dest)

    @staticmethod
    def blocked_reason(state: SessionState, pos: Position, direction: MoveKind) -> MoveResult:
        """Explain a failed move.

        The chain lacked power if a box in it was reached with none left, or
        if it ends on a breakable wall.
        """
        power = 1
        ahead = step(pos, direction)
        while state.in_bound(ahead):
            cell = state.cell_at(ahead)
            if cell.is_man():
                power += 1
            elif cell.type == CellType.BOX:
                if power <= 0:
                    return MoveResult.INSUFFICIENT_POWER
                power -= 1
            else:
                break
            ahead = step(ahead, direction)
        if state.in_bound(ahead) and state.cell_at(ahead).type == CellType.WALL:
            return MoveResult.INSUFFICIENT_POWER
        return MoveResult.BLOCKED

    @staticmethod
    def move_active(state: SessionState, direction: MoveKind) -> MoveResult:
        """Move the active actor one command in direction"""
        pos = state.active_pos
        if pos is None:
            return MoveResult.NO_ACTOR
        if GameLogic.try_move(state, pos, direction, 0):
            return MoveResult.OK
        return GameLogic.blocked_reason(state, pos, direction)

    # ===== Actions =====
    @staticmethod
    def do_action(state: SessionState) -> MoveResult:
        """Exit or teleport, depending on the active actor's floor"""
        pos = state.active_pos
        if pos is None:
            return MoveResult.NO_ACTOR
        kind = state.cell_at(pos).kind
        if kind == Kind.EXIT:
            return GameLogic.try_exit(state)
        if kind == Kind.TELEPORT:
            return GameLogic.try_teleport(state)
        return MoveResult.NOTHING_TO_DO

    @staticmethod
    def try_exit(state: SessionState) -> MoveResult:
        slot = state.active_index
        pos = state.actors[slot]
        state.set_cell(pos, floor(Kind.EXIT))
        state.set_actor(slot, None)
        logger.info("actor %s exited (%s/%s)", slot, state.solved_count, state.total_count)
        # No live slot left means the board is solved; nothing to select
        GameLogic.select_actor(state, shift=1)
        return MoveResult.OK

    @staticmethod
    def try_teleport(state: SessionState) -> MoveResult:
        if len(state.teleports) < 2:
            return MoveResult.TELEPORT_BROKEN
        pos = state.active_pos
        count = len(state.teleports)
        start = state.teleports.index(pos) + 1 if pos in state.teleports else 0
        for i in range(count):
            target = state.teleports[(start + i) % count]
            if target != pos and state.cell_at(target) == floor(Kind.TELEPORT):
                state.set_cell(pos, floor(Kind.TELEPORT))
                state.set_cell(target, man(Kind.TELEPORT, active=True))
                state.set_actor(state.active_index, target)
                logger.debug("teleported %s -> %s", pos, target)
                return MoveResult.OK
        return MoveResult.TELEPORT_BLOCKED

    # ===== Actor Selection =====
    @staticmethod
    def select_actor(state: SessionState, shift: int = 1, index: Optional[int] = None) -> MoveResult:
        """Make another actor active.

        With index, jump to that slot; otherwise step cyclically by shift,
        skipping vacated slots. Reaching the starting slot again is a no-op.
        """
        count = len(state.actors)
        if count == 0:
            return MoveResult.NO_ACTOR
        start = state.active_index

        if index is not None:
            if not 0 <= index < count or state.actors[index] is None:
                return MoveResult.NO_ACTOR
            chosen = index
        else:
            chosen = None
            i = start
            for _ in range(count):
                i = (i + shift) % count
                if i == start:
                    break
                if state.actors[i] is not None:
                    chosen = i
                    break
            if chosen is None:
                return MoveResult.NO_ACTOR

        if chosen == start:
            return MoveResult.OK

        old_pos = state.actors[start]
        if old_pos is not None:
            state.set_cell(old_pos, man(state.cell_at(old_pos).kind))
        new_pos = state.actors[chosen]
        state.set_cell(new_pos, man(state.cell_at(new_pos).kind, active=True))
        state.set_active(chosen)
        logger.debug("selected actor %s", chosen)
        return MoveResult.OK
