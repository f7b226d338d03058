# game_controller.py - Game Controller

import logging
from dataclasses import dataclass
from typing import Optional, List, Tuple
from board_system import SessionState, MoveKind, MoveResult, LevelSource, init_session_from_source
from game_logic import GameLogic
from map_parser import format_solution

logger = logging.getLogger(__name__)


@dataclass
class GameStatus:
    """Counters shown by the front-end."""
    level_id: str
    move_count: int
    solved_count: int
    total_count: int
    replaying: bool


class GameController:
    def __init__(self, source: LevelSource, level_id: str = ''):
        self.source = source
        self.level_id = level_id
        self.state: Optional[SessionState] = None

        self.move_count = 0
        self.solved_count = 0
        self.victory = False

        # (actor slot, move) pairs, most recent first
        self.history: List[Tuple[int, MoveKind]] = []
        self.replay_queue: List[Tuple[int, MoveKind]] = []
        self.last_result = MoveResult.OK

        self.reset()

    def reset(self):
        """Restart level"""
        self.state = init_session_from_source(self.source)
        self.move_count = 0
        self.history.clear()
        self.replay_queue.clear()
        self.last_result = MoveResult.OK
        self._update_solved()

    def load(self, source: LevelSource, level_id: str = ''):
        """Replace the level. Parsing happens before this, so a bad file never gets here."""
        self.source = source
        self.level_id = level_id
        self.reset()
        logger.info("level %s loaded: %sx%s, %s actors",
                    level_id, source.width, source.height, len(source.actors))

    def _update_solved(self):
        self.solved_count = self.state.solved_count
        self.victory = self.state.is_solved()

    @property
    def total_count(self) -> int:
        return self.state.total_count

    @property
    def solution(self) -> List[Tuple[int, MoveKind]]:
        return self.source.solution

    def handle_move(self, kind: MoveKind) -> MoveResult:
        """Apply one directional move or the action, and commit it for undo."""
        if self.victory:
            return MoveResult.NO_ACTOR

        kind = MoveKind(kind)
        slot = self.state.active_index
        # ACTION has the value LEFT|RIGHT, so test it before direction lookup
        if kind == MoveKind.ACTION:
            result = GameLogic.do_action(self.state)
        else:
            result = GameLogic.move_active(self.state, kind)

        self.last_result = result
        if result != MoveResult.OK:
            logger.debug("move %s by actor %s failed: %s", kind.name, slot, result.value)
            return result

        self.state.undo_log.commit()
        self.move_count += 1
        self.history.insert(0, (slot, kind))
        self._update_solved()
        if self.victory:
            logger.info("level %s solved in %s moves", self.level_id, self.move_count)
        return result

    def select(self, shift: int = 1, index: Optional[int] = None) -> MoveResult:
        """Switch controlled actor (undoable up to the last committed move)"""
        result = GameLogic.select_actor(self.state, shift=shift, index=index)
        self.last_result = result
        return result

    def undo(self) -> MoveResult:
        """Undo the last move, plus any selection made after it."""
        if not self.state.undo_log.undo(self.state):
            self.last_result = MoveResult.UNDO_STACK_EMPTY
            return self.last_result

        self.move_count -= 1
        if self.history:
            self.history.pop(0)
        self._update_solved()
        self.last_result = MoveResult.OK
        return self.last_result

    def status(self) -> GameStatus:
        return GameStatus(
            level_id=self.level_id,
            move_count=self.move_count,
            solved_count=self.solved_count,
            total_count=self.total_count,
            replaying=bool(self.replay_queue)
        )

    def export_solution(self) -> str:
        """Current move history in the level file's solution format"""
        return format_solution(self.history)

    # ===== Scripted Replay =====
    def start_replay(self, moves: Optional[List[Tuple[int, MoveKind]]] = None) -> bool:
        """Restart and queue a script (default: the level's solution)."""
        moves = list(self.solution if moves is None else moves)
        if not moves:
            return False
        self.reset()
        # Scripts are stored most recent first
        self.replay_queue = list(reversed(moves))
        return True

    def stop_replay(self):
        self.replay_queue.clear()

    def replay_step(self) -> MoveResult:
        """Issue the next scripted move. A failing step ends the replay."""
        if not self.replay_queue:
            return MoveResult.NOTHING_TO_DO
        slot, kind = self.replay_queue.pop(0)

        if slot != self.state.active_index:
            result = self.select(index=slot)
            if result != MoveResult.OK:
                logger.warning("replay stopped: actor %s not selectable", slot)
                self.stop_replay()
                return result

        result = self.handle_move(kind)
        if result != MoveResult.OK:
            logger.warning("replay stopped at %s%s: %s", slot, kind.name, result.value)
            self.stop_replay()
        return result
