# presentation_model.py - Presentation Model Layer (Layer 2)
#
# Transforms game state into visual specifications.
# This layer decides WHAT to display, not HOW to display it.

from dataclasses import dataclass
from typing import Optional, List
from board_system import MoveResult, Position
from cell_registry import REGISTRY
from map_parser import format_solution


@dataclass
class FrameViewSpec:
    """Complete visual specification for one frame.

    Cells are handed over as registry codes; the renderer decodes them.
    """
    grid_codes: List[List[int]]
    width: int
    height: int
    active_pos: Optional[Position]

    # Counters
    level_id: str
    level_title: str
    move_count: int
    solved_count: int
    total_count: int

    # Status line
    message: str
    is_replaying: bool
    is_victory: bool
    animation_frame: int

    # Debug info
    input_sequence: str


class ViewModelBuilder:
    """Transforms game state into visual specifications."""

    HISTORY_TAIL = 12  # moves shown in the debug line

    @staticmethod
    def build(controller, animation_frame: int, level_title: str = '') -> FrameViewSpec:
        state = controller.state
        status = controller.status()

        grid_codes = [[REGISTRY.code_of(cell) for cell in row] for row in state.cells]

        return FrameViewSpec(
            grid_codes=grid_codes,
            width=state.width,
            height=state.height,
            active_pos=None if controller.victory else state.active_pos,
            level_id=status.level_id,
            level_title=level_title or status.level_id,
            move_count=status.move_count,
            solved_count=status.solved_count,
            total_count=status.total_count,
            message=ViewModelBuilder._message(controller.last_result),
            is_replaying=status.replaying,
            is_victory=controller.victory,
            animation_frame=animation_frame,
            input_sequence=format_solution(controller.history[:ViewModelBuilder.HISTORY_TAIL]).replace('\n', ' ')
        )

    @staticmethod
    def _message(result: MoveResult) -> str:
        """Status text for the last command; silence on success"""
        if result == MoveResult.OK:
            return ''
        return result.value.capitalize()
