# renderer.py - Pygame Rendering System (Layer 3)
#
# Pure rendering layer. Receives visual specifications from presentation_model
# and draws pixels. Does NOT make game logic decisions.

import pygame
from board_system import MoveKind, DIRECTION_DELTA
from cell_registry import REGISTRY, Cell, CellType, Kind
from typing import Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from presentation_model import FrameViewSpec


# Constants
PADDING = 20
HEADER_HEIGHT = 60
FOOTER_HEIGHT = 40

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GRAY = (200, 200, 200)
DARK_GRAY = (100, 100, 100)
YELLOW = (255, 200, 0)
BLUE = (0, 100, 200)
RED = (200, 50, 50)
BROWN = (150, 100, 50)
BACKGROUND = (30, 30, 30)

KIND_COLORS = {
    Kind.SIMPLE: (235, 235, 235),
    Kind.EXIT: YELLOW,
    Kind.TELEPORT: (180, 140, 230),
}
MOVER_COLOR = (150, 220, 220)

# Arrows drawn on moving floors
KIND_ARROWS = {
    Kind.MOVE_LEFT: (MoveKind.LEFT,),
    Kind.MOVE_RIGHT: (MoveKind.RIGHT,),
    Kind.MOVE_UP: (MoveKind.UP,),
    Kind.MOVE_DOWN: (MoveKind.DOWN,),
    Kind.MOVE_HORIZONTAL: (MoveKind.LEFT, MoveKind.RIGHT),
    Kind.MOVE_VERTICAL: (MoveKind.UP, MoveKind.DOWN),
    Kind.MOVE_ANY: (MoveKind.LEFT, MoveKind.RIGHT, MoveKind.UP, MoveKind.DOWN),
}


def window_size(width: int, height: int, cell_size: int) -> Tuple[int, int]:
    """Window size needed for a width x height board."""
    board_w = width * cell_size + PADDING * 2
    board_h = height * cell_size + PADDING * 2 + HEADER_HEIGHT + FOOTER_HEIGHT
    return max(board_w, 480), board_h


class Renderer:
    def __init__(self, screen: pygame.Surface, cell_size: int):
        self.screen = screen
        self.cell_size = cell_size
        self.font = pygame.font.Font(None, 24)
        self.big_font = pygame.font.Font(None, 72)

    def floor_color(self, kind: Kind) -> Tuple[int, int, int]:
        return KIND_COLORS.get(kind, MOVER_COLOR)

    def draw_arrow(self, cx: int, cy: int, direction: MoveKind, size: int, color: Tuple):
        """Draw a triangular arrow pointing in direction."""
        dx, dy = DIRECTION_DELTA[direction]
        half = size // 2
        if dy == -1:  # Up
            points = [(cx, cy - size), (cx - half, cy - half), (cx + half, cy - half)]
        elif dy == 1:  # Down
            points = [(cx, cy + size), (cx - half, cy + half), (cx + half, cy + half)]
        elif dx == -1:  # Left
            points = [(cx - size, cy), (cx - half, cy - half), (cx - half, cy + half)]
        else:  # Right
            points = [(cx + size, cy), (cx + half, cy - half), (cx + half, cy + half)]
        pygame.draw.polygon(self.screen, color, points)

    def draw_kind_marks(self, rect: pygame.Rect, kind: Kind, color: Tuple):
        size = self.cell_size // 3
        for direction in KIND_ARROWS.get(kind, ()):
            self.draw_arrow(rect.centerx, rect.centery, direction, size, color)

    def draw_cell(self, rect: pygame.Rect, cell: Cell, is_active: bool, animation_frame: int):
        """Draw one cell"""
        if cell.type == CellType.EMPTY:
            return
        if cell.type == CellType.IMPASSABLE:
            pygame.draw.rect(self.screen, BLACK, rect)
            return
        if cell.type == CellType.WALL:
            pygame.draw.rect(self.screen, BROWN, rect)
            pygame.draw.rect(self.screen, BLACK, rect, 2)
            return

        if cell.type == CellType.BOX:
            pygame.draw.rect(self.screen, DARK_GRAY, rect)
            inner = rect.inflate(-self.cell_size // 4, -self.cell_size // 4)
            pygame.draw.rect(self.screen, self.floor_color(cell.kind), inner)
            pygame.draw.rect(self.screen, BLACK, inner, 2)
            self.draw_kind_marks(inner, cell.kind, DARK_GRAY)
            return

        # Floors and men share the floor drawing
        pygame.draw.rect(self.screen, self.floor_color(cell.kind), rect)
        pygame.draw.rect(self.screen, GRAY, rect, 1)
        self.draw_kind_marks(rect, cell.kind, DARK_GRAY)

        if cell.is_man():
            color = RED if cell.type == CellType.ACTIVE_MAN else BLUE
            radius = self.cell_size // 3
            if is_active and (animation_frame // 20) % 2:
                radius += 2
            pygame.draw.circle(self.screen, color, rect.center, radius)
            pygame.draw.circle(self.screen, BLACK, rect.center, radius, 2)

    def draw_board(self, spec: 'FrameViewSpec', start_x: int, start_y: int):
        for y, row in enumerate(spec.grid_codes):
            for x, code in enumerate(row):
                rect = pygame.Rect(
                    start_x + x * self.cell_size,
                    start_y + y * self.cell_size,
                    self.cell_size, self.cell_size
                )
                self.draw_cell(rect, REGISTRY.decode(code), (x, y) == spec.active_pos,
                               spec.animation_frame)

    def draw_header(self, spec: 'FrameViewSpec'):
        title = self.font.render(f"Level {spec.level_id}: {spec.level_title}", True, WHITE)
        self.screen.blit(title, (PADDING, PADDING))
        counters = f"Moves: {spec.move_count}   Out: {spec.solved_count}/{spec.total_count}"
        if spec.is_replaying:
            counters += "   [replay]"
        text = self.font.render(counters, True, GRAY)
        self.screen.blit(text, (PADDING, PADDING + 24))

    def draw_footer(self, spec: 'FrameViewSpec'):
        y = self.screen.get_height() - FOOTER_HEIGHT + 10
        line = spec.message or f"Last: {spec.input_sequence}"
        color = YELLOW if spec.message else DARK_GRAY
        text = self.font.render(line, True, color)
        self.screen.blit(text, (PADDING, y))

    def draw_overlay(self, text: str, color: Tuple):
        """Draw overlay"""
        width, height = self.screen.get_size()
        overlay = pygame.Surface((width, height))
        overlay.set_alpha(180)
        overlay.fill(color)
        self.screen.blit(overlay, (0, 0))

        big_text = self.big_font.render(text, True, YELLOW)
        self.screen.blit(big_text, big_text.get_rect(center=(width // 2, height // 2 - 30)))

        hint = self.font.render("N next level  R restart  Z undo", True, WHITE)
        self.screen.blit(hint, hint.get_rect(center=(width // 2, height // 2 + 20)))

    def draw_frame(self, spec: 'FrameViewSpec'):
        """
        Main entry point for rendering a complete frame.

        Args:
            spec: FrameViewSpec containing all visual information
        """
        self.screen.fill(BACKGROUND)
        self.draw_header(spec)
        self.draw_board(spec, PADDING, PADDING + HEADER_HEIGHT)
        self.draw_footer(spec)

        if spec.is_victory:
            self.draw_overlay("LEVEL COMPLETE!", (0, 0, 0))
