"""
Dual-layer Map Parser
Symbol definitions:
  Structure: ' ' (empty) # (breakable wall) @ (impassable wall)
             F (floor) E (exit) T (teleport)
             L R U D (one-way movers) H (horizontal) V (vertical) A (any direction)
  Objects:   M (man) P (active man)
             lower-case structure letter (box of that kind, e.g. t = teleport box)
             anything else is ignored

Actor slots are numbered in left-to-right, top-to-bottom order.

A level file holds [map], [objects] and optional [solution] sections.
A section runs until a blank line, a ';' comment line, the next header or EOF.
"""

import logging
from typing import Dict, List, Optional, Tuple

from cell_registry import Cell, CellType, Kind, EMPTY, WALL, IMPASSABLE, floor, box, man
from board_system import LevelSource, MoveKind, Position

logger = logging.getLogger(__name__)


class MalformedLevel(ValueError):
    """Level text that cannot be turned into a LevelSource."""


FLOOR_SYMBOLS: Dict[str, Kind] = {
    'F': Kind.SIMPLE,
    'E': Kind.EXIT,
    'T': Kind.TELEPORT,
    'L': Kind.MOVE_LEFT,
    'R': Kind.MOVE_RIGHT,
    'U': Kind.MOVE_UP,
    'D': Kind.MOVE_DOWN,
    'H': Kind.MOVE_HORIZONTAL,
    'V': Kind.MOVE_VERTICAL,
    'A': Kind.MOVE_ANY,
}

STRUCTURE_SYMBOLS: Dict[str, Cell] = {
    ' ': EMPTY,
    '#': WALL,
    '@': IMPASSABLE,
}
STRUCTURE_SYMBOLS.update({char: floor(kind) for char, kind in FLOOR_SYMBOLS.items()})

BOX_SYMBOLS: Dict[str, Kind] = {char.lower(): kind for char, kind in FLOOR_SYMBOLS.items()}

MAN_SYMBOL = 'M'
ACTIVE_MAN_SYMBOL = 'P'

MOVE_SYMBOLS: Dict[str, MoveKind] = {
    'L': MoveKind.LEFT,
    'R': MoveKind.RIGHT,
    'U': MoveKind.UP,
    'D': MoveKind.DOWN,
    'X': MoveKind.ACTION,
}
MOVE_LETTERS: Dict[MoveKind, str] = {kind: char for char, kind in MOVE_SYMBOLS.items()}

SECTION_HEADERS = ('[map]', '[objects]', '[solution]')
COMMENT_CHAR = ';'
TOKENS_PER_LINE = 16


def _map_lines(map_str: str) -> List[str]:
    # Leading/trailing newlines of a triple-quoted literal are not rows
    lines = map_str.split('\n')
    while lines and lines[0] == '':
        lines.pop(0)
    while lines and lines[-1] == '':
        lines.pop()
    return lines


def parse_dual_layer(floor_map_str: str, object_map_str: str,
                     solution_str: str = '') -> LevelSource:
    """
    Parse structural + objects map strings and return a LevelSource.
    Short rows are padded with empty cells; objects outside the
    structural map are dropped.
    """
    floor_lines = _map_lines(floor_map_str)
    object_lines = _map_lines(object_map_str)

    if not floor_lines:
        raise MalformedLevel("Structural map is empty")

    width = max(len(line) for line in floor_lines)
    height = len(floor_lines)

    cells: List[List[Cell]] = []
    actors: List[Position] = []
    active_index: Optional[int] = None

    for y, line in enumerate(floor_lines):
        row: List[Cell] = []
        objects = object_lines[y] if y < len(object_lines) else ''
        for x in range(width):
            char = line[x] if x < len(line) else ' '
            if char not in STRUCTURE_SYMBOLS:
                raise MalformedLevel(f"Unknown map character {char!r} at ({x}, {y})")
            cell = STRUCTURE_SYMBOLS[char]
            obj = objects[x] if x < len(objects) else ' '

            # Objects only land on floors
            if cell.type == CellType.FLOOR:
                if obj in BOX_SYMBOLS:
                    cell = box(BOX_SYMBOLS[obj])
                elif obj in (MAN_SYMBOL, ACTIVE_MAN_SYMBOL):
                    active = obj == ACTIVE_MAN_SYMBOL
                    if active and active_index is not None:
                        logger.warning("extra active man at (%s, %s) demoted", x, y)
                        active = False
                    if active:
                        active_index = len(actors)
                    cell = man(cell.kind, active=active)
                    actors.append((x, y))
            row.append(cell)
        cells.append(row)

    if not actors:
        raise MalformedLevel("No man (M or P) found")
    if active_index is None:
        active_index = 0
        x, y = actors[0]
        cells[y][x] = man(cells[y][x].kind, active=True)

    teleports = [(x, y) for y in range(height) for x in range(width)
                 if cells[y][x].kind == Kind.TELEPORT]

    return LevelSource(
        width=width,
        height=height,
        cells=cells,
        actors=actors,
        active_index=active_index,
        teleports=teleports,
        solution=parse_solution(solution_str)
    )


def parse_solution(solution_str: str) -> List[Tuple[int, MoveKind]]:
    """Parse '<slot><letter>' tokens, most recent move first."""
    moves = []
    for token in solution_str.split():
        slot, letter = token[:-1], token[-1:].upper()
        if not slot.isdigit() or letter not in MOVE_SYMBOLS:
            raise MalformedLevel(f"Bad solution token {token!r}")
        moves.append((int(slot), MOVE_SYMBOLS[letter]))
    return moves


def format_solution(moves: List[Tuple[int, MoveKind]]) -> str:
    """Inverse of parse_solution"""
    tokens = [f"{slot}{MOVE_LETTERS[MoveKind(kind)]}" for slot, kind in moves]
    lines = [' '.join(tokens[i:i + TOKENS_PER_LINE])
             for i in range(0, len(tokens), TOKENS_PER_LINE)]
    return '\n'.join(lines)


def split_sections(text: str) -> Dict[str, str]:
    """Split level text into {header: body}."""
    sections: Dict[str, List[str]] = {}
    current = None
    for raw in text.splitlines():
        line = raw.rstrip('\r')
        header = line.strip().lower()
        if header in SECTION_HEADERS:
            current = header
            sections[current] = []
        elif line == '' or line.startswith(COMMENT_CHAR):
            current = None
        elif current is not None:
            sections[current].append(line)
    return {name: '\n'.join(lines) for name, lines in sections.items()}


def parse_level_text(text: str) -> LevelSource:
    """Parse a whole level file."""
    sections = split_sections(text)
    if '[map]' not in sections:
        raise MalformedLevel("Level has no [map] section")
    return parse_dual_layer(
        sections['[map]'],
        sections.get('[objects]', ''),
        sections.get('[solution]', '')
    )


def parse_level(level_id, name, text):
    """
    Convenience function: parse a level file and attach metadata.

    Returns:
        Dict with LevelSource and metadata
    """
    source = parse_level_text(text)

    return {
        'id': level_id,
        'name': name,
        'source': source,
    }
