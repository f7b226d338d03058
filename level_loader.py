from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from board_system import MoveKind
from map_parser import COMMENT_CHAR, format_solution, parse_level

logger = logging.getLogger(__name__)

LEVEL_SUFFIX = ".lvl"
SCRIPT_SUFFIX = ".moves"


def list_levels(levels_dir: Path) -> List[str]:
    """Level identifiers (file stems) in the levels folder, sorted."""
    if not levels_dir.is_dir():
        return []
    return sorted(f.stem for f in levels_dir.glob(f"*{LEVEL_SUFFIX}"))


def find_level_path(name: str, levels_dir: Path) -> Optional[Path]:
    """Resolve a level name against .lvl files in the levels folder (case-insensitive)."""
    exact = levels_dir / f"{name}{LEVEL_SUFFIX}"
    if exact.exists():
        return exact
    if levels_dir.is_dir():
        for f in levels_dir.glob(f"*{LEVEL_SUFFIX}"):
            if f.stem.lower() == name.lower():
                return f
    return None


def _level_title(text: str, default: str) -> str:
    """The first comment line of a level file doubles as its title."""
    for line in text.splitlines():
        if line.startswith(COMMENT_CHAR):
            title = line.lstrip(COMMENT_CHAR).strip()
            if title:
                return title
    return default


def load_level(name: str, levels_dir: Path) -> Dict[str, Any]:
    """Load and parse a level by name.

    Returns:
        Dict with 'id', 'name' and 'source' (see map_parser.parse_level).

    Raises:
        FileNotFoundError: If there is no such level file.
        MalformedLevel: If the file does not parse.
    """
    path = find_level_path(name, levels_dir)
    if path is None:
        raise FileNotFoundError(
            f"Level '{name}' not found.\n"
            f"- Looked for file: {levels_dir / f'{name}{LEVEL_SUFFIX}'}"
        )
    text = path.read_text(encoding="utf-8")
    level = parse_level(path.stem, _level_title(text, path.stem), text)
    logger.debug("read level %s from %s", path.stem, path)
    return level


def neighbour_level(name: str, levels_dir: Path, offset: int) -> Optional[str]:
    """Level `offset` places away from name in the sorted level list, wrapping."""
    names = list_levels(levels_dir)
    if not names:
        return None
    lowered = [n.lower() for n in names]
    if name.lower() not in lowered:
        return names[0]
    return names[(lowered.index(name.lower()) + offset) % len(names)]


def save_script(path: Path, moves: Sequence[Tuple[int, MoveKind]]) -> Path:
    """Write a move list (most recent first) as a [solution] section."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[solution]\n" + format_solution(list(moves)) + "\n", encoding="utf-8")
    logger.info("saved %s moves to %s", len(moves), path)
    return path
