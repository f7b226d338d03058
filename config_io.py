from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "levels_dir": "levels",
    "start_level": "01",
    "scripts_dir": "scripts",
    "playback_delay_ms": 250,
    "cell_size": 48,
    "log_level": "INFO",
}


def load_json_config(path: Path) -> Dict[str, Any]:
    """Load a JSON config file or raise a helpful error.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        Parsed JSON data as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        SystemExit: If JSON is invalid, with a friendly message.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = (
            f"\nERROR: Your config is not valid JSON.\n"
            f"File: {path}\n"
            f"Line {e.lineno}, Col {e.colno}\n"
            f"{e.msg}\n"
        )
        raise SystemExit(msg)


def load_game_config(path: Path) -> Dict[str, Any]:
    """Defaults overlaid with the config file, if there is one.

    Relative directories are resolved against the config file's folder.
    """
    cfg = dict(DEFAULT_CONFIG)
    if path.exists():
        raw = load_json_config(path)
        if not isinstance(raw, dict):
            raise SystemExit(f"\nERROR: {path} must contain a JSON object.\n")
        cfg.update(raw)
    for key in ("levels_dir", "scripts_dir"):
        p = Path(cfg[key])
        cfg[key] = p if p.is_absolute() else path.parent / p
    cfg["playback_delay_ms"] = max(0, int(cfg["playback_delay_ms"]))
    cfg["cell_size"] = max(8, int(cfg["cell_size"]))
    cfg["start_level"] = str(cfg["start_level"])
    return cfg
