"""
Tests for level files on disk, move scripts and the JSON config
"""

import json
import sys
import tempfile
from pathlib import Path
from board_system import MoveKind
from config_io import DEFAULT_CONFIG, load_game_config
from level_loader import find_level_path, list_levels, load_level, neighbour_level, save_script
from map_parser import MalformedLevel, parse_level_text

LEVEL = """; Tiny
[map]
FE

[objects]
P.
"""


def write_levels(folder: Path, names):
    for name in names:
        (folder / f"{name}.lvl").write_text(LEVEL, encoding="utf-8")


def test_list_and_find():
    """Test: level list is sorted, lookup ignores case"""
    print("\n[Test 1] Level discovery")

    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        write_levels(folder, ["b2", "A1", "c3"])
        (folder / "notes.txt").write_text("not a level", encoding="utf-8")

        assert list_levels(folder) == ["A1", "b2", "c3"]
        assert find_level_path("a1", folder) == folder / "A1.lvl"
        assert find_level_path("zz", folder) is None
        assert list_levels(folder / "missing") == []

    print("[OK] PASS: levels found")


def test_neighbour_level_wraps():
    """Test: next/previous level wrap around the sorted list"""
    print("\n[Test 2] Level navigation")

    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        write_levels(folder, ["01", "02", "03"])
        assert neighbour_level("01", folder, 1) == "02"
        assert neighbour_level("03", folder, 1) == "01"
        assert neighbour_level("01", folder, -1) == "03"
        assert neighbour_level("unknown", folder, 1) == "01"
        assert neighbour_level("01", folder / "missing", 1) is None

    print("[OK] PASS: navigation wraps")


def test_load_level():
    """Test: loading attaches id and title; missing or broken files raise"""
    print("\n[Test 3] Load level")

    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        write_levels(folder, ["tiny"])
        level = load_level("TINY", folder)
        assert level['id'] == "tiny"
        assert level['name'] == "Tiny"
        assert level['source'].actors == [(0, 0)]

        try:
            load_level("nope", folder)
            assert False, "Expected FileNotFoundError"
        except FileNotFoundError:
            pass

        (folder / "broken.lvl").write_text("[map]\nF?\n", encoding="utf-8")
        try:
            load_level("broken", folder)
            assert False, "Expected MalformedLevel"
        except MalformedLevel:
            pass

    print("[OK] PASS: level loading")


def test_save_script():
    """Test: saved scripts parse back as a [solution] section"""
    print("\n[Test 4] Save script")

    moves = [(0, MoveKind.ACTION), (1, MoveKind.DOWN), (0, MoveKind.LEFT)]
    with tempfile.TemporaryDirectory() as tmp:
        path = save_script(Path(tmp) / "scripts" / "tiny.moves", moves)
        text = path.read_text(encoding="utf-8")
        assert text.startswith("[solution]\n")
        source = parse_level_text(LEVEL + "\n" + text)
        assert source.solution == moves

    print("[OK] PASS: script written")


def test_game_config():
    """Test: defaults apply, file values override, dirs resolve next to the file"""
    print("\n[Test 5] Config")

    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        cfg = load_game_config(folder / "config.json")
        assert cfg["levels_dir"] == folder / DEFAULT_CONFIG["levels_dir"]
        assert cfg["playback_delay_ms"] == DEFAULT_CONFIG["playback_delay_ms"]

        (folder / "config.json").write_text(
            json.dumps({"start_level": 7, "playback_delay_ms": -5, "levels_dir": "maps"}),
            encoding="utf-8")
        cfg = load_game_config(folder / "config.json")
        assert cfg["start_level"] == "7"
        assert cfg["playback_delay_ms"] == 0
        assert cfg["levels_dir"] == folder / "maps"

        (folder / "config.json").write_text("{ not json", encoding="utf-8")
        try:
            load_game_config(folder / "config.json")
            assert False, "Expected SystemExit"
        except SystemExit:
            pass

    print("[OK] PASS: config merged")


def run_all_tests():
    """Run all loader tests"""
    print("=" * 60)
    print("LEVEL LOADER TESTS")
    print("=" * 60)

    try:
        test_list_and_find()
        test_neighbour_level_wraps()
        test_load_level()
        test_save_script()
        test_game_config()

        print("\n" + "=" * 60)
        print("ALL TESTS PASSED [OK]")
        print("=" * 60)
        return True

    except AssertionError as e:
        print(f"\nX TEST FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
