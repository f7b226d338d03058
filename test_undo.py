"""
Unit tests for the undo log

Undo must restore the grid, actor table, active index and teleport list
exactly, including selection changes that were never committed.
"""

import sys
from board_system import MoveKind, MoveResult
from cell_registry import REGISTRY, Kind, WALL, floor, box
from game_controller import GameController
from map_parser import parse_dual_layer


CROWD_FLOOR = "FFF#FE"
CROWD_OBJECTS = "PMM..."
# 0R 0R 0R, 2X, 0R, 1X, 0R, 0X (oldest first)
CROWD_MOVES = [
    (0, MoveKind.RIGHT), (0, MoveKind.RIGHT), (0, MoveKind.RIGHT),
    (2, MoveKind.ACTION), (0, MoveKind.RIGHT), (1, MoveKind.ACTION),
    (0, MoveKind.RIGHT), (0, MoveKind.ACTION),
]


def create_controller(floor_map, object_map):
    return GameController(parse_dual_layer(floor_map, object_map), "test")


def play(controller, moves):
    """Issue (slot, move) pairs oldest first, selecting actors as needed."""
    for slot, kind in moves:
        if slot != controller.state.active_index:
            assert controller.select(index=slot) == MoveResult.OK, f"Cannot select {slot}"
        result = controller.handle_move(kind)
        assert result == MoveResult.OK, f"Move {slot}{kind.name} failed: {result}"


def test_exact_undo_after_sequence():
    """Test: N moves then N undos restores the starting state bit for bit"""
    print("\n[Test 1] Exact undo")

    controller = create_controller(CROWD_FLOOR, CROWD_OBJECTS)
    start = controller.state.snapshot()
    play(controller, CROWD_MOVES)
    assert controller.victory, "Sequence should solve the board"
    assert controller.move_count == len(CROWD_MOVES)

    for _ in CROWD_MOVES:
        assert controller.undo() == MoveResult.OK

    assert controller.state.snapshot() == start, "State differs after undoing everything"
    assert controller.move_count == 0
    assert controller.history == []
    assert controller.solved_count == 0 and not controller.victory
    assert controller.undo() == MoveResult.UNDO_STACK_EMPTY

    print("[OK] PASS: start state restored")


def test_undo_each_step_matches_snapshot():
    """Test: undo walks back through every intermediate state"""
    print("\n[Test 2] Step-by-step undo")

    controller = create_controller(CROWD_FLOOR, CROWD_OBJECTS)
    snapshots = [controller.state.snapshot()]
    for move in CROWD_MOVES:
        play(controller, [move])
        snapshots.append(controller.state.snapshot())

    # Selections are folded into the following move's frame
    snapshots.pop()
    while snapshots:
        expected = snapshots.pop()
        assert controller.undo() == MoveResult.OK
        assert controller.state.snapshot() == expected, f"State differs after undo to move {len(snapshots)}"

    print("[OK] PASS: every intermediate grid restored")


def test_lifo_restores_earliest_prior():
    """Test: a cell written twice in one move gets its original value back"""
    print("\n[Test 3] LIFO reversal")

    controller = create_controller("FFF#FF", "PMM...")
    controller.select(index=0)
    assert controller.handle_move(MoveKind.RIGHT) == MoveResult.OK
    frame = controller.state.undo_log.frames[-1]
    wall_writes = [code for pos, code in frame.writes if pos == (3, 0)]
    assert len(wall_writes) == 2, f"Expected 2 writes to the wall cell, got {len(wall_writes)}"
    assert REGISTRY.decode(wall_writes[0]) == WALL
    assert REGISTRY.decode(wall_writes[1]) == floor(Kind.SIMPLE)

    controller.undo()
    assert controller.state.cell_at((3, 0)) == WALL, "Wall must come back"

    print("[OK] PASS: earliest prior left standing")


def test_first_touch_capture():
    """Test: actor/active/teleport priors are captured once per move"""
    print("\n[Test 4] First-touch capture")

    controller = create_controller("TFTF", "P..M")
    state = controller.state
    controller.select(index=1)
    controller.select(index=0)
    scratch = state.undo_log.scratch
    assert scratch.active_index == 0, "Prior active index is the one before the first switch"

    assert controller.handle_move(MoveKind.ACTION) == MoveResult.OK
    frame = state.undo_log.frames[-1]
    assert frame.actors == {0: (0, 0)}
    assert frame.active_index == 0
    assert frame.teleports is None, "Teleport list was not mutated"

    controller.undo()
    assert state.actors == [(0, 0), (3, 0)]
    assert state.active_index == 0

    print("[OK] PASS: priors captured on first touch")


def test_undo_uncommitted_selection():
    """Test: selection without a move is reversed by undo"""
    print("\n[Test 5] Uncommitted selection")

    controller = create_controller("FFF", "P.M")
    start = controller.state.snapshot()
    assert controller.select(shift=1) == MoveResult.OK
    assert controller.state.active_index == 1

    assert controller.undo() == MoveResult.UNDO_STACK_EMPTY
    assert controller.state.snapshot() == start
    assert controller.state.undo_log.scratch.is_empty()

    # Move, then switch: one undo reverses both
    assert controller.handle_move(MoveKind.RIGHT) == MoveResult.OK
    controller.select(shift=1)
    assert controller.undo() == MoveResult.OK
    assert controller.state.snapshot() == start
    assert controller.move_count == 0

    print("[OK] PASS: selection undone")


def test_undo_teleport_registration():
    """Test: undoing a box conversion restores the teleport list"""
    print("\n[Test 6] Teleport list restored")

    controller = create_controller("FF ", "Pt.")
    state = controller.state
    assert controller.handle_move(MoveKind.RIGHT) == MoveResult.OK
    assert state.teleports == [(1, 0), (2, 0)]
    assert state.undo_log.frames[-1].teleports == [(1, 0)]

    controller.undo()
    assert state.teleports == [(1, 0)]
    assert state.cell_at((1, 0)) == box(Kind.TELEPORT)

    print("[OK] PASS: teleport list restored")


def test_failed_move_leaves_no_frame():
    """Test: failures neither commit nor count"""
    print("\n[Test 7] Failed moves")

    controller = create_controller("F@", "P.")
    assert controller.handle_move(MoveKind.RIGHT) == MoveResult.BLOCKED
    assert controller.state.undo_log.frames == []
    assert controller.move_count == 0 and controller.history == []

    print("[OK] PASS: nothing committed")


def run_all_tests():
    """Run all undo tests"""
    print("=" * 60)
    print("UNDO UNIT TESTS")
    print("=" * 60)

    try:
        test_exact_undo_after_sequence()
        test_undo_each_step_matches_snapshot()
        test_lifo_restores_earliest_prior()
        test_first_touch_capture()
        test_undo_uncommitted_selection()
        test_undo_teleport_registration()
        test_failed_move_leaves_no_frame()

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
