"""
Unit tests for the cell registry

Every valid (type, floor kind, box kind) combination has exactly one code,
and codes decode back to the same cell.
"""

import sys
from cell_registry import (
    REGISTRY, Cell, CellRegistry, CellType, Kind, InvalidCellCode,
    BARE_TYPES, FLOOR_TYPES, all_cells
)


def test_round_trip_all_combinations():
    """Test: decode(encode(x)) == x for every valid combination"""
    print("\n[Test 1] Round trip")

    checked = 0
    for cell_type in BARE_TYPES:
        code = REGISTRY.encode(cell_type)
        assert REGISTRY.decode(code) == Cell(cell_type), f"{cell_type} did not round trip"
        checked += 1
    for cell_type in FLOOR_TYPES:
        for kind in Kind:
            code = REGISTRY.encode(cell_type, floor_kind=kind)
            assert REGISTRY.decode(code) == Cell(cell_type, kind), f"{cell_type}/{kind} did not round trip"
            checked += 1
    for kind in Kind:
        code = REGISTRY.encode(CellType.BOX, box_kind=kind)
        decoded = REGISTRY.decode(code)
        assert decoded == Cell(CellType.BOX, kind), f"box/{kind} did not round trip"
        assert decoded.box_kind == kind and decoded.floor_kind is None
        checked += 1

    assert checked == len(REGISTRY), f"Expected {len(REGISTRY)} combinations, checked {checked}"
    print(f"[OK] PASS: {checked} combinations round trip")


def test_codes_are_dense_and_unique():
    """Test: codes are 0..n-1 with no collisions"""
    print("\n[Test 2] Dense codes")

    codes = [REGISTRY.code_of(cell) for cell in all_cells()]
    assert sorted(codes) == list(range(len(codes))), f"Codes not dense: {codes}"
    assert len(REGISTRY) == 3 + 3 * len(Kind) + len(Kind)
    assert CellRegistry().code_of(Cell(CellType.WALL)) == REGISTRY.code_of(Cell(CellType.WALL))

    print("[OK] PASS: codes are dense, unique and stable")


def test_decode_unknown_code():
    """Test: codes outside the table raise InvalidCellCode"""
    print("\n[Test 3] Unknown codes")

    for code in (-1, len(REGISTRY), 1000, "3", True, False):
        try:
            REGISTRY.decode(code)
            assert False, f"Expected InvalidCellCode for {code!r}"
        except InvalidCellCode:
            pass

    print("[OK] PASS: unknown codes rejected")


def test_encode_invalid_combination():
    """Test: kinds on bare cells or on the wrong slot are rejected"""
    print("\n[Test 4] Invalid combinations")

    bad = [
        (CellType.WALL, Kind.SIMPLE, None),
        (CellType.IMPASSABLE, None, Kind.EXIT),
        (CellType.BOX, Kind.SIMPLE, None),
        (CellType.MAN, None, Kind.SIMPLE),
        (CellType.FLOOR, None, None),
    ]
    for cell_type, floor_kind, box_kind in bad:
        try:
            REGISTRY.encode(cell_type, floor_kind=floor_kind, box_kind=box_kind)
            assert False, f"Expected InvalidCellCode for {cell_type}/{floor_kind}/{box_kind}"
        except InvalidCellCode:
            pass
    assert issubclass(InvalidCellCode, ValueError)

    print("[OK] PASS: invalid combinations rejected")


def run_all_tests():
    """Run all registry tests"""
    print("=" * 60)
    print("CELL REGISTRY UNIT TESTS")
    print("=" * 60)

    try:
        test_round_trip_all_combinations()
        test_codes_are_dense_and_unique()
        test_decode_unknown_code()
        test_encode_invalid_combination()

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
