import numpy as np
import pytest

from metamesh.core.tables import (
    CASE_TABLE,
    CUBE_CORNERS,
    EDGE_CORNERS,
    TRI_TABLE,
    CaseTable,
    InvariantViolation,
    corner_mask,
)


def _bits(mask: int) -> np.ndarray:
    return np.array([(mask >> i) & 1 for i in range(8)], dtype=bool)


def test_fully_outside_and_inside_masks_have_no_triangles() -> None:
    assert CASE_TABLE.triangle_count(0) == 0
    assert CASE_TABLE.triangle_count(255) == 0
    assert CASE_TABLE.triangles(0) == ()
    assert CASE_TABLE.triangles(255) == ()


def test_every_mixed_mask_has_between_one_and_five_triangles() -> None:
    for mask in range(1, 255):
        assert 1 <= CASE_TABLE.triangle_count(mask) <= 5
        assert len(CASE_TABLE.triangles(mask)) == CASE_TABLE.triangle_count(mask)


def test_known_rows() -> None:
    assert CASE_TABLE.triangles(1) == ((0, 8, 3),)
    assert CASE_TABLE.triangles(3) == ((1, 8, 3), (9, 8, 1))
    assert CASE_TABLE.crossed_edges(1) == (0, 3, 8)


def test_triangle_edges_straddle_the_surface() -> None:
    for mask in range(256):
        inside = _bits(mask)
        sign_changes = {
            e for e, (a, b) in enumerate(EDGE_CORNERS) if inside[a] != inside[b]
        }
        assert set(CASE_TABLE.crossed_edges(mask)) == sign_changes


def test_edges_join_adjacent_corners() -> None:
    for edge in range(12):
        a, b = CASE_TABLE.edge_corners(edge)
        assert np.abs(CUBE_CORNERS[a] - CUBE_CORNERS[b]).sum() == 1


def test_tables_are_read_only() -> None:
    with pytest.raises(ValueError):
        CASE_TABLE.tri_table[1, 0] = 5
    with pytest.raises(ValueError):
        CASE_TABLE.edges[0, 0] = 3


def test_out_of_range_mask_is_an_invariant_violation() -> None:
    with pytest.raises(InvariantViolation):
        CASE_TABLE.triangles(256)
    with pytest.raises(InvariantViolation):
        CASE_TABLE.triangle_count(-1)
    with pytest.raises(InvariantViolation):
        CASE_TABLE.edge_corners(12)


def test_inconsistent_tables_are_rejected() -> None:
    bad_edges = EDGE_CORNERS.copy()
    bad_edges[0] = [0, 6]  # body diagonal, not a cube edge
    with pytest.raises(InvariantViolation):
        CaseTable(edges=bad_edges)

    bad_tri = TRI_TABLE.copy()
    bad_tri[255, :3] = [0, 8, 3]
    with pytest.raises(InvariantViolation):
        CaseTable(tri_table=bad_tri)

    with pytest.raises(InvariantViolation):
        CaseTable(tri_table=TRI_TABLE[:128])


def test_corner_mask_sets_bit_for_non_negative_values() -> None:
    values = np.array([0.0, -1.0, 2.0, -0.5, -3.0, -1.0, -1.0, 1e-9])
    assert corner_mask(values) == 0b10000101
    assert corner_mask(np.full(8, -1.0)) == 0
    assert corner_mask(np.full(8, 1.0)) == 255
    with pytest.raises(InvariantViolation):
        corner_mask(np.zeros(7))


def test_lookup_is_deterministic() -> None:
    other = CaseTable()
    for mask in range(256):
        assert other.triangles(mask) == CASE_TABLE.triangles(mask)
        assert CASE_TABLE.triangles(mask) is CASE_TABLE.triangles(mask)
