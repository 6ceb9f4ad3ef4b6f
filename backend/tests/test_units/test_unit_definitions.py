"""Tests for the built-in unit definitions."""

import pytest

from quillty.models.units import GridPosition, Span
from quillty.units import builtin_units
from quillty.units.flying_geese import (
    FLIP_H_MAP as FG_FLIP_H,
    FLIP_V_MAP as FG_FLIP_V,
    ROTATION_MAP as FG_ROTATION,
    FlyingGeeseDefinition,
    direction_between,
    span_for_direction,
)
from quillty.units.hst import FLIP_H_MAP, FLIP_V_MAP, ROTATION_MAP, HstDefinition
from quillty.units.qst import QstDefinition


def pos(row, col):
    return GridPosition(row=row, col=col)


QST_ROLES = {"top": "a", "right": "b", "bottom": "c", "left": "d"}


class TestVariantMaps:
    @pytest.mark.parametrize("rotation", [ROTATION_MAP, FG_ROTATION], ids=["hst", "flying_geese"])
    def test_four_rotations_return_home(self, rotation):
        for start in rotation:
            current = start
            for _ in range(4):
                current = rotation[current]
            assert current == start

    @pytest.mark.parametrize(
        "flip", [FLIP_H_MAP, FLIP_V_MAP, FG_FLIP_H, FG_FLIP_V], ids=["hst_h", "hst_v", "fg_h", "fg_v"]
    )
    def test_flips_are_involutions(self, flip):
        assert all(flip[flip[v]] == v for v in flip)

    def test_hst_rotation_is_clockwise(self):
        assert ROTATION_MAP["nw"] == "ne"
        assert ROTATION_MAP["sw"] == "nw"


class TestQstPermutations:
    def test_rotate(self):
        assert QstDefinition().rotate_patch_roles(QST_ROLES) == {
            "top": "d", "right": "a", "bottom": "b", "left": "c",
        }

    def test_four_rotations_return_home(self):
        definition = QstDefinition()
        roles = dict(QST_ROLES)
        for _ in range(4):
            roles = definition.rotate_patch_roles(roles)
        assert roles == QST_ROLES

    def test_flips(self):
        definition = QstDefinition()
        assert definition.flip_horizontal_patch_roles(QST_ROLES) == {
            "top": "a", "right": "d", "bottom": "c", "left": "b",
        }
        assert definition.flip_vertical_patch_roles(QST_ROLES) == {
            "top": "c", "right": "b", "bottom": "a", "left": "d",
        }


class TestFlyingGeese:
    def test_span_follows_direction(self):
        assert span_for_direction("right") == Span(rows=1, cols=2)
        assert span_for_direction("left") == Span(rows=1, cols=2)
        assert span_for_direction("up") == Span(rows=2, cols=1)
        assert FlyingGeeseDefinition().span_for("down") == Span(rows=2, cols=1)

    def test_metadata(self):
        definition = FlyingGeeseDefinition()
        assert definition.placement_mode == "two_tap"
        assert not definition.supports_batch_placement
        assert definition.wide_in_picker
        assert definition.patch_ids == ["goose", "sky1", "sky2"]

    def test_placement_lists_free_neighbours(self):
        occupied = {(0, 1)}
        result = FlyingGeeseDefinition().validate_placement(
            pos(0, 0), 3, lambda p: (p.row, p.col) in occupied
        )
        assert result.valid
        assert result.valid_adjacent_cells == [pos(1, 0)]

    def test_placement_without_room(self):
        result = FlyingGeeseDefinition().validate_placement(pos(0, 0), 2, lambda p: True)
        assert not result.valid
        assert result.reason == "No adjacent empty cells available for Flying Geese"
        assert result.valid_adjacent_cells == []

    @pytest.mark.parametrize(
        "second, expected",
        [((1, 2), "right"), ((1, 0), "left"), ((2, 1), "down"), ((0, 1), "up"), ((2, 2), None), ((1, 1), None)],
    )
    def test_direction_between(self, second, expected):
        assert direction_between(pos(1, 1), pos(*second)) == expected


class TestBuiltins:
    def test_every_patch_has_a_default_role(self):
        for definition in builtin_units():
            roles = definition.default_patch_roles()
            assert list(roles) == definition.patch_ids
            assert set(roles.values()) == {"background"}

    def test_hst_variants(self):
        definition = HstDefinition()
        assert definition.variant_ids == ["nw", "ne", "sw", "se"]
        assert definition.default_variant == "nw"

    def test_thumbnails_present(self):
        assert all(d.thumbnail is not None for d in builtin_units())
