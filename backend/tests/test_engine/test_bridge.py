"""Tests for the unit config bridge."""

import pytest

from quillty.engine.bridge import (
    apply_flip_horizontal,
    apply_flip_vertical,
    apply_rotation,
    assign_patch_role,
    create_unit,
    get_all_role_ids,
    get_span_for_unit,
    get_unit_triangles_with_colors,
    normalize_span,
    patch_role_update,
    replace_role,
    to_unit_config,
    unit_uses_role,
    validate_unit_config,
)
from quillty.models.units import (
    FlyingGeesePatchRoles,
    FlyingGeeseUnit,
    GridPosition,
    HstUnit,
    Span,
    merge_unit_fields,
)
from quillty.units.flying_geese import span_for_direction
from tests.conftest import FLYING_GEESE, HST, QST, SAMPLE_PALETTE, SAMPLE_UNITS, SQUARE

VARIANT_KEYS = {"variant", "direction"}


def _apply(unit, update):
    return merge_unit_fields(unit, update) if update else unit


def _fg(direction):
    return FlyingGeeseUnit(
        id="fg",
        position=GridPosition(row=0, col=0),
        span=span_for_direction(direction),
        direction=direction,
        patch_fabric_roles=FlyingGeesePatchRoles(goose="feature", sky1="accent1", sky2="accent2"),
    )


# ---------------------------------------------------------------------------
# to_unit_config
# ---------------------------------------------------------------------------

class TestToUnitConfig:
    def test_square(self):
        config = to_unit_config(SQUARE)
        assert config.variant is None
        assert dict(config.patch_roles) == {"fill": "feature"}

    def test_hst(self):
        config = to_unit_config(HST)
        assert config.variant == "nw"
        assert dict(config.patch_roles) == {"primary": "feature", "secondary": "background"}

    def test_flying_geese(self):
        config = to_unit_config(FLYING_GEESE)
        assert config.variant == "right"
        assert dict(config.patch_roles) == {"goose": "feature", "sky1": "accent1", "sky2": "accent2"}

    def test_qst(self):
        config = to_unit_config(QST)
        assert config.variant is None
        assert set(config.patch_roles) == {"top", "right", "bottom", "left"}

    def test_role_queries(self):
        assert get_all_role_ids(FLYING_GEESE) == ["feature", "accent1", "accent2"]
        assert unit_uses_role(QST, "accent2")
        assert not unit_uses_role(SQUARE, "background")


# ---------------------------------------------------------------------------
# Rotation and flips
# ---------------------------------------------------------------------------

class TestRotation:
    def test_square_does_not_rotate(self):
        assert apply_rotation(SQUARE) is None

    def test_hst_cycle(self):
        seen = []
        unit = HST
        for _ in range(4):
            unit = _apply(unit, apply_rotation(unit))
            seen.append(unit.variant)
        assert seen == ["ne", "se", "sw", "nw"]

    def test_flying_geese_rotation_updates_span(self):
        update = apply_rotation(_fg("right"))
        assert update["direction"] == "down"
        assert update["span"] == {"rows": 2, "cols": 1}

    def test_qst_rotates_colors(self):
        update = apply_rotation(QST)
        assert update == {"patch_fabric_roles": {
            "top": "accent2", "right": "feature", "bottom": "background", "left": "accent1",
        }}

    @pytest.mark.parametrize("unit", SAMPLE_UNITS, ids=lambda u: u.type)
    def test_four_rotations_restore(self, unit):
        rotated = unit
        for _ in range(4):
            rotated = _apply(rotated, apply_rotation(rotated))
        assert rotated == unit


class TestFlip:
    def test_hst_flips(self):
        assert apply_flip_horizontal(HST) == {"variant": "ne"}
        assert apply_flip_vertical(HST) == {"variant": "sw"}

    def test_flying_geese_geometric_flip_keeps_colors(self):
        update = apply_flip_horizontal(_fg("right"))
        assert update["direction"] == "left"
        assert "patch_fabric_roles" not in update

    def test_flying_geese_color_flip_keeps_direction(self):
        update = apply_flip_horizontal(_fg("up"))
        assert "direction" not in update
        assert update["patch_fabric_roles"] == {"goose": "feature", "sky1": "accent2", "sky2": "accent1"}

    def test_flying_geese_vertical_mirror(self):
        assert apply_flip_vertical(_fg("up"))["direction"] == "down"
        assert "direction" not in apply_flip_vertical(_fg("left"))

    def test_qst_flips(self):
        h = _apply(QST, apply_flip_horizontal(QST)).patch_fabric_roles
        assert (h.left, h.right) == (QST.patch_fabric_roles.right, QST.patch_fabric_roles.left)
        v = _apply(QST, apply_flip_vertical(QST)).patch_fabric_roles
        assert (v.top, v.bottom) == (QST.patch_fabric_roles.bottom, QST.patch_fabric_roles.top)

    def test_square_does_not_flip(self):
        assert apply_flip_horizontal(SQUARE) is None
        assert apply_flip_vertical(SQUARE) is None

    @pytest.mark.parametrize("flip", [apply_flip_horizontal, apply_flip_vertical])
    @pytest.mark.parametrize("direction", ["up", "down", "left", "right"])
    def test_flying_geese_involution(self, flip, direction):
        unit = _fg(direction)
        once = _apply(unit, flip(unit))
        assert _apply(once, flip(once)) == unit

    @pytest.mark.parametrize("flip", [apply_flip_horizontal, apply_flip_vertical])
    @pytest.mark.parametrize("unit", SAMPLE_UNITS, ids=lambda u: u.type)
    def test_involution(self, flip, unit):
        once = _apply(unit, flip(unit))
        assert _apply(once, flip(once)) == unit

    @pytest.mark.parametrize("flip", [apply_flip_horizontal, apply_flip_vertical])
    @pytest.mark.parametrize("unit", [HST, QST, _fg("up"), _fg("right")],
                             ids=["hst", "qst", "fg-up", "fg-right"])
    def test_exactly_one_kind_of_change(self, flip, unit):
        update = flip(unit)
        variant_changed = bool(VARIANT_KEYS & set(update))
        roles_changed = _apply(unit, update) != unit and not variant_changed
        assert variant_changed != roles_changed


# ---------------------------------------------------------------------------
# Role assignment
# ---------------------------------------------------------------------------

class TestAssignRole:
    def test_default_patch_is_first(self):
        prev, nxt = assign_patch_role(HST, "accent1")
        assert prev == {"fabric_role": "feature", "secondary_fabric_role": "background"}
        assert nxt == {"fabric_role": "accent1", "secondary_fabric_role": "background"}

    def test_named_patch(self):
        _, nxt = assign_patch_role(FLYING_GEESE, "background", "sky2")
        updated = _apply(FLYING_GEESE, nxt)
        assert updated.patch_fabric_roles.sky2 == "background"
        assert updated.patch_fabric_roles.goose == "feature"

    def test_unknown_patch_falls_back_to_first(self):
        _, nxt = assign_patch_role(QST, "background", "middle")
        assert _apply(QST, nxt).patch_fabric_roles.top == "background"

    def test_replace_role(self):
        update = replace_role(QST, "feature", "accent1")
        replaced = _apply(QST, update).patch_fabric_roles
        assert replaced.top == "accent1"
        assert replaced.bottom == "accent1"

    def test_replace_role_no_match(self):
        assert replace_role(SQUARE, "accent2", "background") == {}

    def test_patch_role_update_shapes(self):
        assert patch_role_update("square", "fill", "x") == {"fabric_role": "x"}
        assert patch_role_update("hst", "secondary", "x") == {"secondary_fabric_role": "x"}
        assert patch_role_update("qst", "left", "x") == {"patch_fabric_roles": {"left": "x"}}
        assert patch_role_update("flying_geese", "sky1", "x") == {"patch_fabric_roles": {"sky1": "x"}}


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

class TestTrianglesWithColors:
    def test_dimensions_follow_span(self):
        tris = get_unit_triangles_with_colors(FLYING_GEESE, 10, SAMPLE_PALETTE)
        xs = [x for t in tris for x in t.points[0::2]]
        ys = [y for t in tris for y in t.points[1::2]]
        assert max(xs) == 20
        assert max(ys) == 10

    def test_colors_from_palette(self):
        tris = get_unit_triangles_with_colors(HST, 10, SAMPLE_PALETTE)
        assert [t.color for t in tris] == ["#1E3A5F", "#FFFFFF"]

    def test_override_wins(self):
        tris = get_unit_triangles_with_colors(SQUARE, 10, SAMPLE_PALETTE, {"feature": "#FF0000"})
        assert {t.color for t in tris} == {"#FF0000"}

    def test_unknown_role_uses_fallback(self):
        unit = SQUARE.model_copy(update={"fabric_role": "ghost"})
        tris = get_unit_triangles_with_colors(unit, 10, SAMPLE_PALETTE)
        assert {t.color for t in tris} == {"#CCCCCC"}


# ---------------------------------------------------------------------------
# Creation, spans, validation
# ---------------------------------------------------------------------------

class TestCreateUnit:
    def test_defaults(self):
        unit = create_unit("hst", GridPosition(row=1, col=1))
        assert unit.variant == "nw"
        assert unit.fabric_role == "background"
        assert unit.secondary_fabric_role == "background"
        assert unit.id

    def test_flying_geese_span_from_direction(self):
        unit = create_unit("flying_geese", GridPosition(row=0, col=0), "up")
        assert unit.span == Span(rows=2, cols=1)

    def test_square_ignores_variant(self):
        unit = create_unit("square", GridPosition(row=0, col=0), "nw", {"fill": "feature"})
        assert unit.type == "square"
        assert unit.fabric_role == "feature"

    def test_get_span_for_unit(self):
        assert get_span_for_unit("square") == Span(rows=1, cols=1)
        assert get_span_for_unit("flying_geese") == Span(rows=1, cols=2)
        assert get_span_for_unit("flying_geese", "down") == Span(rows=2, cols=1)

    def test_normalize_span(self):
        drifted = FLYING_GEESE.model_copy(update={"span": Span(rows=1, cols=1)})
        assert normalize_span(drifted).span == Span(rows=1, cols=2)
        assert normalize_span(FLYING_GEESE) is FLYING_GEESE

    def test_validate_unit_config(self):
        assert all(validate_unit_config(u) for u in SAMPLE_UNITS)
        broken = HstUnit.model_construct(
            id="x", position=GridPosition(row=0, col=0), span=Span(),
            type="hst", variant="middle", fabric_role="a", secondary_fabric_role="b",
        )
        assert not validate_unit_config(broken)
