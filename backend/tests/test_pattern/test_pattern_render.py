"""Tests for pattern rendering and SVG export."""

import xml.etree.ElementTree as ET

import numpy as np
import pytest

from quillty.models.block import Block
from quillty.models.borders import BorderConfig, BorderSpec
from quillty.models.units import GridPosition
from quillty.pattern.models import BlockInstance, create_pattern
from quillty.pattern.render import (
    instance_transform,
    render_instance,
    render_pattern,
    transform_points,
)
from quillty.svg.serializer import pattern_to_svg
from quillty.utils.geometry import polygon_area
from tests.conftest import SAMPLE_PALETTE, SQUARE

NS = "{http://www.w3.org/2000/svg}"


def inst(instance_id: str, row: int, col: int, block_id: str = "corner", **extra):
    return BlockInstance(
        id=instance_id, block_id=block_id, position=GridPosition(row=row, col=col), **extra
    )


def make_pattern(*instances, border_config=None):
    pattern = create_pattern("pattern-1", "user-1", palette=SAMPLE_PALETTE)
    return pattern.model_copy(
        update={"block_instances": list(instances), "border_config": border_config}
    )


def bounds(triangles) -> tuple[float, float, float, float]:
    xs = [x for t in triangles for x in t.points[0::2]]
    ys = [y for t in triangles for y in t.points[1::2]]
    return min(xs), min(ys), max(xs), max(ys)


@pytest.fixture
def corner() -> Block:
    """One square in the top-left cell of a 3x3 block."""
    return Block(id="corner", creator_id="user-1", grid_size=3, units=[SQUARE])


class TestInstanceTransform:
    def test_identity(self):
        assert np.array_equal(instance_transform(inst("a", 0, 0), 30), np.eye(3))

    @pytest.mark.parametrize(
        "extra, expected",
        [
            ({"rotation": 90}, [30.0, 0.0]),
            ({"rotation": 180}, [30.0, 30.0]),
            ({"rotation": 270}, [0.0, 30.0]),
            ({"flip_horizontal": True}, [30.0, 0.0]),
            ({"flip_vertical": True}, [0.0, 30.0]),
            # flip first, then rotate clockwise
            ({"flip_horizontal": True, "rotation": 90}, [30.0, 30.0]),
        ],
    )
    def test_top_left_corner(self, extra, expected):
        matrix = instance_transform(inst("a", 0, 0, **extra), 30)
        assert transform_points([0, 0], matrix) == expected

    def test_offset_applied_after_transform(self):
        matrix = instance_transform(inst("a", 0, 0, rotation=180), 10)
        assert transform_points([0, 0, 10, 10], matrix, 5, 7) == [15.0, 17.0, 5.0, 7.0]


class TestRenderInstance:
    def test_quarter_turn_moves_square_to_top_right(self, corner):
        pattern = make_pattern()
        triangles = render_instance(inst("a", 1, 2, rotation=90), corner, 30, pattern)
        assert bounds(triangles) == (80, 30, 90, 40)

    def test_vertical_flip_moves_square_down(self, corner):
        triangles = render_instance(inst("a", 0, 0, flip_vertical=True), corner, 30, make_pattern())
        assert bounds(triangles) == (0, 20, 10, 30)

    def test_transform_keeps_area(self, block):
        instance = inst("a", 0, 0, block_id="block-1", rotation=270, flip_horizontal=True)
        triangles = render_instance(instance, block, 30, make_pattern())
        total = sum(polygon_area(list(zip(t.points[0::2], t.points[1::2]))) for t in triangles)
        assert total == pytest.approx(5 * 100)
        assert bounds(triangles) == (0, 0, 30, 30)

    def test_overrides_recolor_one_instance(self, corner):
        pattern = make_pattern()
        plain = render_instance(inst("a", 0, 0), corner, 30, pattern)
        recolored = render_instance(
            inst("b", 0, 1, palette_overrides={"feature": "#FF0000"}), corner, 30, pattern
        )
        assert {t.color for t in plain} == {"#1E3A5F"}
        assert {t.color for t in recolored} == {"#FF0000"}


class TestRenderPattern:
    def test_grid_without_borders(self, corner):
        pattern = make_pattern(inst("a", 0, 0), inst("b", 3, 3))
        rendered = render_pattern(pattern, {"corner": corner}, 30)
        assert (rendered.width, rendered.height) == (120, 120)
        assert rendered.borders is None
        assert [i.id for i, _ in rendered.instances] == ["a", "b"]
        assert bounds(rendered.instances[1][1]) == (90, 90, 100, 100)

    def test_borders_wrap_the_grid(self, corner):
        config = BorderConfig(borders=[BorderSpec(id="b1", width_inches=2, fabric_role="accent1")])
        pattern = make_pattern(inst("a", 0, 0), border_config=config)
        rendered = render_pattern(pattern, {"corner": corner}, 30, pixels_per_inch=10)
        assert (rendered.width, rendered.height) == (160, 160)
        assert rendered.grid_rect.x == 20
        assert rendered.borders.total_thickness == pytest.approx(20)
        assert bounds(rendered.instances[0][1]) == (20, 20, 30, 30)

    def test_missing_block_is_reported(self, corner):
        pattern = make_pattern(inst("a", 0, 0), inst("b", 0, 1, block_id="ghost"))
        rendered = render_pattern(pattern, {"corner": corner}, 30)
        assert [i.id for i in rendered.missing] == ["b"]
        assert len(rendered.instances) == 1


class TestPatternSvg:
    def test_polygons_tagged_by_instance(self, corner):
        pattern = make_pattern(inst("a", 0, 0), inst("b", 1, 1, rotation=90))
        root = ET.fromstring(pattern_to_svg(pattern, {"corner": corner}, 30).encode("utf-8"))
        assert root.get("width") == "120"
        polygons = root.findall(f"{NS}polygon")
        assert {p.get("data-instance") for p in polygons} == {"a", "b"}
        assert {p.get("fill") for p in polygons} == {"#1E3A5F"}

    def test_title_and_borders(self, corner):
        config = BorderConfig(borders=[BorderSpec(id="b1", width_inches=1, fabric_role="accent1")])
        pattern = make_pattern(inst("a", 0, 0), border_config=config).model_copy(
            update={"title": "Stars & Stripes"}
        )
        root = ET.fromstring(pattern_to_svg(pattern, {"corner": corner}, 30).encode("utf-8"))
        assert root.find(f"{NS}title").text == "Stars & Stripes"
        assert any(p.get("data-border") == "b1" for p in root.findall(f"{NS}polygon"))
