"""Tests for SVG export of blocks and unit thumbnails."""

import xml.etree.ElementTree as ET

import pytest

from quillty.models.borders import BorderConfig, BorderSpec
from quillty.svg.serializer import block_to_svg, serialize_svg, thumbnail_to_svg
from quillty.units.flying_geese import FlyingGeeseDefinition
from quillty.units.square import SquareDefinition
from tests.conftest import FLYING_GEESE, SAMPLE_PALETTE, SAMPLE_UNITS, SQUARE

NS = "{http://www.w3.org/2000/svg}"


def _parse(svg: str) -> ET.Element:
    return ET.fromstring(svg.encode("utf-8"))


class TestSerializeSvg:
    def test_minimal_document(self):
        root = _parse(serialize_svg([], 24, 24))
        assert root.tag == f"{NS}svg"
        assert root.get("viewBox") == "0 0 24 24"

    def test_title_is_escaped(self):
        root = _parse(serialize_svg([], title="Geese & <Stars>"))
        assert root.find(f"{NS}title").text == "Geese & <Stars>"

    def test_elements_and_styles(self):
        svg = serialize_svg(
            [{"tag": "rect", "x": "1", "y": "2", "width": "3", "height": "4"}],
            styles={".seam": "stroke: #000"},
        )
        root = _parse(svg)
        rect = root.find(f"{NS}rect")
        assert rect.get("width") == "3"
        assert ".seam { stroke: #000 }" in svg

    def test_attribute_values_are_quoted(self):
        svg = serialize_svg([{"tag": "rect", "data-note": 'say "hi" & <bye>'}])
        rect = _parse(svg).find(f"{NS}rect")
        assert rect.get("data-note") == 'say "hi" & <bye>'


class TestBlockSvg:
    def test_units_only(self):
        root = _parse(block_to_svg(SAMPLE_UNITS, 3, 40, SAMPLE_PALETTE, title="Sample"))
        assert root.get("width") == "120"
        polygons = root.findall(f"{NS}polygon")
        # square 2, hst 2, flying geese 3, qst 4
        assert len(polygons) == 11
        assert {p.get("data-unit") for p in polygons} == {"sq-1", "hst-1", "fg-1", "qst-1"}
        assert root.find(f"{NS}rect") is None

    def test_unit_placed_at_its_cell(self):
        root = _parse(block_to_svg([FLYING_GEESE], 3, 40, SAMPLE_PALETTE))
        goose = next(p for p in root.findall(f"{NS}polygon") if p.get("data-patch") == "goose")
        ys = [float(pair.split(",")[1]) for pair in goose.get("points").split()]
        assert min(ys) == pytest.approx(40)
        assert max(ys) == pytest.approx(80)
        assert goose.get("fill") == "#1E3A5F"

    def test_borders_grow_canvas(self):
        config = BorderConfig(
            borders=[BorderSpec(id="b1", width_inches=1, corner_style="mitered", fabric_role="accent1")]
        )
        root = _parse(block_to_svg(SAMPLE_UNITS, 3, 40, SAMPLE_PALETTE, config, pixels_per_inch=10))
        assert root.get("width") == "140"
        ring = [p for p in root.findall(f"{NS}polygon") if p.get("data-border") == "b1"]
        assert len(ring) == 4
        assert {p.get("fill") for p in ring} == {"#8B4513"}
        assert len(root.findall(f"{NS}line")) == 4
        outline = root.find(f"{NS}rect")
        assert (outline.get("x"), outline.get("width"), outline.get("stroke")) == ("0", "140", "#6B7280")

    def test_disabled_borders_ignored(self):
        config = BorderConfig(
            enabled=False, borders=[BorderSpec(id="b1", width_inches=1, fabric_role="accent1")]
        )
        root = _parse(block_to_svg(SAMPLE_UNITS, 3, 40, SAMPLE_PALETTE, config))
        assert root.get("width") == "120"
        assert root.find(f"{NS}line") is None

    def test_unit_id_with_markup_characters(self):
        odd = SQUARE.model_copy(update={"id": 'sq "1" & <co>'})
        root = _parse(block_to_svg([odd], 3, 40, SAMPLE_PALETTE))
        assert {p.get("data-unit") for p in root.findall(f"{NS}polygon")} == {'sq "1" & <co>'}


class TestThumbnails:
    def test_wide_thumbnail_keeps_aspect(self):
        root = _parse(thumbnail_to_svg(FlyingGeeseDefinition(), size=24))
        assert root.get("viewBox") == "0 0 48 24"
        assert root.get("width") == "48"
        assert len(root.findall(f"{NS}polygon")) == 3
        assert root.find(f"{NS}title").text == "Flying Geese"

    def test_square_thumbnail(self):
        root = _parse(thumbnail_to_svg(SquareDefinition(), size=32))
        assert root.get("height") == "32"
        assert root.findall(f"{NS}polygon")[0].get("fill") == "currentColor"
