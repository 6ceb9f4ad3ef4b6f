"""Cut sizes for block units and border sizing suggestions.

All measurements are in inches. Suggestions are rounded to the nearest 1/4".
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from quillty.engine.bridge import to_unit_config
from quillty.models.borders import BorderConfig
from quillty.models.palette import Palette
from quillty.models.units import Unit

SEAM_ALLOWANCE = 0.5  # 1/4" each side
HST_ALLOWANCE = 0.875  # starting square for half-square triangles
QST_ALLOWANCE = 1.25  # starting square for quarter-square triangles

GOLDEN_RATIO = 1.618
FIBONACCI = (1, 1, 2, 3, 5, 8, 13, 21)

# unit type -> (allowance added to the finished cell size, cut label)
CUT_RULES: dict[str, tuple[float, str]] = {
    "square": (SEAM_ALLOWANCE, "square"),
    "hst": (HST_ALLOWANCE, "hst"),
    "qst": (QST_ALLOWANCE, "qst"),
    "flying_geese": (SEAM_ALLOWANCE, "square"),
}
# unit types cut as one square per covered cell for each patch
PER_CELL_TYPES = {"flying_geese"}


@dataclass(frozen=True)
class Cut:
    width: float
    height: float
    quantity: int
    description: str


@dataclass
class CuttingInstruction:
    role_id: str
    color: str
    cuts: list[Cut] = field(default_factory=list)


def round_quarter(inches: float) -> float:
    """Nearest 1/4", halves rounding up."""
    return math.floor(inches * 4 + 0.5) / 4


def format_measurement(inches: float) -> str:
    """Inches as a whole number plus the nearest eighth, e.g. ``4⅞``."""
    whole = math.floor(inches)
    fraction = inches - whole
    steps = (
        (0.0625, ""),
        (0.1875, "⅛"),
        (0.3125, "¼"),
        (0.4375, "⅜"),
        (0.5625, "½"),
        (0.6875, "⅝"),
        (0.8125, "¾"),
        (0.9375, "⅞"),
    )
    for limit, glyph in steps:
        if fraction < limit:
            return f"{whole}{glyph}"
    return f"{whole + 1}"


def cut_size(unit_type: str, cell_size_inches: float) -> float:
    """Side of the starting square cut for one patch of ``unit_type``."""
    allowance, _ = CUT_RULES.get(unit_type, (SEAM_ALLOWANCE, "square"))
    return cell_size_inches + allowance


def _describe(size: float, label: str) -> str:
    text = format_measurement(size)
    if label == "hst":
        return f'{text}" squares for half-square triangles'
    if label == "qst":
        return f'{text}" squares for quarter-square triangles'
    return f'{text}" × {text}" squares'


def cutting_list(
    units: Iterable[Unit],
    palette: Palette,
    block_size_inches: float,
    grid_size: int,
) -> list[CuttingInstruction]:
    """Starting squares needed per color role, largest cuts first."""
    cell = block_size_inches / grid_size
    tally: dict[str, dict[tuple[float, str], int]] = {}

    for unit in units:
        allowance, label = CUT_RULES.get(unit.type, (SEAM_ALLOWANCE, "square"))
        size = round(cell + allowance, 3)
        per_patch = len(unit.cells()) if unit.type in PER_CELL_TYPES else 1
        for role_id in to_unit_config(unit).patch_roles.values():
            counts = tally.setdefault(role_id, {})
            counts[(size, label)] = counts.get((size, label), 0) + per_patch

    instructions = []
    for role_id, counts in tally.items():
        cuts = [
            Cut(width=size, height=size, quantity=qty, description=_describe(size, label))
            for (size, label), qty in counts.items()
        ]
        cuts.sort(key=lambda c: c.width * c.height, reverse=True)
        instructions.append(CuttingInstruction(role_id, palette.resolve_color(role_id), cuts))
    return instructions


# ---------------------------------------------------------------------------
# Border sizing
# ---------------------------------------------------------------------------

def quilt_size_with_borders(
    width_inches: float, height_inches: float, border_config: BorderConfig | None
) -> tuple[float, float]:
    """Finished (width, height) including every enabled border on both sides."""
    if border_config is None or not border_config.enabled or not border_config.borders:
        return width_inches, height_inches
    total = border_config.total_width_inches
    return width_inches + 2 * total, height_inches + 2 * total


def suggest_golden_ratio_width(previous_width: float) -> float:
    return round_quarter(previous_width * GOLDEN_RATIO)


def suggest_fibonacci_widths(total_width: float, border_count: int) -> list[float]:
    """Split ``total_width`` across borders in Fibonacci proportion, innermost first."""
    if border_count < 1 or border_count > len(FIBONACCI):
        return []
    fib = FIBONACCI[:border_count]
    denom = sum(fib)
    return [round_quarter(f / denom * total_width) for f in fib]


def suggest_width_from_block_size(block_size_inches: float) -> dict[str, float]:
    return {
        "min": round_quarter(block_size_inches / 4),
        "max": round_quarter(block_size_inches / 2),
        "suggested": round_quarter(block_size_inches / 3),
    }


def borders_for_target_size(
    width_inches: float,
    height_inches: float,
    target_width: float,
    target_height: float,
    border_count: int = 1,
) -> list[float] | None:
    """Border widths that grow the quilt to fit the target; None if it already does."""
    needed = min((target_width - width_inches) / 2, (target_height - height_inches) / 2)
    if needed <= 0:
        return None
    if border_count > 1:
        return suggest_fibonacci_widths(needed, border_count)
    return [round_quarter(needed)]
