"""Engine configuration: bounds and rendering constants. No I/O."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Limits the document store enforces and constants the renderers use."""

    # Block grid is grid_size x grid_size cells
    min_grid_size: int = 2
    max_grid_size: int = 9
    default_grid_size: int = 3

    # Pattern grid is rows x cols blocks
    min_pattern_grid_size: int = 2
    max_pattern_grid_size: int = 25
    pattern_grid_warning_threshold: int = 15
    default_pattern_rows: int = 4
    default_pattern_cols: int = 4
    default_block_size_inches: float = 12.0

    # Palette
    min_palette_roles: int = 1
    max_palette_roles: int = 12

    # Borders
    max_borders: int = 4
    pixels_per_inch: float = 10.0

    # Undo history depth
    max_history: int = 100

    # Rendering
    fallback_color: str = "#CCCCCC"
    seam_color: str = "#9CA3AF"
    seam_width: float = 1.0
    outer_stroke_color: str = "#6B7280"
    outer_stroke_width: float = 2.0

    # Tolerance for geometry self-checks at registration
    tiling_tolerance: float = 1e-6


DEFAULT_CONFIG = EngineConfig()
