"""Centralized configuration for flowlayout."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LayoutConfig:
    """Configuration for the layout pipeline.

    Gaps are tied to screen axes: ``x_gap`` separates layers in horizontal
    flow and siblings in vertical flow; ``y_gap`` the other way round.
    """

    x_gap: float = 200
    y_gap: float = 120
    margin: float = 50
    sweeps: int = 4
    handle_tolerance: float = 10
    fallback_spacing: float = 150
    dummy_width: float = 0
    dummy_height: float = 50
