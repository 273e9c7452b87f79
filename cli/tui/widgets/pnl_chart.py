"""
Profit-and-loss chart widget.

Renders a P&L series as a single row of block characters scaled between the
series minimum and maximum, coloured by whether the curve ends in profit.
"""

from __future__ import annotations

from typing import Sequence

from textual.widgets import Static

from core.models import PnLPoint, format_profit

# Eighth-height blocks, lowest to highest
_BLOCKS = "▁▂▃▄▅▆▇█"


def render_sparkline(values: Sequence[float]) -> str:
    """Map each value onto one block character."""
    if not values:
        return ""
    low, high = min(values), max(values)
    span = high - low
    if span == 0:
        return _BLOCKS[len(_BLOCKS) // 2] * len(values)
    top = len(_BLOCKS) - 1
    return "".join(_BLOCKS[round((v - low) / span * top)] for v in values)


class PnLChart(Static):
    """Block sparkline of a simulated P&L curve with min, max and final labels."""

    def __init__(self, **kwargs) -> None:
        super().__init__("[dim]No P&L data[/]", **kwargs)

    def update_points(self, points: Sequence[PnLPoint], asset: str = "") -> None:
        if not points:
            self.update("[dim]No P&L data[/]")
            return

        profits = [p.profit for p in points]
        final = profits[-1]
        colour = "green" if final > 0 else "red"
        sign = "+" if final > 0 else ""
        bar = render_sparkline(profits)

        lines = [
            f"[{colour}]{bar}[/]",
            (
                f"[dim]T+{points[0].time:g}..T+{points[-1].time:g}  "
                f"min {format_profit(min(profits), asset)}  "
                f"max {format_profit(max(profits), asset)}[/]"
            ),
            f"[bold]Final P&L:[/] [{colour}]{sign}{format_profit(final, asset)}[/]",
        ]
        self.update("\n".join(lines))
