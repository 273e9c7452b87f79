"""
Cost bar widget for the FlashFlow dashboard.

Single-line summary of session LLM spend by provider, plus the session
profit of completed transactions per asset.
"""

from __future__ import annotations

from textual.widgets import Static

from core.llm_usage_tracker import LLMUsageTracker
from core.models import format_profit
from core.transaction_manager import TransactionManager


# Canonical display order for providers
_PROVIDER_ORDER = ["openai", "gemini"]

_PROVIDER_NAMES = {
    "openai": "OpenAI",
    "gemini": "Gemini",
}


class CostBar(Static):
    """Single-line cost summary bar showing session totals by provider."""

    def on_mount(self) -> None:
        self.refresh_cost()

    def refresh_cost(self) -> None:
        """Read LLMUsageTracker and TransactionManager and update the display."""
        summary = LLMUsageTracker.get_instance().get_summary()

        total_cost = summary.get("total_cost_usd", 0.0)
        by_provider = summary.get("by_provider", {})

        parts: list[str] = [f"[bold]LLM: ${total_cost:.4f}[/bold]"]

        keys = [k for k in _PROVIDER_ORDER if k in by_provider]
        keys += [k for k in by_provider if k not in _PROVIDER_ORDER]
        for key in keys:
            prov = by_provider[key]
            name = _PROVIDER_NAMES.get(key, key.title())
            parts.append(f"[bold]{name}:[/bold] ${prov.get('cost', 0.0):.4f} ({int(prov.get('calls', 0))})")

        profits = TransactionManager.get_instance().session_profit()
        if profits:
            earned = ", ".join(f"+{format_profit(v, asset)}" for asset, v in sorted(profits.items()))
            parts.append(f"[bold]Profit:[/bold] [green]{earned}[/]")

        self.update("  |  ".join(parts))
