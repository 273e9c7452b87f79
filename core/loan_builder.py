"""
Form state for the flash loan builder.

FlashLoanBuilder owns the values shown in the builder form, the two busy
flags (generating / simulating) and the last viability assessment. The TUI
and the CLI both drive it; neither talks to the flows directly for the
generate/simulate/execute sequence.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from core.errors import FormValidationError, NotViableError
from core.flows import assess_loan_viability, generate_execution_logic
from core.llm_client import LLMClient
from core.llm_usage_tracker import LLMUsageTracker
from core.models import (
    ExecutionLogicInput,
    FlashLoanForm,
    ViabilityAssessment,
    ViabilityInput,
    validate_form,
)

logger = logging.getLogger(__name__)

DEFAULT_ASSET = ""
DEFAULT_AMOUNT = 1000.0
FALLBACK_STRATEGY_ASSET = "ETH"

DEFAULT_EXECUTION_LOGIC = """// Example: Arbitrage between two DEXs
// 1. Borrow asset from Pool A.
// 2. Swap borrowed asset for another asset on DEX B.
// 3. Swap back to the original asset on DEX C at a better rate.
// 4. Repay the loan to Pool A.
// 5. Keep the profit."""

STRATEGY_TEMPLATE = (
    "Borrow {amount} {asset}, perform an arbitrage trade on a DEX like Uniswap "
    "for a stablecoin like DAI, then repay the loan on a lending protocol like Aave."
)

EMPTY_STRATEGY_TITLE = "Strategy is empty"
EMPTY_STRATEGY_MESSAGE = "Please describe your strategy to generate the logic."
NOT_VIABLE_MESSAGE = "Cannot execute a non-viable transaction."


def _format_amount(amount) -> str:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return str(amount)
    return str(int(value)) if value.is_integer() else str(value)


def default_strategy(asset: str = "", amount=None) -> str:
    """The arbitrage strategy text derived from the selected asset and amount."""
    return STRATEGY_TEMPLATE.format(
        amount=_format_amount(amount or DEFAULT_AMOUNT),
        asset=asset or FALLBACK_STRATEGY_ASSET,
    )


@dataclass
class ExecutionOrder:
    """What the builder hands to the executor once a loan is approved."""

    asset: str
    amount: float
    execution_logic: str
    is_viable: bool = True
    llm_cost: float = 0.0


class FlashLoanBuilder:
    """Holds the builder form and sequences the generate and simulate calls."""

    def __init__(self, client: Optional[LLMClient] = None, default_amount: float = DEFAULT_AMOUNT):
        self._client = client
        self.default_amount = default_amount
        self.asset = DEFAULT_ASSET
        self.amount: float = default_amount
        self.strategy = ""
        self.execution_logic = DEFAULT_EXECUTION_LOGIC
        self.is_generating = False
        self.is_simulating = False
        self.result: Optional[ViabilityAssessment] = None
        # USD spent on generate/simulate calls since the form was last cleared
        self.llm_cost = 0.0
        self.clear()

    @property
    def client(self) -> LLMClient:
        if self._client is None:
            self._client = LLMClient()
        return self._client

    @property
    def is_busy(self) -> bool:
        return self.is_generating or self.is_simulating

    @property
    def can_execute(self) -> bool:
        return self.result is not None and self.result.is_viable

    # ── Form fields ───────────────────────────────────────────────

    def set_asset(self, asset: str) -> None:
        self.asset = asset or ""
        self._derive_strategy()

    def set_amount(self, amount) -> None:
        """Accepts numbers or the raw text from an input; unparseable or non-finite values become 0."""
        if isinstance(amount, str):
            try:
                amount = float(amount.strip().replace(",", "")) if amount.strip() else 0.0
            except ValueError:
                amount = 0.0
        if amount and not math.isfinite(amount):
            amount = 0.0
        self.amount = amount or 0.0
        self._derive_strategy()

    def set_strategy(self, strategy: str) -> None:
        self.strategy = strategy or ""

    def set_execution_logic(self, execution_logic: str) -> None:
        self.execution_logic = execution_logic or ""

    def _derive_strategy(self) -> None:
        self.strategy = default_strategy(self.asset, self.amount)

    def validate(self) -> FlashLoanForm:
        """Raises FormValidationError with per-field messages."""
        return validate_form(
            asset=self.asset,
            amount=self.amount,
            strategy=self.strategy,
            execution_logic=self.execution_logic,
        )

    # ── Actions ───────────────────────────────────────────────────

    async def generate_logic(self) -> str:
        """Replace the execution logic with code generated from the strategy."""
        if not self.strategy.strip():
            raise FormValidationError(EMPTY_STRATEGY_TITLE, {"strategy": EMPTY_STRATEGY_MESSAGE})

        self.is_generating = True
        before = LLMUsageTracker.get_instance().snapshot()
        try:
            output = await generate_execution_logic(
                ExecutionLogicInput(asset=self.asset, amount=self.amount or 0.0, strategy=self.strategy),
                client=self.client,
            )
        finally:
            self.is_generating = False
            self._add_cost_since(before)

        self.execution_logic = output.execution_logic
        logger.info("Generated %d characters of execution logic", len(self.execution_logic))
        return self.execution_logic

    async def simulate(self) -> ViabilityAssessment:
        """Validate the form and ask the model for a viability assessment."""
        form = self.validate()

        self.is_simulating = True
        self.result = None
        before = LLMUsageTracker.get_instance().snapshot()
        try:
            result = await assess_loan_viability(
                ViabilityInput(
                    asset=form.asset,
                    amount=form.amount,
                    execution_logic=form.execution_logic,
                ),
                client=self.client,
            )
        finally:
            self.is_simulating = False
            self._add_cost_since(before)

        self.result = result
        return result

    async def generate_then_simulate(self) -> ViabilityAssessment:
        await self.generate_logic()
        return await self.simulate()

    def execute(self) -> ExecutionOrder:
        """Hand off a viable loan for execution and reset the form.

        Raises:
            NotViableError: there is no result, or the result is not viable.
        """
        if not self.can_execute:
            raise NotViableError(NOT_VIABLE_MESSAGE)

        order = ExecutionOrder(
            asset=self.asset,
            amount=float(self.amount),
            execution_logic=self.execution_logic,
            is_viable=True,
            llm_cost=self.llm_cost,
        )
        logger.info("Execution requested: %s %s", _format_amount(order.amount), order.asset)
        self.clear()
        return order

    def clear(self) -> None:
        """Reset every field to its default and drop the last result."""
        self.asset = DEFAULT_ASSET
        self.amount = self.default_amount
        self.execution_logic = DEFAULT_EXECUTION_LOGIC
        self.result = None
        self._derive_strategy()
        self.llm_cost = 0.0

    def _add_cost_since(self, before: dict) -> None:
        after = LLMUsageTracker.get_instance().snapshot()
        self.llm_cost += after["total_cost"] - before["total_cost"]
