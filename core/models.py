"""
Schemas for the flash loan builder form and the three LLM flows.

The LLM is asked for camelCase JSON (executionLogic, isViable, ...); every
model accepts either camelCase aliases or the snake_case field names.
"""

import math
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel, to_snake

from core.errors import FormValidationError

SUPPORTED_ASSETS: Dict[str, str] = {
    "ETH": "Ethereum (ETH)",
    "DAI": "Dai (DAI)",
    "USDC": "USD Coin (USDC)",
    "WBTC": "Wrapped Bitcoin (WBTC)",
}

ASSET_SYMBOLS: Dict[str, str] = {
    "ETH": "Ξ",
    "DAI": "♦",
    "USDC": "$",
    "WBTC": "₿",
}

MIN_EXECUTION_LOGIC_LENGTH = 10


class _FlowModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Builder form ──────────────────────────────────────────────────


class FlashLoanForm(_FlowModel):
    """Values entered in the builder form."""

    asset: str
    amount: float
    strategy: str = ""
    execution_logic: str

    @field_validator("asset")
    @classmethod
    def _asset_selected(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("Please select an asset.")
        if value not in SUPPORTED_ASSETS:
            raise ValueError(f"Unsupported asset: {value}")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        if isinstance(value, str):
            value = value.strip().replace(",", "")
            if not value:
                raise ValueError("Amount must be positive.")
            try:
                return float(value)
            except ValueError:
                raise ValueError("Amount must be a number.") from None
        return value

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Amount must be a number.")
        if value <= 0:
            raise ValueError("Amount must be positive.")
        return value

    @field_validator("execution_logic")
    @classmethod
    def _logic_long_enough(cls, value: str) -> str:
        if len(value or "") < MIN_EXECUTION_LOGIC_LENGTH:
            raise ValueError(
                f"Execution logic must be at least {MIN_EXECUTION_LOGIC_LENGTH} characters."
            )
        return value


def validate_form(**values) -> FlashLoanForm:
    """Build a FlashLoanForm, converting pydantic errors into a FormValidationError."""
    try:
        return FlashLoanForm.model_validate(values)
    except ValidationError as e:
        field_errors: Dict[str, str] = {}
        for err in e.errors():
            loc = err.get("loc") or ("form",)
            field = str(loc[0])
            msg = err.get("msg", "Invalid value")
            # pydantic prefixes custom messages with "Value error, "
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            field_errors.setdefault(to_snake(field), msg)
        raise FormValidationError("Invalid form", field_errors) from e


# ── Execution logic generation ────────────────────────────────────


class ExecutionLogicInput(_FlowModel):
    asset: str = Field(description="The asset to be used in the flash loan.")
    amount: float = Field(description="The amount of the asset to be borrowed.")
    strategy: str = Field(description="The user-defined strategy in natural language.")


class ExecutionLogicOutput(_FlowModel):
    execution_logic: str = Field(
        description="The generated smart contract code for the flash loan execution logic."
    )


# ── Viability assessment ──────────────────────────────────────────


class PnLPoint(_FlowModel):
    time: float
    profit: float


class ViabilityInput(_FlowModel):
    asset: str
    amount: float
    execution_logic: str


class ViabilityAssessment(_FlowModel):
    is_viable: bool = Field(description="Whether the flash loan transaction is viable.")
    risk_assessment: str = Field(description="A detailed risk assessment of the transaction.")
    feedback: str = Field(description="Feedback and recommendations for the user.")
    profit_and_loss_data: List[PnLPoint] = Field(
        min_length=1,
        description="Profit and loss data points over the simulated transaction.",
    )

    @property
    def final_profit(self) -> float:
        return self.profit_and_loss_data[-1].profit

    @property
    def is_profit(self) -> bool:
        return self.final_profit > 0


# ── Risk analysis ─────────────────────────────────────────────────


class RiskItem(_FlowModel):
    risk: str
    description: str


class RiskAnalysisInput(_FlowModel):
    execution_logic: str


class RiskAnalysis(_FlowModel):
    viability: Literal["Viable", "Not Viable"]
    rationale: str
    pnl_data: List[PnLPoint] = Field(min_length=1)
    risk_score: float = Field(ge=1, le=10)
    risk_breakdown: List[RiskItem] = Field(default_factory=list)

    @property
    def is_viable(self) -> bool:
        return self.viability == "Viable"

    @property
    def final_profit(self) -> float:
        return self.pnl_data[-1].profit


# ── Placeholder executor ──────────────────────────────────────────


class TransactionInput(_FlowModel):
    execution_logic: str
    is_viable: bool


class TransactionResult(_FlowModel):
    success: bool
    profit: Optional[float] = None
    error: Optional[str] = None


def format_profit(profit: float, asset: str) -> str:
    """Profit with the asset's currency symbol, e.g. Ξ0.1234."""
    return f"{ASSET_SYMBOLS.get(asset, '')}{profit:.4f}"
