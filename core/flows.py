"""
The three FlashFlow prompt flows.

- generate_execution_logic: strategy description -> Solidity-like code text
- assess_loan_viability: code -> viable?, risk assessment, feedback, P&L curve
- analyze_transaction_risk: code -> viability, risk score, risk breakdown

Each flow renders a prompt, sends it through LLMClient and validates the
answer against the matching core.models schema. The viability and risk
verdicts come from the model; nothing here scores a strategy.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from core.errors import LLMResponseError
from core.json_utils import parse_llm_json, strip_code_fences
from core.llm_client import LLMClient
from core.models import (
    ExecutionLogicInput,
    ExecutionLogicOutput,
    RiskAnalysis,
    RiskAnalysisInput,
    ViabilityAssessment,
    ViabilityInput,
)
from core.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    GENERATION_SYSTEM_PROMPT,
    get_generation_prompt,
    get_risk_prompt,
    get_viability_prompt,
)

logger = logging.getLogger(__name__)


async def generate_execution_logic(
    flow_input: ExecutionLogicInput,
    client: Optional[LLMClient] = None,
) -> ExecutionLogicOutput:
    """Generate smart contract execution logic from a natural language strategy."""
    client = client or LLMClient()
    prompt = get_generation_prompt(flow_input.asset, flow_input.amount, flow_input.strategy)

    text = await client.acomplete(
        prompt,
        task="generation",
        caller="generate_execution_logic",
        system_prompt=GENERATION_SYSTEM_PROMPT,
        json_mode=True,
    )

    data = parse_llm_json(text)
    if isinstance(data, dict) and (data.get("executionLogic") or data.get("execution_logic")):
        return ExecutionLogicOutput.model_validate(data)

    # Some models ignore the JSON instruction and answer with a bare code block
    code = strip_code_fences(text)
    if not code:
        raise LLMResponseError("LLM returned no execution logic", raw_response=text)
    logger.debug("Generation response was not JSON; using raw text as execution logic")
    return ExecutionLogicOutput(execution_logic=code)


async def assess_loan_viability(
    flow_input: ViabilityInput,
    client: Optional[LLMClient] = None,
) -> ViabilityAssessment:
    """Ask the model whether a flash loan is viable and for a P&L curve to chart."""
    client = client or LLMClient()
    prompt = get_viability_prompt(flow_input.asset, flow_input.amount, flow_input.execution_logic)
    data = await client.acomplete_json(
        prompt,
        task="analysis",
        caller="assess_loan_viability",
        system_prompt=ANALYSIS_SYSTEM_PROMPT,
    )
    try:
        result = ViabilityAssessment.model_validate(data)
    except ValidationError as e:
        raise LLMResponseError(f"Viability response did not match schema: {e}") from e

    logger.info("Viability assessment: %s (final P&L %.4f)",
                "viable" if result.is_viable else "not viable", result.final_profit)
    return result


async def analyze_transaction_risk(
    flow_input: RiskAnalysisInput,
    client: Optional[LLMClient] = None,
) -> RiskAnalysis:
    """Ask the model for a risk score and breakdown of the execution logic."""
    client = client or LLMClient()
    data = await client.acomplete_json(
        get_risk_prompt(flow_input.execution_logic),
        task="analysis",
        caller="analyze_transaction_risk",
        system_prompt=ANALYSIS_SYSTEM_PROMPT,
    )
    try:
        result = RiskAnalysis.model_validate(data)
    except ValidationError as e:
        raise LLMResponseError(f"Risk analysis response did not match schema: {e}") from e

    if len(result.risk_breakdown) < 2:
        logger.warning("Risk analysis returned %d risks (expected at least 2)", len(result.risk_breakdown))
    return result
