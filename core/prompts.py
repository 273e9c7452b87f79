"""
Prompt templates for the three FlashFlow LLM flows.

1. Execution logic generation (strategy -> Solidity-like code text)
2. Loan viability assessment (code -> viable?, risk text, feedback, P&L curve)
3. Transaction risk analysis (code -> viability, risk score, risk breakdown)

Every template asks for a single JSON object with camelCase keys so the
response can be validated against core.models.
"""

GENERATION_SYSTEM_PROMPT = (
    "You are an expert in writing Solidity smart contracts for flash loans."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a blockchain security expert and DeFi analyst. "
    "You always answer with a single valid JSON object."
)

GENERATE_EXECUTION_LOGIC_PROMPT = """
You are an expert in writing Solidity smart contracts for flash loans. Based on the user's strategy, generate the execution logic. The code should be well-commented and follow best practices.

The user wants to borrow an asset and has provided the following parameters:
Asset: {asset}
Amount: {amount}

Their strategy is as follows:
Strategy: {strategy}

Respond with a JSON object of the form:
{{"executionLogic": "<the complete Solidity code as a single string>"}}
"""

ASSESS_LOAN_VIABILITY_PROMPT = """
You are an AI-powered simulation tool for flash loan transactions. Your role is to assess the viability of a flash loan transaction before it is executed on the blockchain.

Based on the provided information, evaluate the potential risks and provide feedback to the user. Set the isViable output field appropriately.

In addition, generate a series of 10-15 data points to simulate the profit and loss over the very short duration of the flash loan. This data will be used to create a chart.

- If you determine the transaction is viable, the profitAndLossData should show a clear upward trend, ending in a positive profit.
- If the transaction is not viable, the data should show a downward trend, ending in a loss.
- The "time" for the data points should be a simple sequence, like 0, 1, 2, 3...

Asset: {asset}
Amount: {amount}
Execution Logic: {execution_logic}

Respond with a JSON object of the form:
{{
  "isViable": true,
  "riskAssessment": "<detailed risk assessment>",
  "feedback": "<feedback and recommendations>",
  "profitAndLossData": [{{"time": 0, "profit": 0.0}}, {{"time": 1, "profit": 0.01}}]
}}
"""

ANALYZE_TRANSACTION_RISK_PROMPT = """
You are a blockchain security expert and DeFi analyst. Your task is to analyze the provided smart contract execution logic for a flash loan and determine its viability and associated risks.

Analyze the following code:
{execution_logic}

Based on your analysis, you must perform the following actions:
1.  **Viability Assessment**: Determine if the strategy is 'Viable' or 'Not Viable'. A viable strategy should be profitable and have a high chance of success. Default to 'Viable' unless you see clear and high-probability risks (e.g., obvious logic errors, high gas costs that would negate profit, reliance on highly volatile assets with no slippage protection).
2.  **P&L Simulation**: Generate a list of 10 profit-and-loss data points (pnlData) to simulate the transaction's financial performance.
    - If the transaction is 'Viable', the profit should generally trend upwards, ending positive.
    - If it's 'Not Viable', the profit should trend downwards, ending negative.
    - Start profit at 0 for time 0.
3.  **Risk Score**: Assign a 'riskScore' from 1 (very low risk) to 10 (extremely high risk). Base this on factors like code complexity, reliance on market conditions, and potential for slippage or high gas fees. A simple, direct arbitrage should be low risk, while a multi-step process involving volatile assets should be higher risk.
4.  **Risk Breakdown**: Provide a 'riskBreakdown' detailing the potential risks. Always include at least two risks, even for viable-seeming transactions. Examples include 'Price Slippage', 'Gas Fee Volatility', 'Contract Vulnerability', or 'Market Fluctuation'. For each risk, provide a short description.
5.  **Rationale**: Provide a concise 'rationale' for your overall viability decision, taking the risks into account.

Respond with a JSON object of the form:
{{
  "viability": "Viable",
  "rationale": "<concise rationale>",
  "pnlData": [{{"time": 0, "profit": 0}}],
  "riskScore": 3,
  "riskBreakdown": [{{"risk": "Price Slippage", "description": "<short explanation>"}}]
}}
"""


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def get_generation_prompt(asset: str, amount: float, strategy: str) -> str:
    return GENERATE_EXECUTION_LOGIC_PROMPT.format(
        asset=asset or "unspecified",
        amount=_format_amount(amount),
        strategy=strategy,
    )


def get_viability_prompt(asset: str, amount: float, execution_logic: str) -> str:
    return ASSESS_LOAN_VIABILITY_PROMPT.format(
        asset=asset,
        amount=_format_amount(amount),
        execution_logic=execution_logic,
    )


def get_risk_prompt(execution_logic: str) -> str:
    return ANALYZE_TRANSACTION_RISK_PROMPT.format(execution_logic=execution_logic)
