"""
Placeholder transaction executor.

Nothing is deployed or executed. A real implementation would fork mainnet
with Foundry or Hardhat, deploy the generated contract, run the flash loan
and report the actual profit. This stand-in waits for a fixed delay and
returns an outcome that follows the AI viability verdict: viable loans
succeed with a random profit below 0.5 units of the asset, non-viable
loans fail.
"""

import asyncio
import logging
import random
from typing import Optional

from core.models import TransactionInput, TransactionResult

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0
MAX_PROFIT = 0.5
NOT_VIABLE_ERROR = "Insufficient liquidity for arbitrage."


async def execute_transaction(
    tx_input: TransactionInput,
    delay: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> TransactionResult:
    """Pretend to execute a flash loan and return its outcome."""
    logger.debug("Simulating transaction with logic:\n%s", tx_input.execution_logic)

    await asyncio.sleep(DEFAULT_DELAY if delay is None else delay)

    if tx_input.is_viable:
        profit = (rng or random).random() * MAX_PROFIT
        logger.info("Simulated execution succeeded (profit %.4f)", profit)
        return TransactionResult(success=True, profit=profit)

    logger.info("Simulated execution failed: %s", NOT_VIABLE_ERROR)
    return TransactionResult(success=False, error=NOT_VIABLE_ERROR)
