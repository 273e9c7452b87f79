"""
About screen: what flash loans are, why FlashFlow exists, and how the
analysis works. Rendered with Textual's Markdown widget.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, Markdown

PROBLEM_AND_SOLUTION = """\
## The Problem

[Flash loans](https://docs.aave.com/developers/v/2.0/guides/flash-loans) are a powerful, uncollateralized lending tool unique to decentralized finance (DeFi). They allow users to borrow massive amounts of cryptocurrency for a single transaction, as long as the loan is repaid by the end of that same transaction. This opens up incredible opportunities for arbitrage, liquidations, and other complex financial maneuvers.

However, the technical complexity of creating and executing the necessary smart contracts makes flash loans inaccessible to most people. A single mistake in the code can lead to a failed transaction and lost gas fees. This high barrier to entry prevents widespread adoption and innovation.

## The Solution

FlashFlow lets users simply describe their strategy in natural language. An AI model then handles the complexity of generating, analyzing, and simulating the required smart contract, making the power of flash loans accessible to a much broader audience.
"""

TECHNICAL_CHALLENGES = """\
## Technical Challenges

A primary challenge was ensuring the atomicity of the flash loan. The entire sequence of borrowing, executing a strategy and repaying the loan must occur within a single blockchain transaction. Crafting the AI prompt to generate robust and gas-efficient smart contract logic that handles all these steps correctly was complex. Any error in the generated code could lead to the transaction failing and the loan not being repaid, which, while safe due to automatic reversion, is not a successful outcome.

Another hurdle was creating a realistic simulation of the transaction. To provide users with a viability assessment, the simulation needs to account for rapidly changing market conditions, such as price slippage on decentralized exchanges (DEXs) and network gas fees. This required the AI model to act as an analyst, capable of inferring these risks from the code and providing a reasonable profit-and-loss projection without actually forking the blockchain state.
"""

ABOUT_THE_ANALYSIS = """\
## About the Analysis

The transaction viability analysis is powered by an AI model that acts as both a blockchain security expert and a DeFi analyst. It performs a multi-step assessment:

- **Code Review:** The AI first generates the necessary smart contract logic based on your strategy. It then scrutinizes this code for potential vulnerabilities, logical errors, or gas-inefficient operations.
- **Risk Assessment:** It simulates how the strategy would perform under current market assumptions, looking for risks like high slippage, unprofitable trades, or reliance on volatile assets without safeguards.
- **Viability Score:** Based on the review, it provides a "Viable" or "Not Viable" recommendation. A "Viable" status indicates a high probability of success and profitability.
- **PnL Simulation:** The profit-and-loss chart is a visual forecast of the transaction's potential financial performance, illustrating the expected outcome if the strategy is executed successfully.

> Execution is a placeholder: nothing is sent to a real network. Viable loans
> complete after a short delay with a random profit; non-viable loans fail.
"""

ABOUT_MARKDOWN = "\n".join([PROBLEM_AND_SOLUTION, TECHNICAL_CHALLENGES, ABOUT_THE_ANALYSIS])


class AboutScreen(Screen):
    """Background on flash loans and how the analysis works."""

    BINDINGS = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="about-body"):
            yield Markdown(ABOUT_MARKDOWN, id="about-markdown")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "About FlashFlow"

    def action_go_back(self) -> None:
        self.app.pop_screen()
