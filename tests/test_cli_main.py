"""
Tests for the scripted CLI: FlashFlowCLI rendering and main() dispatch.
"""

import io
import json
import logging
from unittest.mock import patch

import pytest
import yaml
from rich.console import Console

from cli.main import FlashFlowCLI
from core.config_manager import ConfigManager
from core.errors import FormValidationError
from core.transaction_manager import TransactionStatus
from main import build_parser, main
from tests.llm_stubs import (
    NOT_VIABLE_ASSESSMENT,
    RISK_ANALYSIS,
    SAMPLE_EXECUTION_LOGIC,
    VIABLE_ASSESSMENT,
    StubLLMClient,
)


@pytest.fixture(autouse=True)
def isolate(fresh_transaction_manager, fresh_tracker):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "log_file": str(tmp_path / "flashflow.log"),
        "simulator_delay": 0,
    }))
    return path


def _cli(config_path, *responses, json_output=False):
    console = Console(file=io.StringIO(), width=200)
    cli = FlashFlowCLI(
        config_manager=ConfigManager(str(config_path)),
        console=console,
        client=StubLLMClient(responses),
        json_output=json_output,
    )
    return cli, console


def _output(console):
    return console.file.getvalue()


# ── FlashFlowCLI ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_generate_prints_strategy_and_logic(config_path):
    cli, console = _cli(config_path, {"executionLogic": SAMPLE_EXECUTION_LOGIC})
    output = await cli.generate("ETH", 1000)
    assert output.execution_logic == SAMPLE_EXECUTION_LOGIC
    text = _output(console)
    assert "Borrow 1000 ETH" in text
    assert "FlashArbitrage" in text


@pytest.mark.asyncio
async def test_generate_json(config_path):
    cli, console = _cli(config_path, {"executionLogic": "contract A {}"}, json_output=True)
    await cli.generate("ETH", 1000, "my strategy")
    assert json.loads(_output(console)) == {"executionLogic": "contract A {}"}


@pytest.mark.asyncio
async def test_simulate_prints_viability(config_path):
    cli, console = _cli(config_path, VIABLE_ASSESSMENT)
    result = await cli.simulate("ETH", 1000, SAMPLE_EXECUTION_LOGIC)
    assert result.is_viable
    text = _output(console)
    assert "Viability Status: Viable" in text
    assert "Ξ0.1100" in text
    assert "Low slippage expected" in text


@pytest.mark.asyncio
async def test_simulate_invalid_form(config_path):
    cli, _ = _cli(config_path, VIABLE_ASSESSMENT)
    with pytest.raises(FormValidationError):
        await cli.simulate("ETH", 0, "short")


@pytest.mark.asyncio
async def test_risk_report(config_path):
    cli, console = _cli(config_path, RISK_ANALYSIS)
    result = await cli.risk(SAMPLE_EXECUTION_LOGIC, asset="ETH")
    assert result.risk_score == 3
    text = _output(console)
    assert "Risk score: 3/10" in text
    assert "Gas Fee Volatility" in text


@pytest.mark.asyncio
async def test_run_with_execute_viable(config_path, fresh_transaction_manager):
    cli, console = _cli(config_path, {"executionLogic": SAMPLE_EXECUTION_LOGIC}, VIABLE_ASSESSMENT,
                        json_output=True)
    rc = await cli.run("ETH", 1000, execute=True)
    assert rc == 0

    payload = json.loads(_output(console))
    assert payload["executionLogic"] == SAMPLE_EXECUTION_LOGIC
    assert payload["simulation"]["isViable"] is True
    assert payload["transaction"]["status"] == "Completed"

    txs = fresh_transaction_manager.get_all()
    assert len(txs) == 1
    assert txs[0].status == TransactionStatus.COMPLETED


@pytest.mark.asyncio
async def test_run_records_llm_cost_on_transaction(config_path, fresh_transaction_manager, fresh_tracker):
    cli, console = _cli(config_path, json_output=True)
    cli.client = StubLLMClient(
        [{"executionLogic": SAMPLE_EXECUTION_LOGIC}, VIABLE_ASSESSMENT],
        usage=("gpt-4o-mini", 2000, 800),
    )
    assert await cli.run("ETH", 1000, execute=True) == 0

    tx = fresh_transaction_manager.get_all()[0]
    assert tx.llm_cost > 0
    assert tx.llm_cost == pytest.approx(fresh_tracker.total_cost)
    assert json.loads(_output(console))["transaction"]["llm_cost"] == pytest.approx(tx.llm_cost)


@pytest.mark.asyncio
async def test_run_with_execute_not_viable(config_path, fresh_transaction_manager):
    cli, console = _cli(config_path, {"executionLogic": SAMPLE_EXECUTION_LOGIC}, NOT_VIABLE_ASSESSMENT)
    rc = await cli.run("DAI", 500, execute=True)
    assert rc == 1
    assert "Cannot execute a non-viable transaction." in _output(console)
    assert fresh_transaction_manager.count == 0


@pytest.mark.asyncio
async def test_execute_order_failure(config_path):
    cli, console = _cli(config_path)
    tx = await cli.execute_order("ETH", 1.0, SAMPLE_EXECUTION_LOGIC, is_viable=False)
    assert tx.status == TransactionStatus.FAILED
    cli.print_transaction(tx)
    assert "Insufficient liquidity for arbitrage." in _output(console)


def test_cost_summary_only_after_calls(config_path, fresh_tracker):
    cli, console = _cli(config_path)
    cli.show_cost_summary()
    assert _output(console) == ""
    fresh_tracker.record("openai", "gpt-4o", 100, 50)
    cli.show_cost_summary()
    assert "1 call(s), 150 tokens" in _output(console)


# ── main() ──────────────────────────────────────────────────────


def test_parser_requires_logic_source():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["simulate", "--asset", "ETH"])


def test_parser_rejects_unknown_asset():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["generate", "--asset", "DOGE"])


@pytest.mark.parametrize("amount", ["nan", "inf", "1e400"])
def test_parser_rejects_non_finite_amount(amount):
    for command in (["generate"], ["simulate", "--strategy", "x"], ["run"]):
        with pytest.raises(SystemExit):
            build_parser().parse_args(command + ["--amount", amount])


def test_parser_accepts_zero_amount():
    args = build_parser().parse_args(["generate", "--amount", "0"])
    assert args.amount == 0.0


def test_no_command(capsys):
    assert main([]) == 1


def test_version(config_path, capsys):
    assert main(["--config", str(config_path), "version"]) == 0
    assert "FlashFlow v1.0.0" in capsys.readouterr().out


def test_config_set_key(config_path, capsys):
    assert main(["--config", str(config_path), "config", "--set-gemini-key", "gem-123"]) == 0
    assert yaml.safe_load(config_path.read_text())["gemini_api_key"] == "gem-123"


def test_config_set_provider_for_task(config_path):
    assert main(["--config", str(config_path), "config", "--set-provider", "gemini", "--task", "analysis"]) == 0
    saved = yaml.safe_load(config_path.read_text())
    assert saved["analysis_provider"] == "gemini"
    assert saved["generation_provider"] == "openai"


def test_config_without_option(config_path, capsys):
    assert main(["--config", str(config_path), "config"]) == 1
    assert "No config option given" in capsys.readouterr().out


def test_generate_uses_config_defaults(config_path):
    stub = StubLLMClient([{"executionLogic": SAMPLE_EXECUTION_LOGIC}])
    with patch("cli.main.LLMClient", return_value=stub):
        assert main(["--config", str(config_path), "generate"]) == 0
    assert "Asset: ETH" in stub.calls[0]["prompt"]
    assert "Amount: 1000" in stub.calls[0]["prompt"]


def test_simulate_invalid_amount(config_path, tmp_path, capsys):
    logic_file = tmp_path / "logic.sol"
    logic_file.write_text(SAMPLE_EXECUTION_LOGIC)
    stub = StubLLMClient([VIABLE_ASSESSMENT])
    with patch("cli.main.LLMClient", return_value=stub):
        rc = main(["--config", str(config_path), "simulate", "--amount", "0", "--logic-file", str(logic_file)])
    assert rc == 1
    out = capsys.readouterr().out
    assert "Error: Invalid form" in out
    assert "amount: Amount must be positive." in out
    assert stub.calls == []


def test_simulate_from_strategy(config_path):
    stub = StubLLMClient([{"executionLogic": SAMPLE_EXECUTION_LOGIC}, VIABLE_ASSESSMENT])
    with patch("cli.main.LLMClient", return_value=stub):
        rc = main(["--config", str(config_path), "simulate", "--asset", "DAI", "--strategy", "Swap DAI"])
    assert rc == 0
    assert [c["caller"] for c in stub.calls] == ["generate_execution_logic", "assess_loan_viability"]


def test_risk_missing_file(config_path, tmp_path, capsys):
    with patch("cli.main.LLMClient", return_value=StubLLMClient()):
        rc = main(["--config", str(config_path), "risk", "--logic-file", str(tmp_path / "missing.sol")])
    assert rc == 1
    assert "Error:" in capsys.readouterr().out


def test_run_execute_returns_exit_code(config_path):
    stub = StubLLMClient([{"executionLogic": SAMPLE_EXECUTION_LOGIC}, NOT_VIABLE_ASSESSMENT])
    with patch("cli.main.LLMClient", return_value=stub):
        rc = main(["--config", str(config_path), "--json", "run", "--execute"])
    assert rc == 1


def test_tui_command_launches_dashboard(config_path):
    with patch("flashflow.run_tui", return_value=0) as run_tui:
        assert main(["--config", str(config_path), "tui"]) == 0
    run_tui.assert_called_once()
