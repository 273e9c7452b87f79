"""Tests for core.llm_client: provider calls, model fallback and usage tracking."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.errors import LLMResponseError, LLMUnavailableError
from core.flows import generate_execution_logic
from core.llm_client import LLMClient, provider_for_model
from core.models import ExecutionLogicInput


def _openai_response(content, prompt_tokens=10, completion_tokens=5):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


def _gemini_response(text, prompt_tokens=7, output_tokens=3):
    response = MagicMock()
    response.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}],
        "usageMetadata": {"promptTokenCount": prompt_tokens, "candidatesTokenCount": output_tokens},
    }
    return response


@pytest.fixture
def openai_only(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-openai")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def gemini_only(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "gem-test")


def _client(config_manager, openai_client=None):
    client = LLMClient(config_manager=config_manager, openai_client=openai_client or MagicMock())
    client.retry_delay = 0
    return client


def test_provider_for_model():
    assert provider_for_model("gemini-2.5-flash") == "gemini"
    assert provider_for_model("gpt-4o") == "openai"


def test_models_for_task_openai_only(config_manager, openai_only):
    client = _client(config_manager)
    assert client.models_for_task("analysis") == ["gpt-4o", "gpt-4o-mini", "gpt-4.1-mini"]
    assert client.models_for_task("generation") == ["gpt-4o-mini", "gpt-4.1-mini"]


def test_models_for_task_both_keys(config_manager, mock_env_api_keys):
    client = _client(config_manager)
    assert client.models_for_task("analysis")[:2] == ["gpt-4o", "gemini-2.5-flash"]


def test_no_keys_raises(config_manager, no_env_api_keys):
    client = _client(config_manager)
    assert not client.has_api_key
    with pytest.raises(LLMUnavailableError):
        client.complete("hi", task="generation")


def test_openai_call_records_usage(config_manager, openai_only, fresh_tracker):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response('{"ok": true}', 120, 40)
    client = _client(config_manager, openai_client)

    text = client.complete("prompt", task="analysis", caller="assess_loan_viability",
                           system_prompt="sys", json_mode=True)

    assert text == '{"ok": true}'
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["max_tokens"] == config_manager.config.max_tokens

    summary = fresh_tracker.get_summary()
    assert summary["total_calls"] == 1
    assert summary["total_input_tokens"] == 120
    assert "assess_loan_viability" in summary["by_caller"]


def test_gpt5_mini_params(config_manager, openai_only):
    config_manager.config.openai_analysis_model = "gpt-5-mini"
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response("ok")
    client = _client(config_manager, openai_client)

    client.complete("prompt", task="analysis")

    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert "max_completion_tokens" in kwargs
    assert "max_tokens" not in kwargs
    assert "temperature" not in kwargs


def test_falls_back_to_next_model(config_manager, openai_only, fresh_tracker):
    openai_client = MagicMock()
    openai_client.chat.completions.create.side_effect = [
        RuntimeError("rate limited"),
        _openai_response("fallback answer"),
    ]
    client = _client(config_manager, openai_client)

    assert client.complete("prompt", task="analysis") == "fallback answer"
    assert list(fresh_tracker.get_summary()["by_model"]) == ["gpt-4o-mini"]


def test_empty_response_tries_next_model(config_manager, openai_only):
    openai_client = MagicMock()
    openai_client.chat.completions.create.side_effect = [
        _openai_response(""),
        _openai_response("second"),
    ]
    client = _client(config_manager, openai_client)
    assert client.complete("prompt", task="generation") == "second"


def test_all_models_fail(config_manager, openai_only):
    openai_client = MagicMock()
    openai_client.chat.completions.create.side_effect = RuntimeError("down")
    client = _client(config_manager, openai_client)

    with pytest.raises(LLMResponseError) as exc_info:
        client.complete("prompt", task="generation")
    assert "gpt-4o-mini: down" in str(exc_info.value)


def test_gemini_call(config_manager, gemini_only, fresh_tracker):
    config_manager.config.generation_provider = "gemini"
    client = _client(config_manager)

    with patch("core.llm_client.requests.post", return_value=_gemini_response("gemini text")) as post:
        text = client.complete("prompt", task="generation", system_prompt="sys", json_mode=True)

    assert text == "gemini text"
    payload = post.call_args.kwargs["json"]
    assert payload["systemInstruction"] == {"parts": [{"text": "sys"}]}
    assert payload["generationConfig"]["responseMimeType"] == "application/json"
    assert post.call_args.kwargs["params"] == {"key": "gem-test"}
    assert fresh_tracker.get_summary()["by_provider"]["gemini"]["input_tokens"] == 7


def test_gemini_retries_timeout(config_manager, gemini_only):
    config_manager.config.generation_provider = "gemini"
    client = _client(config_manager)

    with patch(
        "core.llm_client.requests.post",
        side_effect=[requests.exceptions.Timeout(), _gemini_response("after retry")],
    ) as post:
        assert client.complete("prompt", task="generation") == "after retry"
    assert post.call_count == 2


def test_gemini_no_candidates_is_failure(config_manager, gemini_only):
    config_manager.config.generation_provider = "gemini"
    client = _client(config_manager)
    empty = MagicMock()
    empty.json.return_value = {"promptFeedback": {"blockReason": "SAFETY"}}

    with patch("core.llm_client.requests.post", return_value=empty):
        with pytest.raises(LLMResponseError):
            client.complete("prompt", task="generation")


def test_complete_json_parses_fenced(config_manager, openai_only):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response(
        '```json\n{"isViable": true}\n```'
    )
    client = _client(config_manager, openai_client)
    assert client.complete_json("prompt", task="analysis") == {"isViable": True}


def test_complete_json_rejects_prose(config_manager, openai_only):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response("I cannot help with that.")
    client = _client(config_manager, openai_client)
    with pytest.raises(LLMResponseError):
        client.complete_json("prompt", task="analysis")


@pytest.mark.asyncio
async def test_acomplete_runs_in_thread(config_manager, openai_only):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response("async ok")
    client = _client(config_manager, openai_client)
    assert await client.acomplete("prompt", task="generation") == "async ok"


EIP712_CODE = '```solidity\nbytes32 d = keccak256(abi.encodePacked("\\x19\\x01", sep, h));\n```'


def test_complete_keeps_literal_escapes_in_code(config_manager, openai_only, fresh_tracker):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response(EIP712_CODE + "\x00")
    client = _client(config_manager, openai_client)

    assert client.complete("prompt", task="generation") == EIP712_CODE


@pytest.mark.asyncio
async def test_generated_logic_keeps_literal_escapes(config_manager, openai_only, fresh_tracker):
    openai_client = MagicMock()
    openai_client.chat.completions.create.return_value = _openai_response(EIP712_CODE)
    client = _client(config_manager, openai_client)

    output = await generate_execution_logic(
        ExecutionLogicInput(asset="ETH", amount=1000, strategy="sign a permit"), client=client
    )
    assert output.execution_logic == 'bytes32 d = keccak256(abi.encodePacked("\\x19\\x01", sep, h));'
