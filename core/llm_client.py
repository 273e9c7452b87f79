"""
LLM access for the FlashFlow prompt flows.

Supports OpenAI (official SDK) and Google Gemini (REST generateContent).
Each call tries the configured model for the task first, then falls back
to the other provider and a short list of stable models. Token usage is
recorded in LLMUsageTracker after every successful response.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import requests
from openai import OpenAI

from core.config_manager import (
    PROVIDERS,
    ConfigManager,
    get_model_for_task,
    get_provider_for_task,
)
from core.errors import LLMResponseError, LLMUnavailableError
from core.json_utils import parse_llm_json, strip_control_chars
from core.llm_usage_tracker import LLMUsageTracker

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

FALLBACK_MODELS = {
    "openai": ["gpt-4o-mini", "gpt-4.1-mini"],
    "gemini": ["gemini-2.5-flash"],
}


def provider_for_model(model: str) -> str:
    return "gemini" if model.startswith("gemini") else "openai"


class LLMClient:
    """Thin multi-provider client with model fallback and usage tracking."""

    retry_delay = 3.0

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        openai_client: Optional[Any] = None,
    ):
        self.config_manager = config_manager or ConfigManager()
        self.config = self.config_manager.config
        self.openai_api_key = self.config_manager.get_api_key("openai")
        self.gemini_api_key = self.config_manager.get_api_key("gemini")
        self.tracker = LLMUsageTracker.get_instance()
        self._openai_client = openai_client

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key) or bool(self.gemini_api_key)

    def _has_key_for(self, provider: str) -> bool:
        return bool(self.gemini_api_key if provider == "gemini" else self.openai_api_key)

    @property
    def openai_client(self):
        if self._openai_client is None:
            self._openai_client = OpenAI(
                api_key=self.openai_api_key,
                timeout=self.config.request_timeout,
            )
        return self._openai_client

    # ── Model selection ───────────────────────────────────────────

    def models_for_task(self, task: str) -> List[str]:
        """Ordered list of models to try for a task, limited to providers with a key."""
        primary_provider = get_provider_for_task(task, self.config)
        candidates = [get_model_for_task(task, self.config)]

        other_providers = [p for p in PROVIDERS if p != primary_provider]
        for provider in other_providers:
            candidates.append(getattr(self.config, f"{provider}_{task}_model", ""))
        for provider in [primary_provider] + other_providers:
            candidates.extend(FALLBACK_MODELS[provider])

        models: List[str] = []
        for model in candidates:
            if model and model not in models and self._has_key_for(provider_for_model(model)):
                models.append(model)
        return models

    # ── Public API ────────────────────────────────────────────────

    def complete(
        self,
        prompt: str,
        task: str,
        caller: str = "",
        system_prompt: str = "",
        json_mode: bool = False,
    ) -> str:
        """Send a prompt and return the response text.

        Raises:
            LLMUnavailableError: no API key for any provider.
            LLMResponseError: every candidate model failed or returned nothing.
        """
        if not self.has_api_key:
            raise LLMUnavailableError(
                "No LLM API key configured (set OPENAI_API_KEY or GEMINI_API_KEY)"
            )

        failures: List[str] = []
        for model in self.models_for_task(task):
            provider = provider_for_model(model)
            try:
                logger.debug("Calling %s model %s for %s", provider, model, caller or task)
                if provider == "gemini":
                    text, in_tok, out_tok = self._call_gemini_api(model, system_prompt, prompt, json_mode)
                else:
                    text, in_tok, out_tok = self._call_openai_api(model, system_prompt, prompt, json_mode)
            except Exception as e:
                logger.warning("Model %s failed: %s", model, e)
                failures.append(f"{model}: {e}")
                continue

            if not text:
                logger.warning("Model %s returned an empty response", model)
                failures.append(f"{model}: empty response")
                continue

            self.tracker.record(provider, model, in_tok, out_tok, caller=caller or task)
            logger.info("LLM call %s succeeded with %s (%d in / %d out tokens)",
                        caller or task, model, in_tok, out_tok)
            return strip_control_chars(text)

        raise LLMResponseError("All LLM models failed: " + "; ".join(failures or ["no usable model"]))

    def complete_json(
        self,
        prompt: str,
        task: str,
        caller: str = "",
        system_prompt: str = "",
    ) -> Dict[str, Any]:
        """Send a prompt and parse the response as a JSON object."""
        text = self.complete(prompt, task, caller=caller, system_prompt=system_prompt, json_mode=True)
        data = parse_llm_json(text)
        if not isinstance(data, dict) or not data:
            raise LLMResponseError("LLM response did not contain a JSON object", raw_response=text)
        return data

    async def acomplete(self, *args, **kwargs) -> str:
        return await asyncio.to_thread(self.complete, *args, **kwargs)

    async def acomplete_json(self, *args, **kwargs) -> Dict[str, Any]:
        return await asyncio.to_thread(self.complete_json, *args, **kwargs)

    # ── Providers ─────────────────────────────────────────────────

    @staticmethod
    def _estimate_tokens(text: str) -> int:
        return max(1, len(text or "") // 4)

    def _call_openai_api(
        self, model: str, system_prompt: str, prompt: str, json_mode: bool
    ) -> Tuple[Optional[str], int, int]:
        """Call OpenAI chat completions."""
        # GPT-5 models take max_completion_tokens; the mini/nano variants only accept the default temperature
        is_gpt5 = model.startswith("gpt-5")
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        params: Dict[str, Any] = {"model": model, "messages": messages}
        if not (is_gpt5 and ("mini" in model or "nano" in model)):
            params["temperature"] = self.config.temperature
        if is_gpt5:
            params["max_completion_tokens"] = self.config.max_tokens
        else:
            params["max_tokens"] = self.config.max_tokens
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        response = self.openai_client.chat.completions.create(**params)
        text = response.choices[0].message.content

        usage = getattr(response, "usage", None)
        in_tok = getattr(usage, "prompt_tokens", None) or self._estimate_tokens(prompt)
        out_tok = getattr(usage, "completion_tokens", None) or self._estimate_tokens(text)
        return text, int(in_tok), int(out_tok)

    def _call_gemini_api(
        self, model: str, system_prompt: str, prompt: str, json_mode: bool
    ) -> Tuple[Optional[str], int, int]:
        """Call Google Gemini generateContent, retrying timeouts and connection errors."""
        url = GEMINI_URL.format(model=model)
        generation_config: Dict[str, Any] = {
            "maxOutputTokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        max_retries = max(1, int(self.config.max_retries))
        for attempt in range(max_retries):
            try:
                response = requests.post(
                    url,
                    params={"key": self.gemini_api_key},
                    json=payload,
                    timeout=self.config.request_timeout,
                )
                response.raise_for_status()
                break
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError):
                if attempt < max_retries - 1:
                    logger.warning("Gemini timeout on attempt %d/%d, retrying...", attempt + 1, max_retries)
                    time.sleep(self.retry_delay)
                else:
                    raise

        result = response.json()
        text = None
        candidates = result.get("candidates") or []
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
            for part in parts:
                if isinstance(part, dict) and "text" in part:
                    text = part["text"]
                    break
            if text is None:
                logger.warning("No text found in Gemini response parts")
        else:
            logger.warning("No candidates in Gemini response: %s", result.get("promptFeedback"))

        usage = result.get("usageMetadata") or {}
        in_tok = usage.get("promptTokenCount") or self._estimate_tokens(prompt)
        out_tok = usage.get("candidatesTokenCount") or self._estimate_tokens(text or "")
        return text, int(in_tok), int(out_tok)
