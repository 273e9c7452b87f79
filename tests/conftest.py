"""
Shared test fixtures for the FlashFlow test suite.

Provides fake API keys, a temp-dir ConfigManager,
and singleton reset helpers.
"""

import pytest

from core.config_manager import ConfigManager
from core.llm_usage_tracker import LLMUsageTracker
from core.transaction_manager import TransactionManager


@pytest.fixture
def mock_env_api_keys(monkeypatch):
    """Set fake API keys in environment so ConfigManager doesn't read real ones."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-fake-openai-key-12345")
    monkeypatch.setenv("GEMINI_API_KEY", "test-fake-gemini-key-12345")


@pytest.fixture
def no_env_api_keys(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def config_manager(tmp_path):
    """ConfigManager backed by a config file in a temp directory."""
    return ConfigManager(str(tmp_path / "config.yaml"))


@pytest.fixture
def fresh_transaction_manager():
    """Reset the TransactionManager singleton and return a fresh instance."""
    TransactionManager.reset()
    tm = TransactionManager.get_instance()
    yield tm
    TransactionManager.reset()


@pytest.fixture
def fresh_tracker():
    LLMUsageTracker.reset()
    tracker = LLMUsageTracker.get_instance()
    yield tracker
    LLMUsageTracker.reset()
