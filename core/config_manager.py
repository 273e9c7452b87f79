#!/usr/bin/env python3
"""
Configuration Manager for FlashFlow

Manages API keys, model provider selection, simulator settings and the
builder defaults. Configuration is stored as YAML in ~/.flashflow/config.yaml.
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

import yaml
from rich.console import Console
from rich.table import Table

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "~/.flashflow/config.yaml"

PROVIDERS = ("openai", "gemini")
TASK_TYPES = ("generation", "analysis")


@dataclass
class FlashFlowConfig:
    """Main configuration for FlashFlow."""

    # API settings (for LLM features)
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # Model Provider Selection (per task type): "openai" or "gemini"
    generation_provider: str = "openai"   # Execution logic generation
    analysis_provider: str = "openai"     # Viability and risk analysis

    openai_generation_model: str = "gpt-4o-mini"
    openai_analysis_model: str = "gpt-4o"
    gemini_generation_model: str = "gemini-2.5-flash"
    gemini_analysis_model: str = "gemini-2.5-flash"

    max_tokens: int = 4000
    temperature: float = 0.2
    request_timeout: int = 120
    max_retries: int = 3

    # Placeholder executor
    simulator_delay: float = 2.0

    # Builder defaults
    default_asset: str = "ETH"
    default_amount: float = 1000

    # Logging
    log_level: str = "INFO"
    log_file: str = "~/.flashflow/flashflow.log"


def get_model_for_task(task_type: str, config: Optional[FlashFlowConfig] = None) -> str:
    """Get the configured model for a specific task type.

    Args:
        task_type: One of 'generation' or 'analysis'
        config: Config to read; a fresh ConfigManager is loaded when omitted.

    Returns:
        The model name to use (e.g., 'gpt-4o' or 'gemini-2.5-flash')
    """
    if task_type not in TASK_TYPES:
        raise ValueError(f"Unknown task type: {task_type}")
    if config is None:
        config = ConfigManager().config

    provider = get_provider_for_task(task_type, config)
    model = getattr(config, f"{provider}_{task_type}_model", None)
    if not model:
        model = "gemini-2.5-flash" if provider == "gemini" else "gpt-4o-mini"
    return model


def get_provider_for_task(task_type: str, config: FlashFlowConfig) -> str:
    provider = getattr(config, f"{task_type}_provider", "openai")
    return provider if provider in PROVIDERS else "openai"


class ConfigManager:
    """Manages FlashFlow configuration."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        self.config_file = Path(config_file).expanduser()
        self.console = Console()
        self.config = FlashFlowConfig()

        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_file.exists():
            return
        try:
            with open(self.config_file, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not load config file %s: %s", self.config_file, e)
            self._create_default_config()
            return

        if not isinstance(data, dict):
            return

        known = {f.name for f in fields(FlashFlowConfig)}
        for key, value in data.items():
            if key in known:
                setattr(self.config, key, value)
            else:
                logger.debug("Ignoring unknown config key: %s", key)

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, "w") as f:
            yaml.dump(asdict(self.config), f, default_flow_style=False, indent=2)
        logger.info("Configuration saved to %s", self.config_file)

    def _create_default_config(self) -> None:
        """Write a default configuration file over an unreadable one."""
        self.config = FlashFlowConfig()
        try:
            self.save_config()
        except OSError as e:
            logger.warning("Could not write default config: %s", e)

    # ── API keys ──────────────────────────────────────────────────

    def get_api_key(self, provider: str) -> str:
        """Return the API key for a provider. Environment variables win over stored keys."""
        env_name = f"{provider.upper()}_API_KEY"
        return os.getenv(env_name) or getattr(self.config, f"{provider}_api_key", "") or ""

    def set_openai_key(self, api_key: str) -> None:
        """Set OpenAI API key for LLM features."""
        self.config.openai_api_key = api_key
        self.save_config()

    def set_gemini_key(self, api_key: str) -> None:
        """Set Gemini API key for LLM features."""
        self.config.gemini_api_key = api_key
        self.save_config()

    def set_provider(self, provider: str, task_type: Optional[str] = None) -> None:
        """Route one task type (or all of them) to a provider."""
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")
        for task in ([task_type] if task_type else TASK_TYPES):
            if task not in TASK_TYPES:
                raise ValueError(f"Unknown task type: {task}")
            setattr(self.config, f"{task}_provider", provider)
        self.save_config()

    # ── Display ───────────────────────────────────────────────────

    @staticmethod
    def mask_key(key: str) -> str:
        if not key:
            return "not set"
        if len(key) > 4:
            return "***" + key[-4:]
        return "set"

    def show_config(self) -> None:
        """Display current configuration."""
        table = Table(title="FlashFlow Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("OpenAI API key", self.mask_key(self.get_api_key("openai")))
        table.add_row("Gemini API key", self.mask_key(self.get_api_key("gemini")))
        for task in TASK_TYPES:
            table.add_row(
                f"{task.title()} model",
                f"{get_provider_for_task(task, self.config)} / {get_model_for_task(task, self.config)}",
            )
        table.add_row("Max tokens", str(self.config.max_tokens))
        table.add_row("Temperature", str(self.config.temperature))
        table.add_row("Request timeout", f"{self.config.request_timeout}s")
        table.add_row("Simulator delay", f"{self.config.simulator_delay}s")
        table.add_row("Default asset", str(self.config.default_asset))
        table.add_row("Default amount", str(self.config.default_amount))
        table.add_row("Log level", str(self.config.log_level))

        self.console.print(table)
        self.console.print(f"\n[bold cyan]Config File:[/bold cyan] {self.config_file}")
