"""
Settings screen: view the configuration, manage API keys, route tasks to
providers, pick models and tune the placeholder executor.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView, Static

from core.config_manager import PROVIDERS, TASK_TYPES, get_model_for_task, get_provider_for_task
from cli.tui.dialogs.select import SelectDialog
from cli.tui.dialogs.text_input import TextInputDialog, positive_number


_MENU_OPTIONS = [
    ("view", "View current configuration"),
    ("keys", "Configure API keys"),
    ("providers", "Choose provider per task"),
    ("models", "Choose models"),
    ("delay", "Simulator delay"),
    ("back", "Back to dashboard"),
]

_OPENAI_MODELS = [
    "gpt-4o", "gpt-4o-mini", "gpt-4.1", "gpt-4.1-mini",
    "gpt-5", "gpt-5-mini", "gpt-5-nano",
]
_GEMINI_MODELS = [
    "gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash",
]
_MODELS = {"openai": _OPENAI_MODELS, "gemini": _GEMINI_MODELS}
_PROVIDER_LABELS = {"openai": "OpenAI", "gemini": "Google Gemini"}
_TASK_LABELS = {"generation": "Execution logic generation", "analysis": "Viability and risk analysis"}


class SettingsScreen(Screen):
    """Settings menu with options for configuration management."""

    BINDINGS = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("[bold cyan]Settings[/bold cyan]", id="settings-title")
        yield ListView(
            *[ListItem(Label(label), name=value) for value, label in _MENU_OPTIONS],
            id="settings-list",
        )
        yield Static("", id="settings-detail")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#settings-list", ListView).focus()

    @property
    def config_manager(self):
        return self.app.config_manager

    # ── Menu selection ────────────────────────────────────────────

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        choice = event.item.name
        if choice == "back":
            self.app.pop_screen()
        else:
            self.run_worker(self._handle_choice(choice), exclusive=True)

    async def _handle_choice(self, choice: str) -> None:
        if choice == "view":
            self._view_config()
        elif choice == "keys":
            await self._configure_api_keys()
        elif choice == "providers":
            await self._configure_providers()
        elif choice == "models":
            await self._configure_models()
        elif choice == "delay":
            await self._configure_delay()

    # ── View config ───────────────────────────────────────────────

    def _view_config(self) -> None:
        """Display the current configuration in the detail pane."""
        cm = self.config_manager
        config = cm.config

        lines = ["[bold]Current Configuration[/bold]\n"]
        lines.append(f"  [bold]OpenAI API key:[/bold]   {cm.mask_key(cm.get_api_key('openai'))}")
        lines.append(f"  [bold]Gemini API key:[/bold]   {cm.mask_key(cm.get_api_key('gemini'))}")
        lines.append("")
        for task in TASK_TYPES:
            provider = get_provider_for_task(task, config)
            model = get_model_for_task(task, config)
            lines.append(f"  [bold]{_TASK_LABELS[task]}:[/bold] {provider} / {model}")
        lines.append("")
        lines.append(f"  [bold]Max tokens:[/bold]       {config.max_tokens}")
        lines.append(f"  [bold]Temperature:[/bold]      {config.temperature}")
        lines.append(f"  [bold]Request timeout:[/bold]  {config.request_timeout}s")
        lines.append(f"  [bold]Simulator delay:[/bold]  {config.simulator_delay}s")
        lines.append("")
        lines.append(f"  [bold]Config file:[/bold]      {cm.config_file}")

        self.query_one("#settings-detail", Static).update("\n".join(lines))

    # ── API keys ──────────────────────────────────────────────────

    async def _configure_api_keys(self) -> None:
        """Ask for each provider key in turn; blank input keeps the current key."""
        detail = self.query_one("#settings-detail", Static)
        cm = self.config_manager
        detail.update("[bold]Configure API Keys[/bold]\n\nEnter keys (leave blank to skip).")

        changed = False
        for provider in PROVIDERS:
            masked = cm.mask_key(getattr(cm.config, f"{provider}_api_key", ""))
            new_val = await self.app.push_screen_wait(
                TextInputDialog(
                    f"{_PROVIDER_LABELS[provider]} API key (current: {masked})",
                    password=True,
                )
            )
            if new_val is None:
                detail.update("Cancelled.")
                return
            if new_val:
                setattr(cm.config, f"{provider}_api_key", new_val)
                changed = True

        if changed:
            cm.save_config()
            detail.update("[green]API keys saved.[/green]")
        else:
            detail.update("No changes.")

    # ── Providers and models ──────────────────────────────────────

    async def _configure_providers(self) -> None:
        detail = self.query_one("#settings-detail", Static)
        cm = self.config_manager

        for task in TASK_TYPES:
            selected = await self.app.push_screen_wait(
                SelectDialog(
                    f"Provider for {_TASK_LABELS[task].lower()}",
                    list(PROVIDERS),
                    labels=_PROVIDER_LABELS,
                    current=get_provider_for_task(task, cm.config),
                )
            )
            if selected is None:
                detail.update("Cancelled.")
                return
            cm.set_provider(selected, task)

        detail.update("[green]Provider selection saved.[/green]")

    async def _configure_models(self) -> None:
        """Pick the model each task uses on its configured provider."""
        detail = self.query_one("#settings-detail", Static)
        cm = self.config_manager
        config = cm.config

        for task in TASK_TYPES:
            provider = get_provider_for_task(task, config)
            current = get_model_for_task(task, config)
            choices = list(_MODELS[provider])
            if current not in choices:
                choices.insert(0, current)
            selected = await self.app.push_screen_wait(
                SelectDialog(
                    f"{_PROVIDER_LABELS[provider]} model for {_TASK_LABELS[task].lower()}",
                    choices,
                    current=current,
                )
            )
            if selected is None:
                detail.update("Cancelled.")
                return
            setattr(config, f"{provider}_{task}_model", selected)

        cm.save_config()
        detail.update("[green]Model selections saved.[/green]")

    # ── Simulator ─────────────────────────────────────────────────

    async def _configure_delay(self) -> None:
        detail = self.query_one("#settings-detail", Static)
        cm = self.config_manager
        value = await self.app.push_screen_wait(
            TextInputDialog(
                "Simulated execution delay (seconds)",
                default=str(cm.config.simulator_delay),
                validator=positive_number,
            )
        )
        if not value:
            detail.update("Cancelled.")
            return
        cm.config.simulator_delay = float(value)
        cm.save_config()
        self.app.execution_runner.delay = cm.config.simulator_delay
        detail.update(f"[green]Simulator delay set to {cm.config.simulator_delay}s.[/green]")

    # ── Bindings ──────────────────────────────────────────────────

    def action_go_back(self) -> None:
        self.app.pop_screen()
