"""
Exception hierarchy for FlashFlow.

LLM flows and the loan builder raise these; the TUI and CLI layers catch
them and turn them into notifications or exit codes.
"""

from typing import Dict, Optional


class FlashFlowError(Exception):
    """Base class for all FlashFlow errors."""


class LLMUnavailableError(FlashFlowError):
    """No API key is configured for any usable provider."""


class LLMResponseError(FlashFlowError):
    """Every model failed, or the response could not be turned into the expected shape."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response


class FormValidationError(FlashFlowError):
    """The builder form failed validation.

    Args:
        title: Short summary shown as the notification title.
        field_errors: Mapping of form field name to its error message.
    """

    def __init__(self, title: str, field_errors: Optional[Dict[str, str]] = None):
        self.title = title
        self.field_errors = dict(field_errors or {})
        detail = "; ".join(f"{k}: {v}" for k, v in self.field_errors.items())
        super().__init__(f"{title}: {detail}" if detail else title)


class NotViableError(FlashFlowError):
    """Execution was requested for a transaction that is not viable."""
