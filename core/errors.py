"""
Error taxonomy for the book-marketing orchestrator.

Exceptions propagate failures that should abort a request (or an agent step);
`DegradedText` represents results that are reachable-but-empty and travel as
ordinary text data.
"""

from typing import Optional


AI_ERROR = "AI Error"
NO_RESPONSE = "No response."
SEARCH_UNAVAILABLE = "Search unavailable."


class OrchestratorError(Exception):
    """Base class for all errors raised by the orchestrator."""


class ProviderUnavailable(OrchestratorError):
    """Transport-level failure talking to the inference or search provider."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider} unavailable: {message}")
        self.provider = provider


class MalformedRequest(OrchestratorError):
    """The incoming payload cannot be parsed into the expected shape."""


class AnalysisTimeout(OrchestratorError):
    """The whole fan-out did not finish before its deadline."""


class ConfigurationError(OrchestratorError):
    """Missing credential, unknown provider or invalid prompt catalog."""


class DegradedText(str):
    """
    Placeholder text substituted for a result the provider could not deliver.

    It is a real string, so it can be returned, embedded and serialized like
    any other agent output, but callers can detect it with `is_degraded`.
    """

    EMPTY_RESPONSE = "empty_response"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    SEARCH_UNAVAILABLE = "search_unavailable"

    reason: str

    def __new__(cls, text: str = AI_ERROR, reason: Optional[str] = None):
        obj = super().__new__(cls, text)
        obj.reason = reason or cls.EMPTY_RESPONSE
        return obj

    def __repr__(self) -> str:
        return f"DegradedText({str.__repr__(self)}, reason={self.reason!r})"


def is_degraded(value: object) -> bool:
    return isinstance(value, DegradedText)
