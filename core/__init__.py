from .types import (
    AgentKind,
    FailurePolicy,
    PromptStep,
    AgentSpec,
    InferenceRequest,
    SearchResult,
    AggregateResult,
)
from .errors import (
    OrchestratorError,
    ProviderUnavailable,
    MalformedRequest,
    AnalysisTimeout,
    ConfigurationError,
    DegradedText,
    is_degraded,
)
from .base_agent import Agent
from .utils import sanitize
from .llm import LLMProvider, InferenceClient, AnthropicInferenceClient, create_inference_client

__version__ = "1.0.0"

__all__ = [
    "AgentKind",
    "FailurePolicy",
    "PromptStep",
    "AgentSpec",
    "InferenceRequest",
    "SearchResult",
    "AggregateResult",
    "OrchestratorError",
    "ProviderUnavailable",
    "MalformedRequest",
    "AnalysisTimeout",
    "ConfigurationError",
    "DegradedText",
    "is_degraded",
    "Agent",
    "sanitize",
    "LLMProvider",
    "InferenceClient",
    "AnthropicInferenceClient",
    "create_inference_client",
]
