"""
Configuration for the Book Marketing Orchestrator.

Environment Variables:
    OPENROUTER_API_KEY  - Primary: Your OpenRouter API key
    ANTHROPIC_API_KEY   - Alternate: Anthropic/Claude API key (LLM_PROVIDER=anthropic)
    LLM_PROVIDER        - Optional: openrouter (default) or anthropic
    LLM_MODEL           - Optional: Model id (default: openrouter/free)
    LLM_BASE_URL        - Optional: OpenAI-compatible base URL (default: OpenRouter)
    SEARCH_PROVIDER     - Optional: serper (default) or tavily
    SERPER_API_KEY      - Optional: Serper key for the research agent
    TAVILY_API_KEY      - Optional: Tavily key for the research agent
    FAILURE_POLICY      - Optional: degrade (default) or fail_fast

Create a .env file in this directory with:

    OPENROUTER_API_KEY=sk-or-your-key-here
    SERPER_API_KEY=your-serper-key
    LLM_MODEL=openrouter/free
"""

import os
from dataclasses import dataclass
from typing import Optional

from core.errors import ConfigurationError
from core.llm import DEFAULT_MODEL, OPENROUTER_BASE_URL, LLMProvider, get_default_model
from core.types import FailurePolicy


@dataclass
class Config:
    """Application configuration."""

    # LLM Settings (OpenRouter is primary)
    openrouter_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    llm_provider: str = "openrouter"
    llm_model: str = DEFAULT_MODEL
    llm_base_url: str = OPENROUTER_BASE_URL
    http_referer: str = "https://github.com/book-marketing-orchestrator"
    app_title: str = "AuthorDashboard"

    # Input limits
    max_input_chars: int = 15000
    cover_input_chars: int = 1000

    # Search Settings
    search_provider: str = "serper"
    serper_api_key: Optional[str] = None
    tavily_api_key: Optional[str] = None
    search_max_results: int = 5

    # Orchestration Settings
    max_retries: int = 2
    request_timeout_seconds: float = 60.0
    agent_timeout_seconds: float = 120.0
    analysis_deadline_seconds: float = 180.0
    failure_policy: str = "degrade"
    prompts_file: Optional[str] = None

    # API Settings
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        # Auto-detect provider based on available keys
        openrouter_key = os.getenv("OPENROUTER_API_KEY")
        anthropic_key = os.getenv("ANTHROPIC_API_KEY")

        if openrouter_key or not anthropic_key:
            provider = LLMProvider.OPENROUTER.value
        else:
            provider = LLMProvider.ANTHROPIC.value
        provider = os.getenv("LLM_PROVIDER", provider)

        try:
            default_model = get_default_model(LLMProvider(provider))
        except ValueError:
            default_model = DEFAULT_MODEL

        return cls(
            openrouter_api_key=openrouter_key,
            anthropic_api_key=anthropic_key,
            llm_provider=provider,
            llm_model=os.getenv("LLM_MODEL", default_model),
            llm_base_url=os.getenv("LLM_BASE_URL", OPENROUTER_BASE_URL),
            http_referer=os.getenv("HTTP_REFERER", cls.http_referer),
            app_title=os.getenv("APP_TITLE", cls.app_title),
            max_input_chars=int(os.getenv("MAX_INPUT_CHARS", "15000")),
            cover_input_chars=int(os.getenv("COVER_INPUT_CHARS", "1000")),
            search_provider=os.getenv("SEARCH_PROVIDER", "serper"),
            serper_api_key=os.getenv("SERPER_API_KEY"),
            tavily_api_key=os.getenv("TAVILY_API_KEY"),
            search_max_results=int(os.getenv("SEARCH_MAX_RESULTS", "5")),
            max_retries=int(os.getenv("MAX_RETRIES", "2")),
            request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60")),
            agent_timeout_seconds=float(os.getenv("AGENT_TIMEOUT_SECONDS", "120")),
            analysis_deadline_seconds=float(os.getenv("ANALYSIS_DEADLINE_SECONDS", "180")),
            failure_policy=os.getenv("FAILURE_POLICY", "degrade"),
            prompts_file=os.getenv("PROMPTS_FILE"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
        )

    def validate(self) -> bool:
        """Check if required configuration is present."""
        return bool(self.get_api_key())

    def get_api_key(self) -> Optional[str]:
        """Get the appropriate API key based on provider."""
        if self.llm_provider == LLMProvider.ANTHROPIC.value:
            return self.anthropic_api_key
        return self.openrouter_api_key

    def get_search_key(self) -> Optional[str]:
        if self.search_provider == "tavily":
            return self.tavily_api_key
        return self.serper_api_key

    def get_failure_policy(self) -> FailurePolicy:
        try:
            return FailurePolicy(self.failure_policy)
        except ValueError:
            raise ConfigurationError(f"Unknown failure policy: {self.failure_policy}") from None
