from enum import Enum
from types import MappingProxyType
from typing import List, Dict, Any, Mapping, Tuple
from dataclasses import dataclass

from .errors import is_degraded


class AgentKind(Enum):
    SIMPLE = "simple"        # One call, sanitized
    CHAINED = "chained"      # Draft -> critique/rewrite (2-3 calls)
    RESEARCH = "research"    # Query -> web search -> analysis


class FailurePolicy(Enum):
    DEGRADE = "degrade"      # Failed branch becomes degraded text, siblings continue
    FAIL_FAST = "fail_fast"  # First failure cancels siblings and fails the request


@dataclass(frozen=True)
class PromptStep:
    """One call in an agent's pipeline: a system instruction and a user template."""
    system: str
    user: str = "{input}"


@dataclass(frozen=True)
class AgentSpec:
    """Declares one named unit of work and the instructions it runs."""
    name: str
    kind: AgentKind
    steps: Tuple[PromptStep, ...]
    description: str = ""

    @property
    def instructions(self) -> List[str]:
        return [step.system for step in self.steps]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "description": self.description,
            "steps": len(self.steps),
        }


@dataclass(frozen=True)
class InferenceRequest:
    """
    A (system, user) pair ready for transmission.

    `user_content` is cut to `max_chars` on construction, so the request can
    never carry more than the provider cap.
    """
    system_instruction: str
    user_content: str
    max_chars: int = 15000

    def __post_init__(self):
        if self.user_content and len(self.user_content) > self.max_chars:
            object.__setattr__(self, "user_content", self.user_content[:self.max_chars])

    def to_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_instruction},
            {"role": "user", "content": self.user_content or ""},
        ]


@dataclass(frozen=True)
class SearchResult:
    """A single organic web search hit."""
    title: str
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "snippet": self.snippet}


@dataclass(frozen=True)
class AggregateResult:
    """Name-keyed outputs of every declared agent for one request."""
    results: Mapping[str, str]
    execution_time_ms: int = 0

    def __post_init__(self):
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    def __getitem__(self, name: str) -> str:
        return self.results[name]

    def __len__(self) -> int:
        return len(self.results)

    def keys(self):
        return self.results.keys()

    @property
    def degraded(self) -> List[str]:
        return [name for name, text in self.results.items() if is_degraded(text)]

    @property
    def success(self) -> bool:
        return not self.degraded

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: str(self.results[name]) for name in self.results}
        data["degraded"] = self.degraded
        return data
