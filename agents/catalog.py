"""
Prompt catalog: agent roster, chat personas and the cover instruction, loaded
from YAML so prompt wording can change without touching orchestration code.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from core.errors import ConfigurationError
from core.types import AgentKind, AgentSpec, PromptStep


DEFAULT_PROMPTS_FILE = Path(__file__).parent / "prompts.yaml"

# Names that would collide with fields the API adds to the aggregate payload
RESERVED_NAMES = {"error", "degraded"}

# (min, max) steps per kind
STEP_LIMITS = {
    AgentKind.SIMPLE: (1, 1),
    AgentKind.CHAINED: (2, 3),
    AgentKind.RESEARCH: (2, 2),
}


@dataclass(frozen=True)
class PromptCatalog:
    agents: Tuple[AgentSpec, ...]
    personas: Dict[str, str] = field(default_factory=dict)
    cover: str = ""

    @property
    def agent_names(self) -> List[str]:
        return [spec.name for spec in self.agents]

    def get(self, name: str) -> AgentSpec:
        for spec in self.agents:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def persona(self, mode: Optional[str]) -> str:
        """System prompt for a chat mode; unknown modes fall back to 'default'."""
        if mode and mode in self.personas:
            return self.personas[mode]
        return self.personas.get("default", "")


def _parse_step(agent: str, raw: Any) -> PromptStep:
    if isinstance(raw, str):
        return PromptStep(system=raw.strip())
    if not isinstance(raw, dict) or not raw.get("system"):
        raise ConfigurationError(f"Agent '{agent}': every step needs a 'system' instruction")
    return PromptStep(system=raw["system"].strip(), user=raw.get("user", "{input}").strip())


def parse_agent_spec(name: str, raw: Dict[str, Any]) -> AgentSpec:
    """Build and validate one AgentSpec from its catalog entry."""
    if name in RESERVED_NAMES:
        raise ConfigurationError(f"Agent name '{name}' is reserved")

    try:
        kind = AgentKind(raw.get("kind", "simple"))
    except ValueError:
        raise ConfigurationError(f"Agent '{name}': unknown kind '{raw.get('kind')}'")

    steps = tuple(_parse_step(name, s) for s in raw.get("steps") or [])
    low, high = STEP_LIMITS[kind]
    if not low <= len(steps) <= high:
        raise ConfigurationError(
            f"Agent '{name}': {kind.value} agents need {low}-{high} steps, got {len(steps)}"
        )

    return AgentSpec(name=name, kind=kind, steps=steps, description=raw.get("description", ""))


def parse_catalog(data: Dict[str, Any]) -> PromptCatalog:
    agents = data.get("agents") or {}
    if not isinstance(agents, dict) or not agents:
        raise ConfigurationError("Prompt catalog declares no agents")

    return PromptCatalog(
        agents=tuple(parse_agent_spec(name, raw or {}) for name, raw in agents.items()),
        personas={mode: text.strip() for mode, text in (data.get("personas") or {}).items()},
        cover=(data.get("cover") or "").strip(),
    )


def load_catalog(path: Optional[Union[str, Path]] = None) -> PromptCatalog:
    """Load the prompt catalog from YAML (the bundled one by default)."""
    path = Path(path) if path else DEFAULT_PROMPTS_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not load prompt catalog {path}: {e}") from e
    return parse_catalog(data)
