from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging
import re
import time

from .errors import is_degraded
from .types import AgentKind, AgentSpec, PromptStep


logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render(template: str, **values: str) -> str:
    """
    Fill `{name}` placeholders in a prompt template.

    Single pass over the template: unknown placeholders and other braces in
    prompt text (JSON examples, etc.) are left alone, and substituted values
    are never scanned again.
    """
    return _PLACEHOLDER.sub(
        lambda m: str(values[m.group(1)]) if m.group(1) in values else m.group(0),
        template,
    )


class Agent(ABC):
    """Base class for all agents in the orchestration system."""

    kind: AgentKind

    def __init__(self, spec: AgentSpec, llm_client: Any):
        if spec.kind != self.kind:
            raise ValueError(f"{type(self).__name__} cannot run a {spec.kind.value} spec")
        self.spec = spec
        self.llm_client = llm_client

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def description(self) -> str:
        return self.spec.description

    @abstractmethod
    async def _execute(self, input_text: str) -> str:
        """Produce this agent's final text from the shared input."""

    async def run(self, input_text: str) -> str:
        start_time = time.time()
        result = await self._execute(input_text)
        execution_time = int((time.time() - start_time) * 1000)

        if is_degraded(result):
            logger.warning("Agent %s degraded (%s) after %dms", self.name, result.reason, execution_time)
        else:
            logger.info("Agent %s finished in %dms", self.name, execution_time)
        return result

    async def _call_step(self, step: PromptStep, values: Optional[Dict[str, str]] = None) -> str:
        """Render one step's templates and make a single inference call."""
        values = values or {}
        return await self.llm_client.infer(
            render(step.system, **values),
            render(step.user, **values),
        )
