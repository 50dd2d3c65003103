from core.base_agent import Agent
from core.types import AgentKind
from core.utils import sanitize


class SimpleAgent(Agent):
    """One fixed instruction applied to the raw input; output is sanitized."""

    kind = AgentKind.SIMPLE

    async def _execute(self, input_text: str) -> str:
        raw = await self._call_step(self.spec.steps[0], {"input": input_text})
        return sanitize(raw)
