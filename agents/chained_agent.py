from typing import Dict

from core.base_agent import Agent
from core.errors import is_degraded
from core.types import AgentKind
from core.utils import sanitize


class ChainedAgent(Agent):
    """
    Refinement loop: draft -> critique/rewrite (-> optional second rewrite).

    Each step's templates may reference:
    - {input}: the raw input text
    - {previous}: the output of the step just before
    - {step1}, {step2}: the output of a specific earlier step

    Steps run strictly in order because each one embeds the literal text of
    the one before. Only the final output is sanitized. A degraded step ends
    the chain and its placeholder is returned as the agent's result.
    """

    kind = AgentKind.CHAINED

    async def _execute(self, input_text: str) -> str:
        values: Dict[str, str] = {"input": input_text}
        output = ""

        for index, step in enumerate(self.spec.steps, start=1):
            output = await self._call_step(step, values)
            if is_degraded(output):
                return output
            values[f"step{index}"] = output
            values["previous"] = output

        return sanitize(output)
