import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from core.base_agent import Agent
from core.errors import (
    AI_ERROR,
    AnalysisTimeout,
    DegradedText,
    MalformedRequest,
    ProviderUnavailable,
)
from core.types import AgentKind, AgentSpec, AggregateResult, FailurePolicy

from .catalog import PromptCatalog
from .chained_agent import ChainedAgent
from .research_agent import ResearchAgent
from .simple_agent import SimpleAgent


logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Configuration for the Orchestrator."""
    agent_timeout_seconds: float = 120.0   # per agent branch
    deadline_seconds: float = 180.0        # whole fan-out
    failure_policy: FailurePolicy = FailurePolicy.DEGRADE


class Orchestrator:
    """
    Fans one input text out to every declared agent concurrently and
    assembles their outputs into an AggregateResult keyed by agent name.

    Responsibilities:
    - Run all agents at once inside a TaskGroup (no agent sees another's output)
    - Bound each agent with its own timeout and the whole fan-out with a deadline
    - Apply the failure policy: degrade a failed branch or cancel them all
    - Keep exactly one entry per declared agent, in declared order
    """

    def __init__(self, agents: Sequence[Agent], config: Optional[OrchestratorConfig] = None):
        names = [agent.name for agent in agents]
        if len(set(names)) != len(names):
            raise ValueError(f"Agent names must be unique: {names}")

        self.agents = list(agents)
        self.config = config or OrchestratorConfig()

    @property
    def agent_names(self) -> List[str]:
        return [agent.name for agent in self.agents]

    async def analyze(self, input_text: str) -> AggregateResult:
        """
        Run every agent against the same input and wait for all of them.

        Raises:
            MalformedRequest: input text is missing or blank
            AnalysisTimeout: the fan-out exceeded its deadline (or, under
                FAIL_FAST, one agent exceeded its timeout)
            ProviderUnavailable: under FAIL_FAST, an inference call failed
        """
        if not isinstance(input_text, str) or not input_text.strip():
            raise MalformedRequest("inputText must be a non-empty string")

        start_time = time.time()
        logger.info("Analyzing %d chars with agents %s", len(input_text), self.agent_names)

        try:
            async with asyncio.timeout(self.config.deadline_seconds):
                async with asyncio.TaskGroup() as tg:
                    tasks = {
                        agent.name: tg.create_task(self._run_branch(agent, input_text))
                        for agent in self.agents
                    }
        except TimeoutError:
            raise AnalysisTimeout(
                f"Analysis did not finish within {self.config.deadline_seconds}s"
            ) from None
        except ExceptionGroup as eg:
            # FAIL_FAST: surface the first failure, siblings are already cancelled
            raise eg.exceptions[0]

        results: Dict[str, str] = {name: task.result() for name, task in tasks.items()}
        aggregate = AggregateResult(
            results=results,
            execution_time_ms=int((time.time() - start_time) * 1000),
        )
        logger.info(
            "Analysis complete in %dms (degraded: %s)",
            aggregate.execution_time_ms, aggregate.degraded or "none",
        )
        return aggregate

    async def _run_branch(self, agent: Agent, input_text: str) -> str:
        fail_fast = self.config.failure_policy == FailurePolicy.FAIL_FAST
        try:
            return await asyncio.wait_for(
                agent.run(input_text),
                timeout=self.config.agent_timeout_seconds,
            )
        except TimeoutError:
            logger.warning("Agent %s timed out after %ss", agent.name, self.config.agent_timeout_seconds)
            if fail_fast:
                raise AnalysisTimeout(
                    f"Agent '{agent.name}' timed out after {self.config.agent_timeout_seconds}s"
                ) from None
            return DegradedText(AI_ERROR, reason=DegradedText.TIMEOUT)
        except ProviderUnavailable as e:
            logger.warning("Agent %s failed: %s", agent.name, e)
            if fail_fast:
                raise
            return DegradedText(AI_ERROR, reason=DegradedText.PROVIDER_UNAVAILABLE)


def build_agent(spec: AgentSpec, llm_client: Any, search_client: Optional[Any] = None) -> Agent:
    """Instantiate the agent class matching a spec's kind."""
    if spec.kind == AgentKind.SIMPLE:
        return SimpleAgent(spec, llm_client)
    if spec.kind == AgentKind.CHAINED:
        return ChainedAgent(spec, llm_client)
    if spec.kind == AgentKind.RESEARCH:
        return ResearchAgent(spec, llm_client, search_client)
    raise ValueError(f"Unknown agent kind: {spec.kind}")


def create_orchestrator(
    catalog: PromptCatalog,
    llm_client: Any,
    search_client: Optional[Any] = None,
    config: Optional[OrchestratorConfig] = None,
) -> Orchestrator:
    """Create the orchestrator with one agent per catalog entry."""
    agents = [build_agent(spec, llm_client, search_client) for spec in catalog.agents]
    return Orchestrator(agents, config)
