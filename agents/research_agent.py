import logging
from typing import Any, Optional

from core.base_agent import Agent
from core.errors import SEARCH_UNAVAILABLE, DegradedText, is_degraded
from core.search import format_results
from core.types import AgentKind, AgentSpec
from core.utils import sanitize


logger = logging.getLogger(__name__)

MAX_QUERY_CHARS = 200


class ResearchAgent(Agent):
    """
    Research Agent: market and competition analysis grounded in live search.

    Pipeline:
    1. Ask the model for a short search-engine query ({input})
    2. Run the query against the search provider (capped at max_results)
    3. Ask for the analysis with the flattened results embedded
       ({search_results}, {query}, {input})

    Search failures never leave this agent: they are replaced with a fixed
    "search unavailable" text. The final analysis is returned unsanitized so
    its markdown structure survives.
    """

    kind = AgentKind.RESEARCH

    def __init__(self, spec: AgentSpec, llm_client: Any, search_client: Optional[Any] = None):
        super().__init__(spec, llm_client)
        self.search_client = search_client

    async def _execute(self, input_text: str) -> str:
        query_step, analysis_step = self.spec.steps

        raw_query = await self._call_step(query_step, {"input": input_text})
        query = "" if is_degraded(raw_query) else sanitize(raw_query)[:MAX_QUERY_CHARS]

        search_results = await self._web_search(query)

        return await self._call_step(analysis_step, {
            "input": input_text,
            "query": query,
            "search_results": search_results,
        })

    async def _web_search(self, query: str) -> str:
        """Run the search, degrading to a fixed placeholder on any failure."""
        if not query:
            return DegradedText(SEARCH_UNAVAILABLE, reason=DegradedText.SEARCH_UNAVAILABLE)
        if self.search_client is None:
            logger.info("No search client configured; skipping web search for %s", self.name)
            return DegradedText(SEARCH_UNAVAILABLE, reason=DegradedText.SEARCH_UNAVAILABLE)

        try:
            results = await self.search_client.search(query)
        except Exception as e:  # any search failure is recovered here
            logger.warning("Search failed for %r: %s", query, e)
            return DegradedText(SEARCH_UNAVAILABLE, reason=DegradedText.SEARCH_UNAVAILABLE)

        logger.info("Search for %r returned %d results", query, len(results))
        return format_results(results)
