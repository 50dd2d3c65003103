from .simple_agent import SimpleAgent
from .chained_agent import ChainedAgent
from .research_agent import ResearchAgent
from .catalog import PromptCatalog, load_catalog
from .orchestrator import Orchestrator, OrchestratorConfig, build_agent, create_orchestrator

__all__ = [
    "SimpleAgent",
    "ChainedAgent",
    "ResearchAgent",
    "PromptCatalog",
    "load_catalog",
    "Orchestrator",
    "OrchestratorConfig",
    "build_agent",
    "create_orchestrator",
]
