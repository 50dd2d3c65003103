import logging
from typing import Any, Optional
from dataclasses import dataclass
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from agents.actions import build_cover_image_url, chat, generate_cover_prompt
from agents.catalog import PromptCatalog, load_catalog
from agents.orchestrator import Orchestrator, OrchestratorConfig, create_orchestrator
from config import Config
from core.errors import (
    AnalysisTimeout,
    ConfigurationError,
    MalformedRequest,
    OrchestratorError,
    ProviderUnavailable,
    is_degraded,
)
from core.llm import create_inference_client
from core.search import create_search_client


logger = logging.getLogger(__name__)

ANALYZE_ACTIONS = {"analyze", "process_book"}
COVER_ACTIONS = {"cover", "make_art"}


# Request/Response Models
class ActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input_text: str = Field(..., alias="inputText", description="Book text to analyze")
    selected_action: str = Field(
        default="analyze",
        alias="selectedAction",
        description="'analyze' for the agent fan-out or 'cover' for a cover-art prompt",
    )


class ChatRequest(BaseModel):
    message: str = Field(..., description="Question or pasted text")
    mode: Optional[str] = Field(default=None, description="Persona, e.g. 'keywords' or 'polish'")


class CoverResponse(BaseModel):
    prompt: str
    image_url: str


class ChatResponse(BaseModel):
    reply: str
    mode: str
    degraded: bool = False


@dataclass
class Services:
    """Clients and orchestrator shared by every request of one app."""
    config: Config
    catalog: PromptCatalog
    llm_client: Any
    search_client: Optional[Any]
    orchestrator: Orchestrator


def build_services(
    config: Config,
    llm_client: Optional[Any] = None,
    search_client: Optional[Any] = None,
    catalog: Optional[PromptCatalog] = None,
) -> Services:
    catalog = catalog or load_catalog(config.prompts_file)
    llm_client = llm_client or create_inference_client(config)
    if search_client is None:
        search_client = create_search_client(config)

    orchestrator = create_orchestrator(
        catalog,
        llm_client,
        search_client,
        OrchestratorConfig(
            agent_timeout_seconds=config.agent_timeout_seconds,
            deadline_seconds=config.analysis_deadline_seconds,
            failure_policy=config.get_failure_policy(),
        ),
    )
    return Services(
        config=config,
        catalog=catalog,
        llm_client=llm_client,
        search_client=search_client,
        orchestrator=orchestrator,
    )


def get_services(request: Request) -> Services:
    """Build clients on first use so the app can start without credentials."""
    state = request.app.state
    if state.services is None:
        state.services = build_services(
            state.config,
            llm_client=state.llm_client,
            search_client=state.search_client,
            catalog=state.catalog,
        )
    return state.services


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return "; ".join(parts) or "Malformed request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(MalformedRequest)
    async def malformed_request_handler(request: Request, exc: MalformedRequest):
        return _error(400, str(exc))

    @app.exception_handler(ProviderUnavailable)
    async def provider_unavailable_handler(request: Request, exc: ProviderUnavailable):
        logger.error("Provider failure: %s", exc)
        return _error(502, str(exc))

    @app.exception_handler(AnalysisTimeout)
    async def analysis_timeout_handler(request: Request, exc: AnalysisTimeout):
        return _error(504, str(exc))

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error("Configuration error: %s", exc)
        return _error(503, str(exc))

    @app.exception_handler(OrchestratorError)
    async def orchestrator_error_handler(request: Request, exc: OrchestratorError):
        return _error(500, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, str(exc))


def create_app(
    config: Optional[Config] = None,
    llm_client: Optional[Any] = None,
    search_client: Optional[Any] = None,
    catalog: Optional[PromptCatalog] = None,
) -> FastAPI:
    """
    Create the API application.

    Clients passed in are used as-is (tests inject fakes here); anything left
    out is built from `config` on the first request.
    """
    config = config or Config.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Book Marketing Orchestrator API starting (provider=%s, model=%s)",
                    config.llm_provider, config.llm_model)
        yield
        logger.info("Book Marketing Orchestrator API shutting down")

    app = FastAPI(
        title="Book Marketing Orchestrator",
        description="""
        Fans a manuscript out to a team of marketing agents in parallel:
        - **seo**: KDP keyword phrases and BISAC categories
        - **titles**: title/subtitle pairs
        - **blurb**: back-cover copy, drafted then refined
        - **polish**: show-don't-tell rewrite of the opening
        - **research**: market analysis grounded in live web search

        Also generates cover-art prompts and answers persona chat questions.
        """,
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.llm_client = llm_client
    app.state.search_client = search_client
    app.state.catalog = catalog
    app.state.services = None

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    register_error_handlers(app)

    # API Endpoints
    @app.get("/")
    async def root():
        """Service info."""
        return {
            "name": "Book Marketing Orchestrator",
            "version": "1.0.0",
            "status": "running",
            "actions": ["analyze", "cover"],
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "llm_provider": config.llm_provider,
            "llm_model": config.llm_model,
            "llm_configured": config.validate(),
            "search_provider": config.search_provider,
            "search_configured": bool(config.get_search_key()),
        }

    @app.get("/agents")
    async def list_agents(services: Services = Depends(get_services)):
        """List the agents every analysis fans out to."""
        return {"agents": [spec.to_dict() for spec in services.catalog.agents]}

    @app.post("/")
    async def run_action(body: ActionRequest, services: Services = Depends(get_services)):
        """
        Run an action against the submitted text.

        - analyze: every agent in parallel; one field per agent plus `degraded`
        - cover: a text-to-image prompt and the URL of its rendering
        """
        action = body.selected_action.strip().lower()

        if action in ANALYZE_ACTIONS:
            result = await services.orchestrator.analyze(body.input_text)
            return result.to_dict()

        if action in COVER_ACTIONS:
            prompt = await generate_cover_prompt(
                services.llm_client,
                services.catalog,
                body.input_text,
                max_chars=services.config.cover_input_chars,
            )
            return CoverResponse(prompt=prompt, image_url=build_cover_image_url(prompt))

        raise MalformedRequest(f"Unknown action: {body.selected_action}")

    @app.post("/chat", response_model=ChatResponse)
    async def run_chat(body: ChatRequest, services: Services = Depends(get_services)):
        """Answer with a single persona; unknown modes use the formatting assistant."""
        mode = body.mode if body.mode in services.catalog.personas else "default"
        reply = await chat(services.llm_client, services.catalog, body.message, mode)
        return ChatResponse(reply=reply, mode=mode, degraded=is_degraded(reply))

    return app


app = create_app()
