import asyncio
import inspect
from types import SimpleNamespace
from typing import Any, Callable, List, Optional, Tuple

import httpx
import openai
import pytest

from agents.catalog import load_catalog
from core.types import SearchResult


class FakeInferenceClient:
    """
    Records every (system, user) pair and answers through `responder`.

    The responder may return text, return/raise an exception, or be async.
    """

    def __init__(self, responder: Optional[Callable[[str, str], Any]] = None, default: str = "ok"):
        self.responder = responder
        self.default = default
        self.calls: List[Tuple[str, str]] = []

    async def infer(self, system_instruction: str, user_content: str) -> str:
        self.calls.append((system_instruction, user_content))
        if self.responder is None:
            return self.default
        result = self.responder(system_instruction, user_content)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result


class FakeSearchClient:
    def __init__(self, results: Optional[List[SearchResult]] = None, error: Optional[Exception] = None):
        self.results = results or []
        self.error = error
        self.queries: List[str] = []

    async def search(self, query: str) -> List[SearchResult]:
        self.queries.append(query)
        if self.error:
            raise self.error
        return list(self.results)


class FakeCompletions:
    """Stands in for AsyncOpenAI().chat.completions."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.requests: List[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def completion(content: Optional[str]) -> SimpleNamespace:
    """An OpenAI-style chat completion carrying `content`."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_openai(*responses) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(list(responses))))


def status_error(status_code: int) -> openai.APIStatusError:
    """The exception the OpenAI SDK raises for an HTTP error reply."""
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(status_code, request=request, json={"error": {"message": "nope"}})
    return openai.APIStatusError(f"Error code: {status_code}", response=response, body=None)


async def sleep_then(seconds: float, value: Any) -> Any:
    await asyncio.sleep(seconds)
    return value


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def fake_llm():
    return FakeInferenceClient()


@pytest.fixture
def fake_search():
    return FakeSearchClient(results=[
        SearchResult(title="Keeper of the Light", snippet="A bestselling lighthouse mystery"),
        SearchResult(title="Tides of Tomorrow", snippet="Time-slip fiction tops the charts"),
    ])
