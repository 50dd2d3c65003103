"""Tests for the HTTP surface."""
import asyncio

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from config import Config
from core.errors import AI_ERROR, DegradedText, ProviderUnavailable
from core.llm import InferenceClient

from conftest import FakeInferenceClient, FakeSearchClient, fake_openai, status_error


def make_client(llm=None, search=None, raise_server_exceptions=True, **config):
    app = create_app(
        config=Config(**config),
        llm_client=llm or FakeInferenceClient(),
        search_client=search or FakeSearchClient(),
    )
    return TestClient(app, raise_server_exceptions=raise_server_exceptions)


class TestAnalyze:

    @pytest.mark.unit
    def test_returns_one_field_per_agent(self):
        client = make_client()

        response = client.post("/", json={"inputText": "The keeper's story", "selectedAction": "analyze"})

        assert response.status_code == 200
        assert response.json() == {
            "seo": "ok",
            "titles": "ok",
            "blurb": "ok",
            "polish": "ok",
            "research": "ok",
            "degraded": [],
        }

    @pytest.mark.unit
    def test_action_defaults_to_analyze(self):
        response = make_client().post("/", json={"inputText": "text"})
        assert response.status_code == 200
        assert "seo" in response.json()

    @pytest.mark.unit
    def test_legacy_action_name(self):
        response = make_client().post("/", json={"inputText": "text", "selectedAction": "process_book"})
        assert response.status_code == 200

    @pytest.mark.unit
    def test_snake_case_fields_accepted(self):
        response = make_client().post("/", json={"input_text": "text", "selected_action": "analyze"})
        assert response.status_code == 200

    @pytest.mark.unit
    def test_degraded_agents_listed(self):
        llm = FakeInferenceClient(
            lambda system, user: DegradedText(AI_ERROR) if "title consultant" in system else "fine"
        )

        body = make_client(llm=llm).post("/", json={"inputText": "text"}).json()

        assert body["titles"] == AI_ERROR
        assert body["degraded"] == ["titles"]
        assert body["seo"] == "fine"

    @pytest.mark.unit
    def test_provider_failure_degrades_by_default(self):
        llm = FakeInferenceClient(lambda system, user: ProviderUnavailable("openrouter", "HTTP 503"))

        response = make_client(llm=llm).post("/", json={"inputText": "text"})

        assert response.status_code == 200
        assert set(response.json()["degraded"]) == {"seo", "titles", "blurb", "polish", "research"}

    @pytest.mark.unit
    def test_provider_failure_is_502_under_fail_fast(self):
        llm = FakeInferenceClient(lambda system, user: ProviderUnavailable("openrouter", "HTTP 503"))

        response = make_client(llm=llm, failure_policy="fail_fast").post("/", json={"inputText": "text"})

        assert response.status_code == 502
        assert "openrouter" in response.json()["error"]

    @pytest.mark.unit
    def test_deadline_is_504(self):
        async def slow(system, user):
            await asyncio.sleep(5)
            return "late"

        client = make_client(llm=FakeInferenceClient(slow), analysis_deadline_seconds=0.05)

        response = client.post("/", json={"inputText": "text"})
        assert response.status_code == 504
        assert "error" in response.json()

    @pytest.mark.unit
    def test_unexpected_error_is_500_with_error_body(self):
        llm = FakeInferenceClient(lambda system, user: RuntimeError("kaboom"))
        client = make_client(llm=llm, raise_server_exceptions=False)

        response = client.post("/", json={"inputText": "text"})

        assert response.status_code == 500
        assert response.json() == {"error": "kaboom"}


class TestMalformedRequests:

    @pytest.mark.unit
    def test_invalid_json(self):
        response = make_client().post(
            "/", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.unit
    def test_missing_input_text(self):
        response = make_client().post("/", json={"selectedAction": "analyze"})

        assert response.status_code == 400
        assert "inputText" in response.json()["error"]

    @pytest.mark.unit
    def test_blank_input_text(self):
        llm = FakeInferenceClient()

        response = make_client(llm=llm).post("/", json={"inputText": "   "})

        assert response.status_code == 400
        assert llm.calls == []

    @pytest.mark.unit
    def test_unknown_action(self):
        response = make_client().post("/", json={"inputText": "text", "selectedAction": "dance"})

        assert response.status_code == 400
        assert "dance" in response.json()["error"]

    @pytest.mark.unit
    def test_missing_credentials_is_503(self):
        app = create_app(config=Config(), search_client=FakeSearchClient())
        response = TestClient(app).post("/", json={"inputText": "text"})

        assert response.status_code == 503
        assert "error" in response.json()


class TestCover:

    @pytest.mark.unit
    def test_returns_prompt_and_image_url(self):
        llm = FakeInferenceClient(default='"A lighthouse in a storm, oil painting"')

        response = make_client(llm=llm).post("/", json={"inputText": "x" * 3000, "selectedAction": "cover"})

        assert response.status_code == 200
        body = response.json()
        assert body["prompt"] == "A lighthouse in a storm, oil painting"
        assert body["image_url"].startswith("https://image.pollinations.ai/prompt/A%20lighthouse")
        assert len(llm.calls) == 1
        assert len(llm.calls[0][1]) == 1000

    @pytest.mark.unit
    def test_legacy_action_name(self):
        response = make_client().post("/", json={"inputText": "text", "selectedAction": "make_art"})
        assert response.status_code == 200
        assert set(response.json()) == {"prompt", "image_url"}


class TestChat:

    @pytest.mark.unit
    def test_known_mode(self):
        response = make_client().post("/chat", json={"message": "Help", "mode": "keywords"})

        assert response.status_code == 200
        assert response.json() == {"reply": "ok", "mode": "keywords", "degraded": False}

    @pytest.mark.unit
    def test_unknown_mode_falls_back_to_default(self):
        response = make_client().post("/chat", json={"message": "Help", "mode": "pirate"})
        assert response.json()["mode"] == "default"

    @pytest.mark.unit
    def test_empty_reply_is_no_response(self):
        llm = FakeInferenceClient(default=DegradedText(AI_ERROR))

        response = make_client(llm=llm).post("/chat", json={"message": "Help"})

        assert response.json() == {"reply": "No response.", "mode": "default", "degraded": True}


class TestProviderErrorReplies:

    def _client(self, status_code):
        llm = InferenceClient(
            api_key=None, client=fake_openai(status_error(status_code)), max_retries=0, retry_delay=0
        )
        return make_client(llm=llm)

    @pytest.mark.unit
    def test_chat_error_reply_is_no_response(self):
        response = self._client(401).post("/chat", json={"message": "Help"})

        assert response.status_code == 200
        assert response.json() == {"reply": "No response.", "mode": "default", "degraded": True}

    @pytest.mark.unit
    def test_cover_error_reply_is_placeholder_prompt(self):
        response = self._client(429).post("/", json={"inputText": "text", "selectedAction": "cover"})

        assert response.status_code == 200
        assert response.json()["prompt"] == AI_ERROR


class TestInfoEndpoints:

    @pytest.mark.unit
    def test_health(self):
        response = make_client().get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["llm_configured"] is False

    @pytest.mark.unit
    def test_root_serves_service_info(self):
        response = make_client().get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

    @pytest.mark.unit
    def test_unknown_failure_policy_is_503(self):
        response = make_client(failure_policy="sometimes").post("/", json={"inputText": "text"})

        assert response.status_code == 503
        assert "sometimes" in response.json()["error"]

    @pytest.mark.unit
    def test_agents(self):
        response = make_client().get("/agents")

        names = [agent["name"] for agent in response.json()["agents"]]
        assert names == ["seo", "titles", "blurb", "polish", "research"]
        assert response.json()["agents"][2] == {
            "name": "blurb",
            "kind": "chained",
            "description": "Back-cover blurb, drafted then refined",
            "steps": 2,
        }
