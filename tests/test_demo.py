import pytest

from core.errors import ConfigurationError, OrchestratorError
from demo import SAMPLE_TEXT, MockInferenceClient, read_input, run_demo


@pytest.fixture
def demo_env(monkeypatch):
    for name in ("OPENROUTER_API_KEY", "ANTHROPIC_API_KEY", "PROMPTS_FILE", "FAILURE_POLICY", "LLM_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
async def test_mock_analysis_prints_every_agent(demo_env, capsys):
    await run_demo(SAMPLE_TEXT, "analyze", None, use_mock=True)

    out = capsys.readouterr().out
    for name in ("SEO", "TITLES", "BLURB", "POLISH", "RESEARCH"):
        assert f"── {name} " in out


@pytest.mark.unit
async def test_unknown_failure_policy_is_an_orchestrator_error(demo_env):
    demo_env.setenv("FAILURE_POLICY", "sometimes")

    with pytest.raises(ConfigurationError) as exc_info:
        await run_demo(SAMPLE_TEXT, "analyze", None, use_mock=True)
    assert isinstance(exc_info.value, OrchestratorError)


@pytest.mark.unit
async def test_mock_client_answers_cover_prompt(catalog):
    reply = await MockInferenceClient().infer(catalog.cover, SAMPLE_TEXT)
    assert "lighthouse" in reply


@pytest.mark.unit
def test_read_input(tmp_path):
    path = tmp_path / "chapter.txt"
    path.write_text("Chapter one.", encoding="utf-8")

    assert read_input(str(path)) == "Chapter one."
    assert read_input("") == SAMPLE_TEXT
