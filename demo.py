#!/usr/bin/env python3
"""
Demo script for the Book Marketing Orchestrator.

Runs the agents in-process against a manuscript, without the API server.

Usage:
    python demo.py chapter.txt
    python demo.py chapter.txt --action cover
    python demo.py notes.txt --action chat --mode keywords
    cat chapter.txt | python demo.py - --mock
"""

import sys
import asyncio
import argparse
from pathlib import Path
from datetime import datetime

from dotenv import load_dotenv

from agents.actions import build_cover_image_url, chat, generate_cover_prompt
from agents.catalog import load_catalog
from agents.orchestrator import OrchestratorConfig, create_orchestrator
from config import Config
from core.errors import OrchestratorError
from core.llm import create_inference_client
from core.logging_config import configure_logging
from core.search import create_search_client
from core.utils import split_lines


SAMPLE_TEXT = (
    "The lighthouse keeper had not spoken to anyone in eleven years. "
    "When the storm washed a girl onto his rocks, she was carrying his own logbook, "
    "dated thirty years in the future."
)


class MockInferenceClient:
    """Mock inference client for demo without API keys."""

    async def infer(self, system_instruction: str, user_content: str) -> str:
        await asyncio.sleep(0.1)
        system = system_instruction.lower()

        if "search-engine query" in system:
            return "lighthouse time travel mystery novels bestsellers"
        if "market analyst" in system:
            return (
                "## Comparable titles\n- Atmospheric time-slip mysteries\n\n"
                "## Competition\n- Crowded at the top, thin in the middle\n\n"
                "## Positioning\n- Lean on the isolated-keeper hook"
            )
        if "seo" in system:
            return '```\n"lighthouse mystery novel"\ntime slip thriller\n[isolated keeper fiction]\n```'
        if "title" in system:
            return "The Keeper's Log: A Novel of Storm and Time\nEleven Years of Silence: A Lighthouse Mystery"
        if "refine this blurb" in user_content.lower():
            return "He kept the light for eleven silent years. The sea just returned his future."
        if "copywriting" in system:
            return "What if the tide brought back your own future? ..."
        if "editor" in system:
            return "Eleven years. Not a word. Then the storm gave him a girl and a logbook."
        if "art director" in system:
            return "A lone lighthouse in a violent storm, oil painting, dramatic lighting, cinematic, 8k"
        return f"Processed: {user_content[:100]}..."


def read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    if source:
        return Path(source).read_text(encoding="utf-8")
    return SAMPLE_TEXT


async def run_demo(text: str, action: str, mode: str, use_mock: bool = False):
    """Run the orchestrator demo."""
    config = Config.from_env()
    catalog = load_catalog(config.prompts_file)

    print("\n" + "="*60)
    print("📚 BOOK MARKETING ORCHESTRATOR DEMO")
    print("="*60)
    print(f"\n📝 Input: {len(text)} chars, action: {action}\n")

    if use_mock or not config.validate():
        print("ℹ️  Using mock inference client (no API key found)\n")
        llm_client = MockInferenceClient()
        search_client = None
    else:
        print(f"✅ Using {config.llm_provider} ({config.llm_model})\n")
        llm_client = create_inference_client(config)
        search_client = create_search_client(config)

    start_time = datetime.now()

    if action == "cover":
        prompt = await generate_cover_prompt(llm_client, catalog, text, config.cover_input_chars)
        print(f"🎨 Prompt: {prompt}\n")
        print(f"🖼️  Image: {build_cover_image_url(prompt)}")
    elif action == "chat":
        reply = await chat(llm_client, catalog, text, mode)
        print(f"💬 [{mode or 'default'}]\n{reply}")
    else:
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
        print(f"🤖 Running agents in parallel: {', '.join(orchestrator.agent_names)}\n")
        result = await orchestrator.analyze(text)

        for name, output in result.results.items():
            spec = catalog.get(name)
            print(f"── {name.upper()} ({spec.kind.value}) " + "─"*30)
            if spec.kind.value == "research":
                print(output)
            else:
                for line in split_lines(output):
                    print(f"   • {line}")
            print()

        if result.degraded:
            print(f"⚠️  Degraded agents: {', '.join(result.degraded)}")

    elapsed = (datetime.now() - start_time).total_seconds()
    print(f"\n✅ Done in {elapsed:.1f}s")
    print("="*60 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Book Marketing Orchestrator Demo")
    parser.add_argument("source", nargs="?", default="",
                        help="Manuscript file to analyze ('-' for stdin, omit for a sample)")
    parser.add_argument("--action", choices=["analyze", "cover", "chat"], default="analyze")
    parser.add_argument("--mode", default=None, help="Persona for --action chat")
    parser.add_argument("--mock", action="store_true", help="Use mock LLM (no API key needed)")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    load_dotenv()
    configure_logging(args.log_level)

    try:
        asyncio.run(run_demo(read_input(args.source), args.action, args.mode, args.mock))
    except OrchestratorError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
