#!/usr/bin/env python3
"""
Run the Book Marketing Orchestrator API server.

Usage:
    python run.py                    # Run on default port 8000
    python run.py --port 8080        # Run on custom port
    python run.py --reload           # Run with hot reload (dev mode)

Environment Variables (set in .env file or export):
    OPENROUTER_API_KEY=sk-or-...    # Primary: Your OpenRouter API key
    ANTHROPIC_API_KEY=sk-ant-...    # Alternate provider (LLM_PROVIDER=anthropic)
    SERPER_API_KEY=...              # Optional: web search for the research agent
    LLM_MODEL=openrouter/free       # Optional: Model to use

Quick Start:
    1. Create a .env file with your API keys
    2. Install: pip install -e .
    3. Run the server: python run.py
    4. POST {"inputText": "...", "selectedAction": "analyze"} to http://localhost:8000/
"""

import argparse
from pathlib import Path

from dotenv import load_dotenv


def load_env() -> None:
    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        print(f"✅ Loaded .env from {env_file}")


def main():
    parser = argparse.ArgumentParser(description="Run the Book Marketing Orchestrator API")
    parser.add_argument("--host", default=None, help="Host to bind to (default: API_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: API_PORT or 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    args = parser.parse_args()

    load_env()

    from config import Config
    from core.logging_config import configure_logging

    config = Config.from_env()
    configure_logging(args.log_level or config.log_level)
    host = args.host or config.api_host
    port = args.port or config.api_port

    # Check for required API keys
    if not config.validate():
        print("⚠️  Warning: No LLM API key found. The API will not function properly.")
        print("   Set OPENROUTER_API_KEY (or ANTHROPIC_API_KEY with LLM_PROVIDER=anthropic).")
    else:
        print(f"✅ Using {config.llm_provider} ({config.llm_model}) as LLM provider")

    if not config.get_search_key():
        print(f"ℹ️  Note: no {config.search_provider} key set. The research agent will run without web search.")

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║         Book Marketing Orchestrator                          ║
╠══════════════════════════════════════════════════════════════╣
║  🔍 seo       - KDP keywords & BISAC categories              ║
║  🏷️  titles    - Title / subtitle pairs                       ║
║  📢 blurb     - Draft -> critique -> rewrite                 ║
║  ✨ polish    - Show, don't tell                             ║
║  📊 research  - Market analysis from live search             ║
╚══════════════════════════════════════════════════════════════╝

🚀 Starting server at http://{host}:{port}
📖 API docs at http://localhost:{port}/docs
""")

    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=(args.log_level or config.log_level).lower(),
    )


if __name__ == "__main__":
    main()
