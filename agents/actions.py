"""
Single-call actions that sit beside the analysis fan-out: the cover-art
prompt and persona chat.
"""

from typing import Any, Optional
from urllib.parse import quote, urlencode

from core.errors import NO_RESPONSE, DegradedText, MalformedRequest, is_degraded
from core.utils import sanitize, truncate

from .catalog import PromptCatalog


IMAGE_RENDER_URL = "https://image.pollinations.ai/prompt/"


async def generate_cover_prompt(
    llm_client: Any,
    catalog: PromptCatalog,
    text: str,
    max_chars: int = 1000,
) -> str:
    """Ask the art-director persona for a text-to-image prompt."""
    if not text or not text.strip():
        raise MalformedRequest("inputText must be a non-empty string")

    raw = await llm_client.infer(catalog.cover, truncate(text, max_chars))
    return sanitize(raw)


def build_cover_image_url(
    prompt: str,
    width: int = 768,
    height: int = 1152,
    model: str = "flux",
) -> str:
    """URL of the rendered cover; the rendering service takes the prompt as a path segment."""
    params = urlencode({"width": width, "height": height, "nologo": "true", "model": model})
    return f"{IMAGE_RENDER_URL}{quote(prompt, safe='')}?{params}"


async def chat(
    llm_client: Any,
    catalog: PromptCatalog,
    message: str,
    mode: Optional[str] = None,
) -> str:
    if not message or not message.strip():
        raise MalformedRequest("message must be a non-empty string")

    reply = await llm_client.infer(catalog.persona(mode), message)
    if is_degraded(reply):
        return DegradedText(NO_RESPONSE, reason=reply.reason)
    return reply
