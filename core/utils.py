
import re
from typing import List, Optional

from .errors import is_degraded


_BLANK_LINES = re.compile(r"^\s*[\r\n]", re.MULTILINE)


def sanitize(raw: Optional[str]) -> str:
    """
    Clean a raw LLM response so list-type output can be split into lines.

    Removes double quotes, square brackets, markdown code fences (```json and
    bare ```) and blank lines, then trims surrounding whitespace. Lossy on
    purpose: legitimate quotes and brackets are stripped as well.

    Args:
        raw: The raw string response from LLM (may be None or empty)

    Returns:
        Cleaned text. Degraded placeholders are returned untouched.
    """
    if not raw:
        return ""
    if is_degraded(raw):
        return raw

    # Quotes and brackets go first so removing them cannot assemble a new fence
    text = raw.replace('"', "").replace("[", "").replace("]", "")
    text = text.replace("```json", "").replace("```", "")
    text = _BLANK_LINES.sub("", text)
    return text.strip()


def split_lines(text: Optional[str]) -> List[str]:
    """Return the non-empty lines of a sanitized list-type output."""
    return [line.strip() for line in sanitize(text).splitlines() if line.strip()]


def truncate(text: Optional[str], max_chars: int) -> str:
    if not text:
        return ""
    return text[:max_chars]
