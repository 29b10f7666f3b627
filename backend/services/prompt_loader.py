"""
System prompt loader for the code generator.

Prompts live in <PROMPT_DIR>/<kind>-prompt.xml with the text between
<system_prompt> tags. The {{sandbox_dir}} and {{host_page}} placeholders are
rendered with chevron so prompts can refer to the active project layout. Any
other double-brace text is left alone.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import chevron

logger = logging.getLogger(__name__)

PROMPT_KINDS = ("code", "decision")

DEFAULT_PROMPTS: dict[str, str] = {
    "code": "You are a helpful AI coding assistant.",
    "decision": "You are an intelligent code generation orchestrator.",
}

_SYSTEM_PROMPT_RE = re.compile(r"<system_prompt>([\s\S]*?)</system_prompt>")

# Only these names are template tags. Any other {{ ... }} (JSX style objects,
# prompt examples) is prompt text.
PROMPT_CONTEXT_KEYS = ("sandbox_dir", "host_page")
_PLACEHOLDER_RE = re.compile(r"\{\{\s*(" + "|".join(PROMPT_CONTEXT_KEYS) + r")\s*\}\}")

# Control characters cannot appear in an XML prompt file, so they are safe tag delimiters.
_LDEL = "\x02"
_RDEL = "\x03"

# Cache raw prompt templates in memory (they don't change at runtime)
_cache: dict[Path, str | None] = {}


def _load(path: Path) -> str | None:
    """Load and cache the <system_prompt> body of one file. None if unusable."""
    if path not in _cache:
        try:
            xml_content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("prompt_loader: cannot read %s: %s", path, e)
            return None
        match = _SYSTEM_PROMPT_RE.search(xml_content)
        _cache[path] = match.group(1).strip() if match and match.group(1).strip() else None
    return _cache[path]


def clear_cache() -> None:
    _cache.clear()


def load_prompt(kind: str, prompt_dir: Path, context: dict[str, Any] | None = None) -> str:
    """
    Load the system prompt for kind ("code" or "decision").

    Unknown kinds load the code prompt. A missing file or missing
    <system_prompt> element falls back to the built-in default.

    Args:
        kind: Prompt kind
        prompt_dir: Directory holding <kind>-prompt.xml files
        context: Values for {{placeholders}} in the prompt

    Returns:
        Rendered prompt text
    """
    if kind not in PROMPT_KINDS:
        kind = "code"

    template = _load(prompt_dir / f"{kind}-prompt.xml")
    if template is None:
        logger.warning("prompt_loader: using default %s prompt", kind)
        return DEFAULT_PROMPTS[kind]

    return render_placeholders(template, context or {})


def render_placeholders(template: str, context: dict[str, Any]) -> str:
    """Fill {{sandbox_dir}} and {{host_page}}. Everything else is returned verbatim."""
    tagged = _PLACEHOLDER_RE.sub(lambda m: f"{_LDEL}&{m.group(1)}{_RDEL}", template)
    if tagged == template:
        return template
    return chevron.render(tagged, context, def_ldel=_LDEL, def_rdel=_RDEL)
