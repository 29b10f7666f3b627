"""
Forge Kernel: Markdown Block Splitter

Segments chat text into alternating prose and code blocks for display.
Shares the fence grammar with the artifact parser but knows nothing
about headers or file paths.
"""

from __future__ import annotations

import re

from engine.codegen.types import DEFAULT_LANGUAGE, Block, CodeBlock, TextBlock

FENCE_LINE_RE = re.compile(r"^\s*```\s*([\w+\-]*)\s*$")

HTML_CODE_RE = re.compile(
    r'<pre><code(?: class="language-([\w+\-]+)")?>([\s\S]*?)</code></pre>'
    r'|<code(?: class="language-([\w+\-]+)")?>([\s\S]*?)</code>'
)

_ENTITIES = {"&lt;": "<", "&gt;": ">", "&amp;": "&", "&quot;": '"', "&#39;": "'"}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))


def parse_content_to_blocks(markdown: str) -> list[Block]:
    """
    Split text on fence lines.

    A fence line is ``` plus an optional language tag and nothing else.
    An unterminated fence at the end is still emitted as code, as long as
    it has content.
    """
    lines = re.sub(r"\r\n?", "\n", markdown).split("\n")
    blocks: list[Block] = []
    in_code = False
    code_lang = ""
    code_lines: list[str] = []
    text_lines: list[str] = []

    def push_text() -> None:
        if text_lines:
            blocks.append(TextBlock("\n".join(text_lines)))
            text_lines.clear()

    def push_code() -> None:
        nonlocal code_lang
        blocks.append(CodeBlock(code_lang or DEFAULT_LANGUAGE, "\n".join(code_lines)))
        code_lines.clear()
        code_lang = ""

    for line in lines:
        fence = FENCE_LINE_RE.match(line)
        if fence:
            if not in_code:
                in_code = True
                code_lang = fence.group(1)
                push_text()
            else:
                in_code = False
                push_code()
            continue

        if in_code:
            code_lines.append(line)
        else:
            text_lines.append(line)

    if in_code and code_lines:
        push_code()
    push_text()

    return blocks


def unescape_html(s: str) -> str:
    """Undo the five entities a renderer emits inside <code>; leave the rest alone."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], s)


def split_html_code_blocks(text: str) -> list[Block]:
    """Pull <pre><code> and <code> elements out of a prose block as code blocks."""
    blocks: list[Block] = []
    last_index = 0

    for match in HTML_CODE_RE.finditer(text):
        if match.start() > last_index:
            blocks.append(TextBlock(text[last_index : match.start()]))

        language = match.group(1) or match.group(3) or DEFAULT_LANGUAGE
        body = unescape_html((match.group(2) or match.group(4) or "").strip())
        blocks.append(CodeBlock(language, body))
        last_index = match.end()

    if last_index < len(text):
        blocks.append(TextBlock(text[last_index:]))

    return blocks


def split_blocks(markdown: str) -> list[Block]:
    """Fence pass, then the HTML pass over every prose block."""
    blocks: list[Block] = []
    for block in parse_content_to_blocks(markdown):
        if isinstance(block, TextBlock):
            blocks.extend(split_html_code_blocks(block.text))
        else:
            blocks.append(block)
    return blocks


def join_blocks(blocks: list[Block]) -> str:
    """
    Inverse of split_blocks, with fences re-inserted around code.

    Untagged fences come back tagged with the default language and line
    endings come back as LF. HTML code elements come back as fences.
    """
    parts = []
    for block in blocks:
        if isinstance(block, CodeBlock):
            parts.append(f"```{block.language}\n{block.code}\n```")
        else:
            parts.append(block.text)
    return "\n".join(parts)
