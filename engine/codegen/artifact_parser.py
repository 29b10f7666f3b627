"""
Forge Kernel: Artifact Parser

Pulls a single (file_path, language, code) triple out of model output.

Expected shape:

    // File: app/components/Some.tsx
    ```tsx
    ...code...
    ```

CRLF and CR line endings are read as LF. The header may also sit on the
first line inside the fence. Single pass, regex on lines, no nested fences
and no escaping of fences inside strings.
"""

from __future__ import annotations

import re

from engine.codegen.errors import ArtifactParseError
from engine.codegen.types import DEFAULT_LANGUAGE, CodeArtifact

HEADER_RE = re.compile(r"^[ \t]*(?://[ \t]*)?File:[ \t]*(.+)$", re.MULTILINE)
FENCE_RE = re.compile(r"```([\w+\-]*)\n([\s\S]*?)\n```")

# Chat-side preview helpers prefer JSX-capable fences
_JSX_FENCE_RE = re.compile(r"```(tsx|jsx)\n([\s\S]*?)\n```")


def normalize_newlines(text: str) -> str:
    return re.sub(r"\r\n?", "\n", text)


def find_header(text: str) -> re.Match[str] | None:
    """Return the first `File: <path>` header match, or None."""
    for match in HEADER_RE.finditer(text):
        if match.group(1).strip():
            return match
    return None


def parse_single_file_block(text: str) -> CodeArtifact | None:
    """
    Extract the artifact described by a header line and its fence.

    The fence used is the first one that closes after the header starts,
    so a header placed inside the fence still pairs with it. Any later
    fences are ignored.

    Returns:
        CodeArtifact, or None when either the header or the fence is missing
    """
    text = normalize_newlines(text)
    header = find_header(text)
    if header is None:
        return None
    file_path = header.group(1).strip()

    for fence in FENCE_RE.finditer(text):
        if fence.end() <= header.start():
            continue
        language = fence.group(1).strip() or DEFAULT_LANGUAGE
        return CodeArtifact(file_path=file_path, language=language, code=fence.group(2))
    return None


def require_single_file_block(text: str) -> CodeArtifact:
    """Like parse_single_file_block, but a missing artifact is an error."""
    artifact = parse_single_file_block(text)
    if artifact is None:
        raise ArtifactParseError("Could not parse single-file code block")
    return artifact


def has_single_file_block(text: str, root: str = "app") -> bool:
    """Whether text carries an artifact under root, i.e. whether Apply should be offered."""
    text = normalize_newlines(text)
    header = find_header(text)
    if header is None or not header.group(1).strip().lstrip("/").startswith(f"{root}/"):
        return False
    return FENCE_RE.search(text) is not None


def extract_first_jsx_block(text: str) -> tuple[str, str | None] | None:
    """
    Pick the snippet the chat view auto-previews.

    Prefers a ```tsx / ```jsx fence, falls back to any fence. The header
    path is optional here.

    Returns:
        (code, file_path or None), or None when the text has no fence
    """
    text = normalize_newlines(text)
    header = find_header(text)
    file_path = header.group(1).strip() if header else None

    fence = _JSX_FENCE_RE.search(text)
    if fence and fence.group(2):
        return fence.group(2), file_path
    fence = FENCE_RE.search(text)
    if fence and fence.group(2):
        return fence.group(2), file_path
    return None
