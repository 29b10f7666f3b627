"""
Forge Kernel: Source Transformer

Rewrites a generated component file into a declaration that can be pasted
into another module: header comment gone, imports gone, the primary export
bound to a generated local name.

Purely textual. Nothing is parsed into an AST, type-checked or executed.
Known limits:
- multi-line `import { a,\n b } from ...` lists are not removed
- only the primary export is renamed; later named `export` keywords
  are left in place
"""

from __future__ import annotations

import re

from engine.codegen.types import ExportShape, TransformResult

HEADER_COMMENT_RE = re.compile(r"^\s*//\s*File:.*$", re.MULTILINE)
IMPORT_LINE_RE = re.compile(r"^[ \t]*import\b[^;\n]*;[ \t]*\n?", re.MULTILINE)

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"

# Recognized export shapes; _primary_export decides which one is renamed
EXPORT_PATTERNS: list[tuple[ExportShape, re.Pattern[str]]] = [
    (ExportShape.DEFAULT_FUNCTION, re.compile(rf"export\s+default\s+function\s+{_IDENT}\s*\(")),
    (ExportShape.NAMED_FUNCTION, re.compile(rf"export\s+function\s+{_IDENT}\s*\(")),
    (ExportShape.CONST, re.compile(rf"export\s+const\s+{_IDENT}(?P<ann>\s*:\s*(?:[^=]|=>)+?)?\s*=(?!>)\s*")),
]
BARE_DEFAULT_RE = re.compile(r"export\s+default\s+")

FC_ALIAS_PATTERNS = (
    re.compile(r":\s*FC\s*<"),
    re.compile(r":\s*React\.FC\s*<"),
)

BLOCK_BEGIN = "// BEGIN INLINE COMPONENT: {name}"
BLOCK_END = "// END INLINE COMPONENT: {name}"


def strip_header_comment(source: str) -> str:
    """Drop the first `// File: ...` line."""
    return HEADER_COMMENT_RE.sub("", source, count=1)


def strip_imports(source: str) -> str:
    """Drop every single-line import statement."""
    return IMPORT_LINE_RE.sub("", source)


def _primary_export(source: str) -> tuple[ExportShape, re.Match[str] | None]:
    default_fn = EXPORT_PATTERNS[0][1].search(source)
    if default_fn:
        return ExportShape.DEFAULT_FUNCTION, default_fn

    # Otherwise whichever named declaration comes first in the file
    candidates = []
    for shape, pattern in EXPORT_PATTERNS[1:]:
        match = pattern.search(source)
        if match:
            candidates.append((match.start(), shape, match))
    if candidates:
        _, shape, match = min(candidates, key=lambda c: c[0])
        return shape, match

    bare = BARE_DEFAULT_RE.search(source)
    if bare:
        return ExportShape.BARE_DEFAULT, bare
    return ExportShape.NONE, None


def classify_export(source: str) -> ExportShape:
    """
    Return the shape of the primary export.

    A default function wins; otherwise the earliest named function or
    const; otherwise a bare `export default <expr>`.
    """
    return _primary_export(source)[0]


def rewrite_exports(source: str, generated_name: str) -> tuple[str, ExportShape]:
    """
    Bind the primary export to generated_name.

    Only the primary export is renamed. A bare `export default <expr>`
    becomes `const <name> = <expr>` when it is the primary export; any
    other bare default prefix is stripped. Further named exports keep
    their `export` keyword.
    """
    shape, match = _primary_export(source)
    if match is not None:
        replacement = {
            ExportShape.DEFAULT_FUNCTION: f"function {generated_name}(",
            ExportShape.NAMED_FUNCTION: f"function {generated_name}(",
            ExportShape.CONST: f"const {generated_name}{(match.groupdict().get('ann') or '').rstrip()} = ",
            ExportShape.BARE_DEFAULT: f"const {generated_name} = ",
        }[shape]
        source = source[: match.start()] + replacement + source[match.end() :]
    return BARE_DEFAULT_RE.sub("", source), shape


def uses_fc_alias(source: str) -> bool:
    """True when source annotates something as `FC<...>` or `React.FC<...>`."""
    return any(p.search(source) for p in FC_ALIAS_PATTERNS)


def wrap_block(name: str, body: str) -> str:
    """Surround body with the begin/end delimiters the patcher looks for."""
    return f"\n{BLOCK_BEGIN.format(name=name)}\n{body}\n{BLOCK_END.format(name=name)}\n"


def build_inline_component_source(source_code: str, generated_name: str) -> TransformResult:
    """
    Turn a component module into an inline declaration named generated_name.

    Args:
        source_code: Raw code from a CodeArtifact
        generated_name: Identifier the declaration will be bound to

    Returns:
        TransformResult with the delimited block and the FC-alias flag
    """
    src = strip_header_comment(source_code).strip()
    src = strip_imports(src).strip()
    src, shape = rewrite_exports(src, generated_name)

    return TransformResult(
        inline_source=wrap_block(generated_name, src),
        uses_fc_alias=uses_fc_alias(src),
        shape=shape,
    )
