"""
Forge Kernel: Host-Page Patcher

Inlines a generated component into the project's home page instead of
writing it as a separate module, then drops a usage of it into the page.

Each component lives in a delimited block named after its file:

    // BEGIN INLINE COMPONENT: Generated_Badge
    function Generated_Badge() { ... }
    // END INLINE COMPONENT: Generated_Badge

Re-applying a component with the same file base name replaces its block
and its usage element. Blocks of other names are left alone.

The read-modify-write of the host file is serialized by a per-patcher lock.
Separate processes patching the same file still race (last write wins).
"""

from __future__ import annotations

import logging
import posixpath
import re
import threading
from pathlib import Path

from engine.codegen.materializer import create_or_update_file
from engine.codegen.source_transformer import BLOCK_BEGIN, BLOCK_END, build_inline_component_source
from engine.codegen.types import (
    FALLBACK_IDENTIFIER,
    GENERATED_PREFIX,
    SOURCE_EXT_PATTERN,
    EmbedResult,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Anchors in the host document
# ---------------------------------------------------------------------------

HOME_EXPORT_RE = re.compile(r"\nexport\s+default\s+function\s+Home\s*\(")
CONTENT_MARKER = "{/* You can add your main content here */}"
MAIN_CLOSE_LINE_RE = re.compile(r"^([ \t]*)</main>", re.MULTILINE)
MAIN_CLOSE = "</main>"

REACT_NAMED_IMPORT_RE = re.compile(r"""(import\s+(?:type\s+)?(?:\w+\s*,\s*)?\{)([^}]*)(\}\s*from\s*['"]react['"])""")
FC_IMPORT_STMT = "import type { FC } from 'react';\n"

# Heuristic: no type information is available, so a `label: string` prop
# declaration anywhere in the source is taken to mean the component wants one.
LABEL_PROP_RE = re.compile(r"\blabel\s*:\s*string\b")
LABEL_PROP_SNIPPET = ' label="Preview"'

USAGE_INDENT = " " * 8


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def to_valid_identifier(base: str) -> str:
    """Turn a file base name into a JS identifier."""
    ident = re.sub(r"[^a-zA-Z0-9_]", "_", base)
    if re.match(r"^[0-9]", ident):
        ident = "_" + ident
    return ident or FALLBACK_IDENTIFIER


def generated_name_for(component_rel_path: str) -> str:
    """`app/components/my-card.tsx` -> `Generated_my_card`."""
    base = SOURCE_EXT_PATTERN.sub("", posixpath.basename(component_rel_path.replace("\\", "/")))
    return GENERATED_PREFIX + to_valid_identifier(base)


def module_import_path(component_rel_path: str, host_rel_path: str) -> str:
    """Import specifier of the component as seen from the host, without extension."""
    component = component_rel_path.replace("\\", "/")
    host_dir = posixpath.dirname(host_rel_path.replace("\\", "/")) or "."
    return SOURCE_EXT_PATTERN.sub("", posixpath.relpath(component, host_dir))


# ---------------------------------------------------------------------------
# Document edits (pure)
# ---------------------------------------------------------------------------


def ensure_fc_import(content: str) -> str:
    """
    Make `FC` importable from 'react' in the host document.

    Appends FC to an existing named import from 'react', or inserts a
    type-only import as the second line so a leading directive such as
    "use client" stays first.
    """
    named = REACT_NAMED_IMPORT_RE.search(content)
    if named:
        if re.search(r"\bFC\b", named.group(2)):
            return content
        items = named.group(2).strip().rstrip(",").strip()
        new_list = f"{items}, FC" if items else "FC"
        return content[: named.start()] + f"{named.group(1)} {new_list} {named.group(3)}" + content[named.end() :]

    newline = content.find("\n")
    insert_pos = newline + 1 if newline >= 0 else 0
    return content[:insert_pos] + FC_IMPORT_STMT + content[insert_pos:]


def remove_module_imports(content: str, import_path: str) -> str:
    """Drop every import statement whose specifier is import_path (or ./import_path)."""
    bare = import_path[2:] if import_path.startswith("./") else import_path
    pattern = re.compile(
        rf"""^import[^\n]*from\s*['"](?:\./)?{re.escape(bare)}['"];?[ \t]*\n?""",
        re.MULTILINE,
    )
    return pattern.sub("", content)


def remove_injected_block(content: str, name: str) -> str:
    """Remove a previously injected block for name, with the padding it was inserted with."""
    begin = re.escape(BLOCK_BEGIN.format(name=name))
    end = re.escape(BLOCK_END.format(name=name))
    return re.sub(rf"\n{begin}\n[\s\S]*?\n{end}\n\n?", "", content)


def remove_usage(content: str, name: str) -> str:
    """Remove usage elements previously inserted for name."""
    pattern = re.compile(rf'\n[ \t]*<div className="mt-8"><{re.escape(name)}(?: [^>]*?)? /></div>[ \t]*(?=\n|$)')
    return pattern.sub("", content)


def usage_line(name: str, source_code: str) -> str:
    prop = LABEL_PROP_SNIPPET if LABEL_PROP_RE.search(source_code) else ""
    return f'{USAGE_INDENT}<div className="mt-8"><{name}{prop} /></div>'


def insert_block(content: str, inline_source: str) -> str:
    """Place the block right above `export default function Home(`, else at the end."""
    anchor = HOME_EXPORT_RE.search(content)
    if anchor is None:
        return content + inline_source
    return content[: anchor.start()] + f"\n{inline_source}\nexport default function Home(" + content[anchor.end() :]


def insert_usage(content: str, line: str) -> str:
    """Place the usage after the content marker, else on its own line before </main>."""
    if CONTENT_MARKER in content:
        return content.replace(CONTENT_MARKER, f"{CONTENT_MARKER}\n{line}", 1)

    close = MAIN_CLOSE_LINE_RE.search(content)
    if close:
        return content[: close.start()] + f"{line}\n{close.group(1)}{MAIN_CLOSE}" + content[close.end() :]
    if MAIN_CLOSE in content:
        return content.replace(MAIN_CLOSE, f"\n{line}\n{MAIN_CLOSE}", 1)

    logger.warning("host_patcher: no content marker or </main> in host page, usage not inserted")
    return content


def patch_host_document(
    content: str,
    component_rel_path: str,
    source_code: str,
    host_rel_path: str = "app/page.tsx",
) -> tuple[str, str]:
    """
    Merge one component into the host document text.

    Args:
        content: Current host document
        component_rel_path: Repo-relative path the component was generated for
        source_code: Raw component source
        host_rel_path: Repo-relative path of the host document

    Returns:
        (updated document, generated identifier)
    """
    name = generated_name_for(component_rel_path)
    transformed = build_inline_component_source(source_code, name)

    if transformed.uses_fc_alias:
        content = ensure_fc_import(content)

    content = remove_module_imports(content, module_import_path(component_rel_path, host_rel_path))
    content = remove_injected_block(content, name)
    content = remove_usage(content, name)

    content = insert_block(content, transformed.inline_source)
    content = insert_usage(content, usage_line(name, source_code))
    return content, name


# ---------------------------------------------------------------------------
# Patcher (IO)
# ---------------------------------------------------------------------------


class HostPagePatcher:
    """
    Owns the host page file for the lifetime of the process.

    One instance per host file; embed() calls on it never interleave.
    """

    def __init__(self, project_root: Path, host_rel_path: str = "app/page.tsx") -> None:
        self.project_root = project_root
        self.host_rel_path = host_rel_path
        self.host_path = project_root / host_rel_path
        self._lock = threading.Lock()

    def embed(self, component_rel_path: str, source_code: str) -> EmbedResult:
        """
        Inline a component into the host page and persist it.

        Returns:
            EmbedResult(embedded=False) if the host file does not exist

        Raises:
            WriteFailed: If the host file cannot be written back
        """
        with self._lock:
            if not self.host_path.exists():
                logger.warning("host_patcher: host page %s not found, skipping embed", self.host_path)
                return EmbedResult(embedded=False)

            content = self.host_path.read_text(encoding="utf-8")
            content, name = patch_host_document(content, component_rel_path, source_code, self.host_rel_path)
            create_or_update_file(self.host_path, content)

        logger.info("host_patcher: embedded %s as %s", component_rel_path, name)
        return EmbedResult(embedded=True, import_name=name)
