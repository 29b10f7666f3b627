"""
Forge Kernel: the text-to-artifact pipeline.

Components:
  artifact_parser: model text → CodeArtifact (file path, language, code)
  source_transformer: component module → inline declaration
  host_patcher: inline declaration → home page (idempotent, single writer)
  materializer: sandbox-checked file writes
  sandbox_preview: self-contained Babel + React preview documents
  markdown_blocks: prose/code segmentation for display

Everything here is synchronous. Only host_patcher and materializer do IO.
"""

from engine.codegen.artifact_parser import parse_single_file_block, require_single_file_block
from engine.codegen.host_patcher import HostPagePatcher, patch_host_document
from engine.codegen.markdown_blocks import split_blocks
from engine.codegen.materializer import create_or_update_file, resolve_inside_root
from engine.codegen.sandbox_preview import render_component_preview, render_snippet_preview
from engine.codegen.source_transformer import build_inline_component_source

__all__ = [
    "parse_single_file_block",
    "require_single_file_block",
    "build_inline_component_source",
    "patch_host_document",
    "HostPagePatcher",
    "resolve_inside_root",
    "create_or_update_file",
    "render_snippet_preview",
    "render_component_preview",
    "split_blocks",
]
