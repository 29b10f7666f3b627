"""
Forge Kernel: Shared Types

Data classes passed between the parser, transformer, patcher and renderers.
These are the contracts that bind the kernel together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_LANGUAGE = "typescript"

# Extensions stripped from component file names and import paths
SOURCE_EXT_PATTERN = re.compile(r"\.(t|j)sx?$")

GENERATED_PREFIX = "Generated_"
FALLBACK_IDENTIFIER = "GeneratedComponent"

# Wire spellings accepted as true for boolean flags; anything else is false
_TRUE_STRINGS = frozenset({"1", "on", "t", "true", "y", "yes"})


def parse_flag(value: Any) -> bool:
    """Read a JSON boolean flag strictly: "false", "0" and null are all false."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (bool, int)):
        return value == 1
    return False


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CodeArtifact:
    """
    One file extracted from model output.

    file_path is repo-relative with forward slashes; code is the fenced
    body without the delimiter lines.
    """

    file_path: str
    language: str
    code: str

    def __post_init__(self) -> None:
        if not self.file_path:
            raise ValueError("CodeArtifact.file_path must be non-empty")

    def to_dict(self) -> dict[str, Any]:
        return {"filePath": self.file_path, "language": self.language, "code": self.code}


class ExportShape(str, Enum):
    """Which export form the transformer recognized first."""

    DEFAULT_FUNCTION = "default_function"
    NAMED_FUNCTION = "named_function"
    CONST = "const"
    BARE_DEFAULT = "bare_default"
    NONE = "none"


@dataclass
class TransformResult:
    """Inline-ready declaration plus whether the host needs the FC alias."""

    inline_source: str
    uses_fc_alias: bool
    shape: ExportShape = ExportShape.NONE


@dataclass
class EmbedResult:
    """Outcome of merging a component into the host page."""

    embedded: bool
    import_name: str | None = None


@dataclass
class ApplyResult:
    """What an apply operation reports back to the caller."""

    file_path: str
    route_path: str | None = None
    embedded: bool | None = None
    import_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"filePath": self.file_path}
        if self.route_path is not None:
            d["routePath"] = self.route_path
        if self.embedded is not None:
            d["embedded"] = self.embedded
        if self.import_name is not None:
            d["importName"] = self.import_name
        return d


@dataclass
class PreviewMessage:
    """
    Payload carried on the preview channel.
    Not persisted; the newest message replaces any undelivered one.
    """

    code: str
    file_path: str | None = None
    loading: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "filePath": self.file_path, "loading": self.loading}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PreviewMessage:
        return cls(
            code=d.get("code", ""),
            file_path=d.get("filePath"),
            loading=parse_flag(d.get("loading")),
        )


@dataclass
class CodeBlock:
    """A fenced or HTML-tagged code segment."""

    language: str
    code: str
    type: str = field(default="code", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "language": self.language, "code": self.code}


@dataclass
class TextBlock:
    """A run of prose between code segments."""

    text: str
    type: str = field(default="text", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


Block = CodeBlock | TextBlock
