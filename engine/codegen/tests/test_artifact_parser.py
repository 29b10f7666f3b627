"""
Tests for engine/codegen/artifact_parser.py

Header + first fence extraction from model output.
"""

from __future__ import annotations

import pytest

from engine.codegen.artifact_parser import (
    extract_first_jsx_block,
    has_single_file_block,
    parse_single_file_block,
    require_single_file_block,
)
from engine.codegen.errors import ArtifactParseError
from engine.codegen.types import CodeArtifact

BADGE = "// File: app/widgets/Badge.tsx\n```tsx\nexport default function Badge(){return (<span>Hi</span>);}\n```"


class TestHeaderAndFence:
    def test_badge_example(self):
        artifact = parse_single_file_block(BADGE)
        assert artifact is not None
        assert artifact.file_path == "app/widgets/Badge.tsx"
        assert artifact.language == "tsx"
        assert artifact.code.startswith("export default function Badge")

    def test_code_is_exact_fence_interior(self):
        body = "  const a = 1;\n\n\tconst b = `x`;\n  "
        text = f"Here you go:\n// File: app/x.ts\n```ts\n{body}\n```\nThanks"
        artifact = parse_single_file_block(text)
        assert artifact.code == body

    def test_file_path_is_trimmed(self):
        artifact = parse_single_file_block("//   File:   app/a.tsx   \n```tsx\nx\n```")
        assert artifact.file_path == "app/a.tsx"

    def test_comment_marker_optional(self):
        artifact = parse_single_file_block("File: app/a.tsx\n```tsx\nx\n```")
        assert artifact.file_path == "app/a.tsx"

    def test_indented_header(self):
        artifact = parse_single_file_block("Intro\n    // File: app/a.tsx\n```tsx\nx\n```")
        assert artifact.file_path == "app/a.tsx"

    def test_header_inside_fence(self):
        text = "```tsx\n// File: app/components/Card.tsx\nexport const Card = () => null;\n```"
        artifact = parse_single_file_block(text)
        assert artifact.file_path == "app/components/Card.tsx"
        assert artifact.code.startswith("// File: app/components/Card.tsx")

    def test_language_defaults_to_typescript(self):
        artifact = parse_single_file_block("// File: app/a.tsx\n```\nx\n```")
        assert artifact.language == "typescript"

    def test_only_first_fence_used(self):
        text = "// File: app/a.tsx\n```tsx\nfirst\n```\n\n```css\nsecond\n```"
        artifact = parse_single_file_block(text)
        assert artifact.code == "first"
        assert artifact.language == "tsx"

    def test_fence_before_header_ignored(self):
        text = "```bash\nnpm i\n```\n// File: app/a.tsx\n```tsx\nreal\n```"
        artifact = parse_single_file_block(text)
        assert artifact.code == "real"

    def test_returns_code_artifact(self):
        assert isinstance(parse_single_file_block(BADGE), CodeArtifact)


class TestLineEndings:
    def test_crlf_input(self):
        artifact = parse_single_file_block(BADGE.replace("\n", "\r\n"))
        assert artifact is not None
        assert artifact.file_path == "app/widgets/Badge.tsx"
        assert artifact.language == "tsx"
        assert "\r" not in artifact.code

    def test_crlf_multiline_body(self):
        text = "// File: app/a.ts\r\n```ts\r\nconst a = 1;\r\nconst b = 2;\r\n```\r\n"
        assert parse_single_file_block(text).code == "const a = 1;\nconst b = 2;"

    def test_bare_cr_input(self):
        artifact = parse_single_file_block(BADGE.replace("\n", "\r"))
        assert artifact.file_path == "app/widgets/Badge.tsx"

    def test_chat_helpers_accept_crlf(self):
        text = BADGE.replace("\n", "\r\n")
        assert has_single_file_block(text)
        code, file_path = extract_first_jsx_block(text)
        assert code.startswith("export default function Badge")
        assert file_path == "app/widgets/Badge.tsx"


class TestNotFound:
    def test_no_fence(self):
        assert parse_single_file_block("// File: app/a.tsx\nconst a = 1;") is None

    def test_no_header(self):
        assert parse_single_file_block("```tsx\nconst a = 1;\n```") is None

    def test_empty_text(self):
        assert parse_single_file_block("") is None

    def test_empty_header_path(self):
        assert parse_single_file_block("// File:   \n```tsx\nx\n```") is None

    def test_unterminated_fence(self):
        assert parse_single_file_block("// File: app/a.tsx\n```tsx\nconst a = 1;") is None

    def test_require_raises(self):
        with pytest.raises(ArtifactParseError):
            require_single_file_block("no code here")

    def test_require_error_kind_is_bad_input(self):
        with pytest.raises(ArtifactParseError) as exc_info:
            require_single_file_block("")
        assert exc_info.value.kind == "bad_input"


class TestCodeArtifact:
    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            CodeArtifact(file_path="", language="tsx", code="")

    def test_frozen(self):
        artifact = CodeArtifact(file_path="app/a.tsx", language="tsx", code="x")
        with pytest.raises(AttributeError):
            artifact.code = "y"  # type: ignore[misc]

    def test_to_dict_uses_wire_names(self):
        artifact = CodeArtifact(file_path="app/a.tsx", language="tsx", code="x")
        assert artifact.to_dict() == {"filePath": "app/a.tsx", "language": "tsx", "code": "x"}


class TestChatHelpers:
    def test_has_single_file_block(self):
        assert has_single_file_block(BADGE)

    def test_has_single_file_block_outside_root(self):
        assert not has_single_file_block("// File: lib/a.ts\n```ts\nx\n```")

    def test_extract_prefers_jsx_fence(self):
        text = "// File: app/a.tsx\n```css\n.a{}\n```\n```tsx\n<div/>\n```"
        code, file_path = extract_first_jsx_block(text)
        assert code == "<div/>"
        assert file_path == "app/a.tsx"

    def test_extract_falls_back_to_any_fence(self):
        code, file_path = extract_first_jsx_block("```ts\nconst a = 1;\n```")
        assert code == "const a = 1;"
        assert file_path is None

    def test_extract_none_without_fence(self):
        assert extract_first_jsx_block("just prose") is None
