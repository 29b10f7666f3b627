"""
Forge Kernel: Sandbox Preview Generator

Builds self-contained HTML documents that compile and mount generated
React code inside the page that loads them (an iframe on the client).
Generated code is never evaluated by this process.

React, ReactDOM, Babel standalone and Tailwind load from fixed CDN URLs.
The source is transpiled at load time with the typescript + react presets:
- zero build step
- a transform or mount failure stays inside the document
- same document for the live panel and the per-message modal
"""

from __future__ import annotations

import json
import re

from engine.codegen.artifact_parser import HEADER_RE, parse_single_file_block
from engine.codegen.host_patcher import to_valid_identifier
from engine.codegen.source_transformer import strip_header_comment, strip_imports
from engine.codegen.types import SOURCE_EXT_PATTERN

BABEL_URL = "https://unpkg.com/@babel/standalone@7.26.3/babel.min.js"
REACT_URL = "https://unpkg.com/react@18.3.1/umd/react.development.js"
REACT_DOM_URL = "https://unpkg.com/react-dom@18.3.1/umd/react-dom.development.js"
TAILWIND_URL = "https://cdn.tailwindcss.com"

# Body used when a snippet has nothing inside its return (...)
EMPTY_ELEMENT = "<></>"

RETURN_EXPR_RE = re.compile(r"return\s*\(([\s\S]*)\)\s*;?\s*$")
PASCAL_DECL_RE = re.compile(r"\b(?:const|let|var|function|class)\s+([A-Z][A-Za-z0-9_]*)")

DEFAULT_COMPONENT_PATH = "app/components/PreviewComponent.tsx"


# ─────────────────────────────────────────────────────────────────────────────
# Source preparation
# ─────────────────────────────────────────────────────────────────────────────


def extract_inner_jsx_from_return(snippet: str) -> str:
    """Interior of a trailing `return ( ... );`, else the whole snippet, trimmed."""
    match = RETURN_EXPR_RE.search(snippet)
    if match:
        return match.group(1).strip()
    return snippet.strip()


def snippet_factory_source(snippet: str) -> str:
    """
    Wrap a snippet as the body of a zero-argument `Preview` component.

    An empty interior becomes a fragment so the factory always returns
    an element.
    """
    inner = extract_inner_jsx_from_return(snippet) or EMPTY_ELEMENT
    return f"function Preview(){{return ({inner});}}\n;window.__Exported = Preview;"


def guess_component_name(code: str, fallback: str) -> str:
    """First PascalCase declaration in code, else fallback."""
    match = PASCAL_DECL_RE.search(code)
    return match.group(1) if match else fallback


def component_module_source(code: str, file_path: str) -> str:
    """
    Strip module syntax from a full component file, keeping its names.

    Appends a setter that exposes the guessed component on window.__Exported.
    """
    base = to_valid_identifier(SOURCE_EXT_PATTERN.sub("", file_path.rsplit("/", 1)[-1]) or "PreviewComponent")
    guessed = guess_component_name(code, base)

    src = strip_imports(strip_header_comment(code))
    src = re.sub(
        r"export\s+default\s+function\s*([A-Za-z_][A-Za-z0-9_]*)?\s*\(",
        lambda m: f"function {m.group(1) or guessed}(",
        src,
        count=1,
    )
    src = re.sub(r"export\s+function\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(", r"function \1(", src, count=1)
    src = re.sub(r"export\s+const\s+([A-Za-z_][A-Za-z0-9_]*)\s*=\s*", r"const \1 = ", src, count=1)
    src = re.sub(r"export\s+default\s+", "", src)

    src += f"\n;try{{window.__Exported = typeof {guessed} !== 'undefined' ? {guessed} : window.__Exported;}}catch(e){{}}"
    return src


# ─────────────────────────────────────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────────────────────────────────────


def render_snippet_preview(snippet: str, loading: bool = False) -> str:
    """
    Render the live preview panel document for arbitrary model text.

    The text does not need a `File:` header. Any failure to transpile or
    mount falls back to an empty placeholder inside the document.

    Args:
        snippet: Raw text, ideally ending in `return ( ... );`
        loading: Show the animated "thinking" state while the model runs

    Returns:
        Complete HTML string
    """
    return _render_document(
        source=snippet_factory_source(snippet),
        fallback_js=_EMPTY_FALLBACK_JS,
        loading=loading,
        title="Preview",
    )


def render_component_preview(code: str, file_path: str | None = None) -> str:
    """
    Render the per-message modal preview for a full component file.

    Unlike the snippet preview, errors are shown in a <pre> so the user
    can see what broke, and a module with no detectable export says so.
    """
    path = file_path or DEFAULT_COMPONENT_PATH
    return _render_document(
        source=component_module_source(code, path),
        fallback_js=_DIAGNOSTIC_FALLBACK_JS,
        loading=False,
        title=f"Preview: {path}",
    )


def render_preview_for_text(text: str, loading: bool = False) -> str:
    """Component preview when text carries a `File:` header, snippet preview otherwise."""
    if HEADER_RE.search(text):
        artifact = parse_single_file_block(text)
        if artifact is not None:
            return render_component_preview(artifact.code, artifact.file_path)
    return render_snippet_preview(text, loading=loading)


def _render_document(source: str, fallback_js: str, loading: bool, title: str) -> str:
    # "</" inside a JS string literal would close the inline <script>
    source_json = json.dumps(source, ensure_ascii=False).replace("</", "<\\/")
    body_class = "thinking" if loading else ""

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{_escape_html(title)}</title>
    <script src="{BABEL_URL}"></script>
    <script src="{REACT_URL}"></script>
    <script src="{REACT_DOM_URL}"></script>
    <script src="{TAILWIND_URL}"></script>
    <style>
{SANDBOX_CSS}
    </style>
  </head>
  <body class="{body_class}">
    <div id="root"></div>
    <script>
{fallback_js}
{BOUNDARY_JS}
      var PREVIEW_SOURCE = {source_json};
      var root = null;
      function mount(element) {{
        root = root || ReactDOM.createRoot(document.getElementById('root'));
        root.render(React.createElement(PreviewBoundary, null, element));
      }}
      try {{
        var transformed = Babel.transform(PREVIEW_SOURCE, {{
          filename: 'preview.tsx',
          presets: [["react", {{ runtime: "classic" }}], "typescript"]
        }}).code;
        window.React = window.React || React;
        (0, eval)(transformed);
        mount(window.__Exported
          ? React.createElement(window.__Exported)
          : React.createElement(PreviewFallback, {{ error: null }}));
      }} catch (e) {{
        console.error(e);
        try {{ mount(React.createElement(PreviewFallback, {{ error: e }})); }} catch (_) {{}}
      }}
    </script>
  </body>
</html>"""


def _escape_html(text: str) -> str:
    """HTML-escape text for safe embedding."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


# ─────────────────────────────────────────────────────────────────────────────
# Inline JS and CSS
# ─────────────────────────────────────────────────────────────────────────────

# Catches render-time errors, which happen after root.render() returns
BOUNDARY_JS = """
      class PreviewBoundary extends React.Component {
        constructor(props) { super(props); this.state = { error: null }; }
        static getDerivedStateFromError(error) { return { error: error }; }
        componentDidCatch(error) { console.error(error); }
        render() {
          if (this.state.error) return React.createElement(PreviewFallback, { error: this.state.error });
          return this.props.children;
        }
      }
"""

_EMPTY_FALLBACK_JS = """
      function PreviewFallback() {
        return React.createElement('div', { 'data-preview-empty': '' });
      }
"""

_DIAGNOSTIC_FALLBACK_JS = """
      function PreviewFallback(props) {
        if (props.error) {
          var e = props.error;
          return React.createElement('pre', { style: { padding: 16, whiteSpace: 'pre-wrap' } },
            String((e && (e.stack || e.message)) || e));
        }
        return React.createElement('div', { style: { padding: 16 } }, 'No export detected to render.');
      }
"""

SANDBOX_CSS = """
      html, body, #root { height: 100%; margin: 0; padding: 0; background: black; color: white; }

      body.thinking #root {
        animation: forge-thinking 1.6s ease-in-out infinite;
      }

      body.thinking::after {
        content: "";
        position: fixed;
        inset: 0;
        pointer-events: none;
        background: radial-gradient(circle at center, rgba(99, 102, 241, 0.18), rgba(99, 102, 241, 0) 60%);
        animation: forge-thinking 1.6s ease-in-out infinite;
      }

      @keyframes forge-thinking {
        0%, 100% { opacity: 1; }
        50% { opacity: 0.45; }
      }

      @media (prefers-reduced-motion: reduce) {
        body.thinking #root, body.thinking::after { animation: none; }
      }
"""
