from __future__ import annotations

import html as html_lib
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from notion_clipper.types import Block, Blocks

from .blocks import code_block, heading_block, paragraph_block, text_block
from .config import DEFAULT_CODE_LANGUAGE, MAX_TEXT_LENGTH

logger = logging.getLogger(__name__)

CodeDetector = Callable[[str], bool]

LANGUAGES = {
    "abap",
    "arduino",
    "bash",
    "basic",
    "c",
    "clojure",
    "coffeescript",
    "c++",
    "c#",
    "css",
    "dart",
    "diff",
    "docker",
    "elixir",
    "elm",
    "erlang",
    "flow",
    "fortran",
    "f#",
    "gherkin",
    "glsl",
    "go",
    "graphql",
    "groovy",
    "haskell",
    "html",
    "java",
    "javascript",
    "json",
    "julia",
    "kotlin",
    "latex",
    "less",
    "lisp",
    "livescript",
    "lua",
    "makefile",
    "markdown",
    "markup",
    "matlab",
    "mermaid",
    "nix",
    "objective-c",
    "ocaml",
    "pascal",
    "perl",
    "php",
    "plain text",
    "powershell",
    "prolog",
    "protobuf",
    "python",
    "r",
    "reason",
    "ruby",
    "rust",
    "sass",
    "scala",
    "scheme",
    "scss",
    "shell",
    "sql",
    "swift",
    "typescript",
    "vb.net",
    "verilog",
    "vhdl",
    "visual basic",
    "webassembly",
    "xml",
    "yaml",
    "java/c/c++/c#",
}

# Class-name spellings used by common highlighters -> Notion language names
LANGUAGE_ALIASES = {
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "python3": "python",
    "rb": "ruby",
    "rs": "rust",
    "sh": "shell",
    "zsh": "shell",
    "console": "shell",
    "shell-session": "shell",
    "ps1": "powershell",
    "cpp": "c++",
    "cxx": "c++",
    "cc": "c++",
    "h": "c",
    "csharp": "c#",
    "cs": "c#",
    "fsharp": "f#",
    "golang": "go",
    "kt": "kotlin",
    "md": "markdown",
    "yml": "yaml",
    "dockerfile": "docker",
    "tex": "latex",
    "objc": "objective-c",
    "proto": "protobuf",
    "wasm": "webassembly",
    "vb": "visual basic",
    "text": "plain text",
    "plaintext": "plain text",
    "txt": "plain text",
    "none": "plain text",
}

_FLAGS = re.IGNORECASE | re.DOTALL

# Matchers in priority order. Each scans the whole fragment independently.
PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("code", re.compile(
        r"<pre(?P<pre_attrs>(?:\s[^>]*)?)>\s*<code(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</code>\s*</pre>", _FLAGS)),
    ("code", re.compile(
        r"<code(?P<attrs>(?:\s[^>]*)?)>\s*<pre(?P<pre_attrs>(?:\s[^>]*)?)>(?P<body>.*?)</pre>\s*</code>", _FLAGS)),
    ("pre", re.compile(r"<pre(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</pre>", _FLAGS)),
    ("figure", re.compile(
        r"<figure(?P<attrs>(?:\s[^>]*)?)>(?P<body>(?:(?!</figure>).)*?<(?:pre|code)\b.*?)</figure>", _FLAGS)),
    ("code_container", re.compile(
        r"<(?P<tag>div|section|td)(?P<attrs>\s[^>]*?\bclass\s*=\s*[\"'][^\"']*"
        r"(?:\bcode|highlight|syntax|sourcecode)[^\"']*[\"'][^>]*)>(?P<body>.*?)</(?P=tag)>", _FLAGS)),
    ("heading", re.compile(r"<h(?P<level>[1-6])(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</h(?P=level)>", _FLAGS)),
    ("quote", re.compile(r"<blockquote(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</blockquote>", _FLAGS)),
    ("ul", re.compile(r"<ul(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</ul>", _FLAGS)),
    ("ol", re.compile(r"<ol(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</ol>", _FLAGS)),
    ("p", re.compile(r"<p(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</p>", _FLAGS)),
    ("div", re.compile(r"<div(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</div>", _FLAGS)),
    ("li", re.compile(r"<li(?P<attrs>(?:\s[^>]*)?)>(?P<body>.*?)</li>", _FLAGS)),
]

CODE_KINDS = frozenset({"code", "pre", "figure", "code_container"})
# Wrappers whose code text lives in an inner pre/code region
CODE_WRAPPER_KINDS = frozenset({"figure", "code_container"})

LI_REGEX = re.compile(r"<li(?:\s[^>]*)?>(.*?)</li>", _FLAGS)
BR_REGEX = re.compile(r"<br\s*/?>", re.IGNORECASE)
BLOCK_END_REGEX = re.compile(r"</(?:p|div)\s*>", re.IGNORECASE)
TAG_REGEX = re.compile(r"<[^>]+>")
HSPACE_REGEX = re.compile(r"[ \t]+")
INLINE_CODE_REGEX = re.compile(r"<(?:code|kbd|samp|tt)\b", re.IGNORECASE)
LANGUAGE_CLASS_REGEX = re.compile(
    r"class\s*=\s*[\"'][^\"']*?\b(?:language|lang)-(?P<lang>[\w#+.-]+)", re.IGNORECASE)
PARAGRAPH_SPLIT_REGEX = re.compile(r"\n\s*\n")

# Lexical prefixes that make a stripped paragraph look like source code.
# Case-sensitive so prose such as "From the start" is not caught.
CODE_PREFIX_REGEX = re.compile(
    r"^(?:"
    r"//|/\*|#!|#include\b|#define\b|<!--"              # comment / preprocessor markers
    r"|[{\[]"                                             # opening brace / bracket
    r"|(?:def|class|function|const|let|var|import|from|export|return|public|private|protected"
    r"|static|package|fn|func|async|await|struct|impl|namespace|using|interface|type|enum)\s"
    r"|\(?[\w$]*(?:\s*,\s*[\w$]+)*\)?\s*=>"               # arrow functions
    r"|[a-z_$][\w$]*->|\)\s*->"                         # pointer access, return arrows
    r"|</?[A-Za-z][\w-]*[\s/>]"                           # tag-like tokens
    r")"
)


@dataclass(frozen=True)
class MarkupSpan:
    """A classified region of raw markup."""
    kind: str
    start: int
    end: int
    match: re.Match

    def contains(self, other: "MarkupSpan") -> bool:
        return self.start <= other.start and other.end <= self.end


def normalize_html(html: str) -> str:
    """Collapse ``\\r\\n`` / ``\\r`` line endings to ``\\n``."""
    return html.replace("\r\n", "\n").replace("\r", "\n")


def decode_entities(text: str) -> str:
    """Decode HTML entities; non-breaking spaces become plain spaces."""
    return html_lib.unescape(text).replace("\xa0", " ")


def strip_html(fragment: str, keep_lines: bool = True) -> str:
    """Reduce a markup fragment to plain text.

    ``<br>`` becomes a newline; with ``keep_lines`` closing ``</p>`` and
    ``</div>`` do too. Remaining tags are dropped, runs of spaces/tabs (not
    newlines) collapse to one space and entities are decoded last.
    """
    text = BR_REGEX.sub("\n", fragment)
    if keep_lines:
        text = BLOCK_END_REGEX.sub("\n", text)
    text = TAG_REGEX.sub("", text)
    text = HSPACE_REGEX.sub(" ", text)
    return decode_entities(text).strip()


def strip_code(fragment: str) -> str:
    """Strip tags from a code fragment keeping indentation and line structure."""
    text = BR_REGEX.sub("\n", fragment)
    text = TAG_REGEX.sub("", text)
    text = decode_entities(text)
    return text.strip("\n").rstrip()


def extract_list_items(list_html: str) -> List[str]:
    """Return the non-blank plain text of each ``<li>`` in a list body."""
    items: List[str] = []
    for m in LI_REGEX.finditer(list_html):
        text = strip_html(m.group(1))
        if text:
            items.append(text)
    return items


def inner_code_body(body: str) -> str:
    """Return the body of the first pre/code region inside a wrapper, else ``body``."""
    for kind, regex in PATTERNS:
        if kind not in ("code", "pre"):
            continue
        if m := regex.search(body):
            return m.group("body")
    return body


def code_language(markup: str) -> str:
    """Resolve a Notion code language from ``language-xxx`` class tokens."""
    m = LANGUAGE_CLASS_REGEX.search(markup)
    if not m:
        return DEFAULT_CODE_LANGUAGE
    lang = m.group("lang").lower()
    lang = LANGUAGE_ALIASES.get(lang, lang)
    return lang if lang in LANGUAGES else DEFAULT_CODE_LANGUAGE


def heading_level(tag_level: str) -> int:
    level = int(tag_level)
    return level if level in (1, 2) else 3


def looks_like_code(text: str) -> bool:
    """Guess whether stripped paragraph text is a source code sample."""
    return bool(CODE_PREFIX_REGEX.match(text.lstrip()))


def classify(html: str) -> List[MarkupSpan]:
    """Find block-level regions and return the retained spans in document order.

    Every matcher scans the full fragment; matches are stably sorted by start
    offset (matcher priority breaks ties) and a match is dropped when a span
    accepted before it fully contains it. Partially overlapping matches are
    both kept, so their shared text can appear twice.
    """
    candidates: List[MarkupSpan] = []
    for kind, regex in PATTERNS:
        for m in regex.finditer(html):
            candidates.append(MarkupSpan(kind, m.start(), m.end(), m))
    candidates.sort(key=lambda s: s.start)
    accepted: List[MarkupSpan] = []
    for span in candidates:
        if span.end <= span.start:
            continue
        if any(prev.contains(span) for prev in accepted):
            continue
        accepted.append(span)
    return accepted


def emit_blocks(span: MarkupSpan, *, code_detector: CodeDetector = looks_like_code) -> Blocks:
    """Map one classified span to zero or more Notion blocks."""
    m = span.match
    body = m.group("body")
    if span.kind == "heading":
        text = strip_html(body)
        return [heading_block(heading_level(m.group("level")), text)] if text else []
    if span.kind == "quote":
        text = strip_html(body)
        return [text_block("quote", text)] if text else []
    if span.kind in ("ul", "ol"):
        btype = "bulleted_list_item" if span.kind == "ul" else "numbered_list_item"
        return [text_block(btype, item) for item in extract_list_items(body)]
    if span.kind == "li":
        text = strip_html(body)
        return [text_block("bulleted_list_item", text)] if text else []
    if span.kind in CODE_KINDS:
        text = strip_code(inner_code_body(body) if span.kind in CODE_WRAPPER_KINDS else body)
        return [code_block(text, code_language(m.group(0)))] if text.strip() else []
    # p / div
    text = strip_html(body)
    if not text:
        return []
    if INLINE_CODE_REGEX.search(body) or code_detector(text):
        return [code_block(text)]
    return [paragraph_block(text)]


def text_blocks(text: str) -> Blocks:
    """Convert plain text to paragraph blocks split on blank lines.

    Always returns at least one block: when nothing survives the split the
    whole (truncated) text becomes a single paragraph.
    """
    paragraphs = [p.strip() for p in PARAGRAPH_SPLIT_REGEX.split(text) if p.strip()]
    if not paragraphs:
        return [paragraph_block(text[:MAX_TEXT_LENGTH])]
    return [paragraph_block(p[:MAX_TEXT_LENGTH]) for p in paragraphs]


def html_to_blocks(
    html: Optional[str],
    text: str,
    *,
    code_detector: CodeDetector = looks_like_code,
) -> Blocks:
    """Convert a selection's HTML fragment into Notion blocks.

    Recognized regions (mapped):
      pre/code, figure with code, code-classed containers -> code
      h1/h2 -> heading_1/2, h3-h6 -> heading_3
      blockquote -> quote
      ul/li -> bulleted_list_item, ol/li -> numbered_list_item
      p, div -> paragraph (or code when the text looks like source)
      stray li -> bulleted_list_item

    Best effort: markup that yields no block at all (empty, unrecognized or
    blank after stripping) falls back to ``text_blocks(text)``.
    """
    if not html or not html.strip():
        return text_blocks(text)
    t0 = time.time()
    content = normalize_html(html)
    spans = classify(content)
    logger.debug("Classified spans: %s", span_summary(spans))
    blocks: List[Block] = []
    for span in spans:
        blocks.extend(emit_blocks(span, code_detector=code_detector))
    if not blocks:
        logger.info("No blocks recognized in %d chars of HTML; using plain text", len(content))
        return text_blocks(text)
    logger.info("HTML to blocks conversion took %.2f seconds yielded %d blocks from %d spans",
                time.time() - t0, len(blocks), len(spans))
    return blocks


def span_summary(spans: List[MarkupSpan]) -> List[Dict[str, object]]:
    """Debug view of classified spans (kind and offsets)."""
    return [{"kind": s.kind, "start": s.start, "end": s.end} for s in spans]
