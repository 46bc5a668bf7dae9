"""
Turn an upstream article page into an embeddable HTML fragment.

The upstream page hides its body until scripts run (lazy-loaded images,
zero-opacity and hidden blocks). Only the article container is kept, those
few patterns are undone with targeted substitutions, and the result is
minified behind a fixed style block.
"""

import re

import minify_html
from bs4 import BeautifulSoup, ParserRejectedMarkup

from .errors import ParseError

CONTENT_SELECTOR = ".rich_media_content"

STYLE_PRELUDE = (
    "<style> .rich_media_content {overflow: hidden;color: #222;font-size: 17px;"
    "word-wrap: break-word;-webkit-hyphens: auto;-ms-hyphens: auto;hyphens: auto;"
    "text-align: justify;position: relative;z-index: 0;}"
    ".rich_media_content {font-size: 18px;}</style>"
)

# Applied in order to the raw container markup
REWRITES = (
    (re.compile(r"data-src="), "src="),
    (re.compile(r"opacity: 0( !important)?;"), ""),
    (re.compile(r"visibility: hidden;"), ""),
)

# Character references are shielded from the minifier, which would
# otherwise decode them
ENTITY_START = re.compile(r"&(?=#[0-9]+;|#[xX][0-9a-fA-F]+;|[A-Za-z][A-Za-z0-9]*;)")
ENTITY_MARK = "\ue000"


def _source_offset(source: str, line, column):
    """Index in source of a (1-based line, 0-based column) parser position."""
    if line is None or column is None:
        return None
    offset = 0
    for _ in range(line - 1):
        offset = source.find("\n", offset) + 1
        if offset == 0:
            return None
    return offset + column


def _outer_html(source: str, node) -> str:
    """Slice node's markup verbatim out of source, start tag to matching end tag."""
    start = _source_offset(source, node.sourceline, node.sourcepos)
    if start is None or not source.startswith("<", start):
        return str(node)

    tags = re.compile(r"<!--.*?-->|<(/?)%s\b[^>]*>" % re.escape(node.name), re.I | re.S)
    depth = 0
    for m in tags.finditer(source, start):
        tag = m.group(0)
        if tag.startswith("<!--"):
            continue
        if m.group(1):
            depth -= 1
        elif not tag.endswith("/>"):
            depth += 1
        if depth <= 0:
            return source[start:m.end()]
    # Unclosed container runs to the end of the document
    return source[start:]


def extract_content(source: str, selector: str = CONTENT_SELECTOR) -> str:
    """Return the raw outer HTML of the first node matching selector, or ''.

    The parse tree only locates the container; its markup is copied from
    source untouched so entities and attribute text survive byte for byte.
    """
    if not isinstance(source, str):
        raise ParseError(f"Expected HTML text, got {type(source).__name__}")
    try:
        soup = BeautifulSoup(source, "html.parser")
    except (ParserRejectedMarkup, AssertionError) as e:
        raise ParseError(f"Unparseable HTML: {e}") from e

    node = soup.select_one(selector)
    if node is None:
        return ""
    return _outer_html(source, node)


def apply_rewrites(html: str) -> str:
    for pattern, replacement in REWRITES:
        html = pattern.sub(replacement, html)
    return html


def minify(html: str) -> str:
    """Drop quotes around simple attribute values and collapse whitespace."""
    shielded = ENTITY_START.sub(ENTITY_MARK, html)
    return minify_html.minify(shielded, keep_closing_tags=True).replace(ENTITY_MARK, "&")


def sanitize(source: str, selector: str = CONTENT_SELECTOR) -> str:
    """
    Clean a fetched article page.

    Never fails because the container is missing; the result is then just
    the style block.

    Raises:
        ParseError: If the markup cannot be parsed at all
    """
    content = apply_rewrites(extract_content(source, selector))
    return minify(STYLE_PRELUDE + content)
