"""HTML sanitizing and conversion to plain text and Markdown."""

from __future__ import annotations

import re

import bleach
import markdown as md_lib
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

# Allowed HTML tags for stored content (block, inline and table markup)
ALLOWED_TAGS = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6",
        "p", "br", "div", "span",
        "strong", "b", "em", "i", "u",
        "ul", "ol", "li",
        "a", "img",
        "blockquote", "code", "pre",
        "table", "thead", "tbody", "tr", "th", "td",
    }
)
ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "*": ["class"],
}
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

# Elements dropped together with their text
_DROP_WITH_CONTENT = ["script", "style", "iframe", "noscript", "textarea", "object", "embed"]

_HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
# Elements that start a new line of visible text; inline markup joins directly
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
]
_WHITESPACE = re.compile(r"\s+")


def sanitize_html(html: str) -> str:
    """Strip everything outside the tag/attribute/scheme allow-lists.

    Disallowed tags are removed (their text is kept), except for
    script-like elements which are removed entirely.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(_DROP_WITH_CONTENT):
        element.decompose()
    return bleach.clean(
        str(soup),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def html_to_plain_text(html: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(_DROP_WITH_CONTENT):
        element.decompose()
    for element in soup.find_all(_BLOCK_TAGS):
        element.insert_before(" ")
        element.insert_after(" ")
    return _WHITESPACE.sub(" ", soup.get_text()).strip()


def markdown_to_html(text: str) -> str:
    """Render Markdown to HTML."""
    if not text:
        return ""
    return md_lib.markdown(text, extensions=["tables", "fenced_code"])


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut ``text`` to at most ``max_length`` characters on a word boundary.

    The suffix counts toward ``max_length``.
    """
    if len(text) <= max_length:
        return text
    budget = max(max_length - len(suffix), 0)
    cut = text[:budget]
    backed_off = re.sub(r"\s+\S*$", "", cut)
    return (backed_off or cut).rstrip() + suffix


# ── HTML → Markdown ─────────────────────────────────────────────────────


def html_to_markdown(html: str) -> str:
    """Structural HTML → Markdown conversion.

    ATX headings, ``-`` bullets, numbered lists, fenced code blocks,
    block quotes, links, images and pipe tables.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    rendered = _render_children(soup)
    lines = [line.rstrip() for line in rendered.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _render_children(node: Tag) -> str:
    return "".join(_render(child) for child in node.children)


def _inline(node: Tag) -> str:
    return _WHITESPACE.sub(" ", _render_children(node)).strip()


def _block(text: str) -> str:
    return f"\n\n{text}\n\n" if text else ""


def _render(node: object) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return _WHITESPACE.sub(" ", str(node))
    if not isinstance(node, Tag):
        return ""

    name = node.name
    if name in _DROP_WITH_CONTENT:
        return ""
    if name in _HEADINGS:
        text = _inline(node)
        return _block(f"{'#' * int(name[1])} {text}") if text else ""
    if name in ("p", "div"):
        return _block(_render_children(node).strip())
    if name == "br":
        return "\n"
    if name in ("strong", "b"):
        text = _inline(node)
        return f"**{text}**" if text else ""
    if name in ("em", "i"):
        text = _inline(node)
        return f"*{text}*" if text else ""
    if name == "code":
        return f"`{node.get_text()}`"
    if name == "pre":
        return _render_pre(node)
    if name == "a":
        text = _inline(node)
        href = node.get("href", "")
        return f"[{text}]({href})" if href else text
    if name == "img":
        return f"![{node.get('alt', '')}]({node.get('src', '')})"
    if name in ("ul", "ol"):
        return _block(_render_list(node, depth=0))
    if name == "blockquote":
        inner = _render_children(node).strip()
        inner = re.sub(r"\n{3,}", "\n\n", inner)
        quoted = "\n".join(f"> {line}".rstrip() for line in inner.splitlines())
        return _block(quoted)
    if name == "table":
        return _block(_render_table(node))
    return _render_children(node)


def _render_pre(node: Tag) -> str:
    code = node.find("code")
    source = code if isinstance(code, Tag) else node
    language = ""
    for css_class in source.get("class", []) or []:
        if css_class.startswith("language-"):
            language = css_class.removeprefix("language-")
            break
    body = source.get_text().strip("\n")
    return _block(f"```{language}\n{body}\n```")


def _render_list(node: Tag, depth: int) -> str:
    ordered = node.name == "ol"
    lines: list[str] = []
    for index, item in enumerate(node.find_all("li", recursive=False), start=1):
        marker = f"{index}." if ordered else "-"
        parts: list[str] = []
        nested: list[str] = []
        for child in item.children:
            if isinstance(child, Tag) and child.name in ("ul", "ol"):
                nested.append(_render_list(child, depth + 1))
            else:
                parts.append(_render(child))
        text = _WHITESPACE.sub(" ", "".join(parts)).strip()
        lines.append(f"{'  ' * depth}{marker} {text}")
        lines.extend(nested)
    return "\n".join(lines)


def _render_table(node: Tag) -> str:
    rows: list[list[str]] = []
    for row in node.find_all("tr"):
        cells = [_inline(cell) for cell in row.find_all(["th", "td"], recursive=False)]
        if cells:
            rows.append(cells)
    if not rows:
        return ""

    width = max(len(r) for r in rows)
    lines: list[str] = []
    for index, cells in enumerate(rows):
        padded = cells + [""] * (width - len(cells))
        lines.append("| " + " | ".join(padded) + " |")
        if index == 0:
            lines.append("| " + " | ".join("---" for _ in padded) + " |")
    return "\n".join(lines)
