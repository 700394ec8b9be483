"""Label and description text.

Mermaid labels are plain text, inline HTML, or backtick-wrapped markdown.
Content keeps the source text verbatim in ``raw`` (that is what generators
emit) and, for rich kinds, a plain rendering in ``rendered``.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from enum import Enum, auto


class ContentKind(Enum):
    Plain = auto()
    Html = auto()
    Markdown = auto()


@dataclass
class Content:
    raw: str
    kind: ContentKind = ContentKind.Plain
    rendered: str | None = None

    @classmethod
    def plain(cls, text: str) -> Content:
        return cls(raw=text)

    def extract_text(self) -> str:
        """Plain text for display: the rendered form when present, else raw."""
        if self.rendered is not None:
            return self.rendered
        return self.raw


_HTML_TAG_RE = re.compile(r"</?[A-Za-z][A-Za-z0-9]*(?:\s[^<>]*)?/?>")
_MARKDOWN_RE = re.compile(r"`([^`]*)`")
_EMPHASIS_RE = re.compile(r"(\*\*|__|\*|_)(.+?)\1")


def parse_content(text: str) -> Content:
    """Classify label text as plain, html, or markdown."""
    m = _MARKDOWN_RE.fullmatch(text)
    if m:
        rendered = _EMPHASIS_RE.sub(r"\2", m.group(1))
        return Content(raw=text, kind=ContentKind.Markdown, rendered=rendered)
    if _HTML_TAG_RE.search(text):
        stripped = _HTML_TAG_RE.sub(" ", text)
        rendered = " ".join(html.unescape(stripped).split())
        return Content(raw=text, kind=ContentKind.Html, rendered=rendered)
    return Content(raw=text)


def extract_text(content: Content | str | None) -> str:
    if content is None:
        return ""
    if isinstance(content, Content):
        return content.extract_text()
    return content
