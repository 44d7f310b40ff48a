# Rev 0.1.0
"""Note markup helpers.

The note editor produces small HTML fragments (bold/italic/lists/headings/
links). ``sanitize_markup`` keeps that formatting vocabulary and drops
everything else: unknown tags are unwrapped (their text survives), script and
style bodies are discarded, and the only attribute kept is a safe ``href``
on links. ``plain_text`` gives the text a preview or search sees.
"""
from __future__ import annotations

from html import escape
from html.parser import HTMLParser
from typing import List, Optional, Tuple

ALLOWED_TAGS = frozenset({
    "a", "b", "blockquote", "br", "code", "div", "em", "h1", "h2", "h3",
    "i", "li", "ol", "p", "pre", "s", "span", "strike", "strong", "u", "ul",
})
VOID_TAGS = frozenset({"br"})
DROP_CONTENT_TAGS = frozenset({"script", "style", "iframe", "object", "embed"})
BLOCK_TAGS = frozenset({"blockquote", "br", "div", "h1", "h2", "h3", "li", "p", "pre"})
SAFE_URL_SCHEMES = ("http://", "https://", "mailto:")


def _safe_href(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    v = value.strip()
    if v.lower().startswith(SAFE_URL_SCHEMES) or v.startswith(("/", "#")):
        return v
    return None


class _Sanitizer(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.out: List[str] = []
        self._open: List[str] = []
        self._dropping = 0

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping += 1
            return
        if self._dropping or tag not in ALLOWED_TAGS:
            return
        if tag == "a":
            href = _safe_href(dict(attrs).get("href"))
            self.out.append(f'<a href="{escape(href)}">' if href else "<a>")
        else:
            self.out.append(f"<{tag}>")
        if tag not in VOID_TAGS:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if tag in VOID_TAGS and not self._dropping:
            self.out.append(f"<{tag}>")

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping = max(0, self._dropping - 1)
            return
        if self._dropping or tag not in self._open:
            return
        # close anything left open inside this element
        while self._open:
            inner = self._open.pop()
            self.out.append(f"</{inner}>")
            if inner == tag:
                break

    def handle_data(self, data: str) -> None:
        if not self._dropping:
            self.out.append(escape(data, quote=False))

    def result(self) -> str:
        while self._open:
            self.out.append(f"</{self._open.pop()}>")
        return "".join(self.out)


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []
        self._dropping = 0

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self._dropping += 1
        elif tag in BLOCK_TAGS:
            self.parts.append(" ")

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS:
            self._dropping = max(0, self._dropping - 1)
        elif tag in BLOCK_TAGS:
            self.parts.append(" ")

    def handle_data(self, data):
        if not self._dropping:
            self.parts.append(data)


def sanitize_markup(markup: Optional[str]) -> str:
    if not markup:
        return ""
    parser = _Sanitizer()
    parser.feed(markup)
    parser.close()
    return parser.result()


def plain_text(markup: Optional[str]) -> str:
    """Collapse markup to whitespace-normalized text."""
    if not markup:
        return ""
    parser = _TextExtractor()
    parser.feed(markup)
    parser.close()
    return " ".join("".join(parser.parts).split())
