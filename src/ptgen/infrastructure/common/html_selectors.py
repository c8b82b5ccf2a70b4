"""CSS-selector-based HTML extraction with fallback chains.

Every extraction function accepts a primary selector and optional
*fallback_selectors*: the first selector that yields at least one match
wins, which keeps page parsers working across minor layout changes.
"""

from __future__ import annotations

import json
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns results from the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def select_texts(root: BeautifulSoup | Tag, selector: str) -> list[str]:
    """Stripped, non-empty text of every element matching *selector*."""
    texts = (item.get_text(strip=True) for item in root.select(selector))
    return [text for text in texts if text]


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=strip)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(strip=strip)
            if text:
                return text
    return default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val) if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val:
                return str(val)
    return default


def find_label(root: BeautifulSoup | Tag, selector: str, label: str) -> Tag | None:
    """First element matching *selector* whose text contains *label*."""
    for item in root.select(selector):
        if label in item.get_text():
            return item
    return None


def text_after_label(label: Tag | None) -> str:
    """Inline text following *label* up to the next ``<br>``.

    Used for definition-style blocks such as
    ``<span class="pl">语言:</span> 英语 / 法语<br/>``.
    """
    if label is None:
        return ""
    parts: list[str] = []
    for sibling in label.next_siblings:
        if isinstance(sibling, Tag):
            if sibling.name == "br":
                break
            parts.append(sibling.get_text())
        elif isinstance(sibling, NavigableString):
            parts.append(str(sibling))
    return "".join(parts).strip().lstrip(":：").strip()


def extract_json_script(
    root: BeautifulSoup | Tag,
    selector: str,
) -> dict[str, Any]:
    """Decode the JSON body of the first ``<script>`` matching *selector*.

    Returns ``{}`` when the tag is missing or its body is not a JSON object.
    ``strict=False`` tolerates raw newlines inside strings.
    """
    tag = root.select_one(selector)
    if tag is None:
        return {}
    try:
        data = json.loads(tag.get_text(), strict=False)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def element_text(element: BeautifulSoup | Tag) -> str:
    """Text of *element* with ``<br>`` kept as newlines.

    Entities are decoded by the parser; ``&nbsp;`` becomes a plain space.
    Mutates *element* (each ``<br>`` is replaced by a newline string).
    """
    for br in element.find_all("br"):
        br.replace_with("\n")
    text = element.get_text().replace("\xa0", " ")
    return text.replace("\r\n", "\n").strip()


def html_to_text(html: str | None) -> str:
    """Plain text of an HTML fragment, see :func:`element_text`."""
    if not html:
        return ""
    return element_text(parse_html(str(html)))
