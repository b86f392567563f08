"""CSS-selector-based HTML extraction helpers.

Thin wrappers around BeautifulSoup so the scraping code reads as a list
of selectors instead of tree walking.  Every lookup degrades to a
default value instead of raising when the markup does not match.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree using ``lxml``."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Tries each selector in order.  Returns results from the **first**
    selector that matches at least one element, in document order.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


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


def extract_parent_attr(
    root: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    default: str = "",
) -> str:
    """Read *attr* from the parent of the first element matching *selector*.

    Used for icon-in-anchor markup (``<a href=..><i class=icon></i></a>``)
    where only the icon carries a stable class.
    """
    match = root.select_one(selector)
    if match is None or match.parent is None:
        return default
    val = match.parent.get(attr)
    return str(val) if val else default
