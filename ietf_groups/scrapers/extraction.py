"""
Ordered fallback chains for pulling single values out of HTML fragments.

A strategy is a plain function taking a BeautifulSoup ``Tag`` and returning a
string or ``None``. ``first_match`` runs strategies left to right and stops at
the first one whose result is non-blank, so markup drift on a page only costs
a field, never the whole record.
"""

import re
from typing import Callable, Optional, Sequence, Union

from bs4 import Tag

from ietf_groups.utils.misc_utils import clean_text

Strategy = Callable[[Tag], Optional[str]]
Transform = Callable[[str], str]


def first_match(strategies: Sequence[Strategy], node: Tag) -> Optional[str]:
    """Returns the first non-blank strategy result, or None if all miss."""
    for strategy in strategies:
        value = clean_text(strategy(node))
        if value is not None:
            return value
    return None


def _compile(pattern: Union[str, re.Pattern]) -> re.Pattern:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def by_selector(css: str) -> Strategy:
    """Text of the first element matching a CSS selector."""

    def strategy(node: Tag) -> Optional[str]:
        element = node.select_one(css)
        return element.get_text() if element is not None else None

    strategy.__name__ = f"by_selector({css!r})"
    return strategy


def by_column(index: int, min_columns: int = 1) -> Strategy:
    """Text of the index-th table cell, when the row has enough cells."""

    def strategy(node: Tag) -> Optional[str]:
        cells = node.find_all("td")
        if len(cells) < max(min_columns, index + 1):
            return None
        return cells[index].get_text()

    strategy.__name__ = f"by_column({index})"
    return strategy


def by_link_text() -> Strategy:
    """Text of the first link."""

    def strategy(node: Tag) -> Optional[str]:
        link = node.find("a")
        return link.get_text() if link is not None else None

    strategy.__name__ = "by_link_text()"
    return strategy


def by_attribute(
    css: str, attribute: str, transform: Optional[Transform] = None
) -> Strategy:
    """Attribute value of the first matching element, optionally transformed."""

    def strategy(node: Tag) -> Optional[str]:
        element = node.select_one(css)
        if element is None:
            return None
        value = element.get(attribute)
        if not isinstance(value, str) or not value.strip():
            return None
        return transform(value) if transform else value

    strategy.__name__ = f"by_attribute({css!r}, {attribute!r})"
    return strategy


def by_href_pattern(
    pattern: Union[str, re.Pattern], transform: Optional[Transform] = None
) -> Strategy:
    """First capture group of a regex applied to the first link's href."""
    regex = _compile(pattern)

    def strategy(node: Tag) -> Optional[str]:
        link = node.find("a", href=True)
        if link is None:
            return None
        match = regex.search(link["href"])
        if not match:
            return None
        return transform(match.group(1)) if transform else match.group(1)

    strategy.__name__ = f"by_href_pattern({regex.pattern!r})"
    return strategy


def by_text_pattern(pattern: Union[str, re.Pattern]) -> Strategy:
    """First capture group of a regex applied to the node's full text."""
    regex = _compile(pattern)

    def strategy(node: Tag) -> Optional[str]:
        match = regex.search(node.get_text(" "))
        return match.group(1) if match else None

    strategy.__name__ = f"by_text_pattern({regex.pattern!r})"
    return strategy
