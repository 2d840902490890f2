# ietf_groups/utils/misc_utils.py
import re
from datetime import date, datetime
from typing import Optional
from urllib.parse import urljoin

_WHITESPACE = re.compile(r"\s+")
_PARENTHESIZED = re.compile(r"\s*\([^)]+\)\s*")


def clean_text(value: Optional[str]) -> Optional[str]:
    """Collapses whitespace; returns None for missing or blank text."""
    if value is None:
        return None
    collapsed = _WHITESPACE.sub(" ", value).strip()
    return collapsed or None


def strip_parenthesized(value: str) -> str:
    """Removes the first parenthesized chunk, e.g. "Crypto Forum (CFRG)" -> "Crypto Forum"."""
    return _PARENTHESIZED.sub(" ", value, count=1).strip()


def absolute_url(base: str, href: str) -> str:
    """Resolves a possibly relative link against the page it came from."""
    return urljoin(base, href.strip())


def parse_month_year(text: Optional[str]) -> Optional[date]:
    """Parses "March 2015" or "Mar 2015" into the first day of that month."""
    cleaned = clean_text(text)
    if not cleaned:
        return None
    for fmt in ("%B %Y", "%b %Y"):
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None
