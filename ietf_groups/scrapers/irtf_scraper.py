# ietf_groups/scrapers/irtf_scraper.py

import re
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from ietf_groups.config.settings import settings
from ietf_groups.models.enums import RESEARCH_GROUP, GroupStatus, Organization
from ietf_groups.models.group import Group
from ietf_groups.utils.misc_utils import (
    absolute_url,
    clean_text,
    parse_month_year,
    strip_parenthesized,
)
from .base_scraper import (
    BaseScraper,
    GroupDetails,
    extract_mailing_list,
    extract_mailing_list_archive,
    gather_ordered,
)
from .extraction import by_attribute, by_href_pattern, by_text_pattern, first_match

STANDARD_SECTIONS = [
    ("Active Research Groups", GroupStatus.ACTIVE),
    ("Concluded Research Groups", GroupStatus.CONCLUDED),
]
ALTERNATE_SECTION_TITLES = ["Current Research Groups", "Research Groups", "IRTF Groups"]

DROPDOWN_HREF = re.compile(r"(\w+)\.html$")
PARENTHESIZED = re.compile(r"\(([^)]+)\)")
CHAIR_SEPARATORS = re.compile(r",\s*|\s+and\s+")
CONCLUDED_PATTERN = re.compile(r"concluded in\s+([A-Z][a-z]+\s+\d{4})")
CONCLUDED_DATE_STRATEGIES = [by_text_pattern(CONCLUDED_PATTERN)]


def _parenthesized_link_text(item: Tag) -> Optional[str]:
    link = item.find("a")
    if link is None:
        return None
    match = PARENTHESIZED.search(link.get_text())
    return match.group(1) if match else None


ABBREVIATION_STRATEGIES = [
    _parenthesized_link_text,
    by_href_pattern(r"/(\w+)/?$", str.upper),
    by_href_pattern(DROPDOWN_HREF, str.upper),
]


class ListingEntry(BaseModel):
    abbreviation: str
    name: str
    status: GroupStatus
    description: Optional[str]
    detail_url: str


ListingStrategy = Callable[[Tag, str], List[ListingEntry]]


def parse_list_items(
    list_element: Tag, status: GroupStatus, base_url: str
) -> List[ListingEntry]:
    """Reads "Name (ABBR) - description" style items from a list element."""
    entries = []
    for item in list_element.find_all("li"):
        link = item.find("a", href=True)
        if link is None:
            continue

        abbreviation = first_match(ABBREVIATION_STRATEGIES, item)
        if not abbreviation:
            continue

        link_text = link.get_text()
        name = clean_text(strip_parenthesized(link_text)) or abbreviation

        remainder = item.get_text().replace(link_text, "", 1)
        description = clean_text(strip_parenthesized(remainder).lstrip(" -–:,"))

        detail_url = absolute_url(base_url, link["href"])
        entry_status = status
        if "/concluded/" in detail_url:
            entry_status = GroupStatus.CONCLUDED

        entries.append(
            ListingEntry(
                abbreviation=abbreviation,
                name=name,
                status=entry_status,
                description=description,
                detail_url=detail_url,
            )
        )
    return entries


def parse_dropdown(doc: Tag, base_url: str) -> List[ListingEntry]:
    """Entries from the "Research Groups" navigation dropdown."""
    toggle = next(
        (
            el
            for el in doc.select("a.dropdown-toggle")
            if "Research Groups" in el.get_text()
        ),
        None,
    )
    if toggle is None or toggle.parent is None:
        return []

    entries = []
    for menu in toggle.parent.select(".dropdown-menu"):
        for link in menu.select("a.dropdown-item"):
            href = link.get("href")
            if not href:
                continue
            match = DROPDOWN_HREF.search(href)
            if not match:
                continue
            abbreviation = match.group(1).upper()
            entries.append(
                ListingEntry(
                    abbreviation=abbreviation,
                    name=clean_text(link.get_text()) or abbreviation,
                    status=GroupStatus.ACTIVE,
                    description=None,
                    detail_url=absolute_url(base_url, href),
                )
            )
    return entries


def section_lists(doc: Tag, title: str) -> List[Tag]:
    """The first list following each h3 whose text contains the title."""
    lists = []
    for heading in doc.find_all("h3"):
        if title not in heading.get_text():
            continue
        following = heading.find_next_sibling("ul")
        if following is not None:
            lists.append(following)
    return lists


def parse_sections(
    doc: Tag, base_url: str, sections: List[Tuple[str, GroupStatus]]
) -> List[ListingEntry]:
    entries = []
    seen = set()
    # "Research Groups" also matches "Current Research Groups"; read each list once
    for title, status in sections:
        for list_element in section_lists(doc, title):
            if id(list_element) in seen:
                continue
            seen.add(id(list_element))
            entries.extend(parse_list_items(list_element, status, base_url))
    return entries


def parse_standard_sections(doc: Tag, base_url: str) -> List[ListingEntry]:
    return parse_sections(doc, base_url, STANDARD_SECTIONS)


def parse_alternate_sections(doc: Tag, base_url: str) -> List[ListingEntry]:
    return parse_sections(
        doc,
        base_url,
        [(title, GroupStatus.ACTIVE) for title in ALTERNATE_SECTION_TITLES],
    )


def parse_generic_lists(doc: Tag, base_url: str) -> List[ListingEntry]:
    """Last resort: every unordered list that contains links."""
    entries = []
    for list_element in doc.find_all("ul"):
        if list_element.select("li a"):
            entries.extend(
                parse_list_items(list_element, GroupStatus.ACTIVE, base_url)
            )
    return entries


# Tried in order; the first strategy producing any groups is used on its own
LISTING_STRATEGIES: List[Tuple[str, ListingStrategy]] = [
    ("dropdown menu", parse_dropdown),
    ("standard sections", parse_standard_sections),
    ("alternate section titles", parse_alternate_sections),
    ("generic list selector", parse_generic_lists),
]


def parse_chairs(doc: Tag) -> List[str]:
    for heading in doc.find_all("h3"):
        if "Chair" not in heading.get_text():
            continue
        paragraph = heading.find_next_sibling("p")
        if paragraph is None:
            continue
        names = CHAIR_SEPARATORS.split(paragraph.get_text(" "))
        return [name for name in (clean_text(n) for n in names) if name]
    return []


def parse_group_details(doc: Tag, url: str, status: GroupStatus) -> GroupDetails:
    """Extracts chairs and list metadata from an irtf.org group page."""
    details = GroupDetails(
        chairs=parse_chairs(doc),
        mailing_list=extract_mailing_list(doc),
        mailing_list_archive=extract_mailing_list_archive(doc),
        website_url=url,
        charter_url=first_match(
            [
                by_attribute(
                    'a[href*="charter"]', "href", lambda href: absolute_url(url, href)
                )
            ],
            doc,
        ),
    )
    if status == GroupStatus.CONCLUDED:
        details.concluded_date = parse_month_year(
            first_match(CONCLUDED_DATE_STRATEGIES, doc)
        )
    return details


class IrtfScraper(BaseScraper):
    """Scraper for IRTF research groups from irtf.org."""

    organization = Organization.IRTF

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = base_url or settings.irtf_base_url

    async def fetch(self) -> List[Group]:
        """Fetch all IRTF groups using the first listing strategy that works."""
        self.log("Fetching IRTF groups...")

        try:
            doc = await self.fetch_html(self.base_url)
            if doc is None:
                return []

            for label, strategy in LISTING_STRATEGIES:
                entries = strategy(doc, self.base_url)
                if not entries:
                    self.log(f"No groups found using {label}", 1)
                    continue

                groups = await self._scrape_entries(entries)
                if groups:
                    self.log(f"Found {len(groups)} groups using {label}", 1)
                    return groups

            headings = ", ".join(clean_text(h.get_text()) or "" for h in doc.find_all("h3"))
            self.log(f"No IRTF groups found. Headings on page: {headings}", 1, "WARNING")
        except Exception as e:
            self.log(f"Error fetching IRTF groups: {e}", 1, "ERROR")

        return []

    async def _scrape_entries(self, entries: List[ListingEntry]) -> List[Group]:
        results = await gather_ordered(
            (self._scrape_group(entry) for entry in entries),
            self.detail_concurrency,
        )
        return [group for group in results if group is not None]

    async def _scrape_group(self, entry: ListingEntry) -> Optional[Group]:
        try:
            details = await self.fetch_group_details(entry.detail_url, entry.status)
            if details is None:
                self.log(
                    f"Skipping {entry.abbreviation}: detail page unavailable",
                    2,
                    "WARNING",
                )
                return None

            return Group(
                abbreviation=entry.abbreviation,
                name=entry.name,
                organization=self.organization,
                type=RESEARCH_GROUP,
                area=None,
                status=entry.status,
                description=entry.description,
                chairs=tuple(details.chairs),
                mailing_list=details.mailing_list,
                mailing_list_archive=details.mailing_list_archive,
                website_url=details.website_url,
                charter_url=details.charter_url,
                concluded_date=details.concluded_date,
            )
        except Exception as e:
            self.log(
                f"Error fetching details for {entry.abbreviation} ({entry.detail_url}): {e}",
                2,
                "WARNING",
            )
            return None

    async def fetch_group_details(
        self, url: str, status: GroupStatus = GroupStatus.ACTIVE
    ) -> Optional[GroupDetails]:
        doc: Optional[BeautifulSoup] = await self.fetch_html(url)
        if doc is None:
            return None
        return parse_group_details(doc, url, status)
