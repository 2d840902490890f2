# ietf_groups/scrapers/ietf_scraper.py

import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict

from ietf_groups.config.settings import settings
from ietf_groups.models.enums import GroupStatus, Organization
from ietf_groups.models.group import Group
from ietf_groups.utils.misc_utils import absolute_url, clean_text, parse_month_year
from .base_scraper import (
    BaseScraper,
    GroupDetails,
    extract_mailing_list,
    extract_mailing_list_archive,
    gather_ordered,
)
from .extraction import (
    by_attribute,
    by_column,
    by_href_pattern,
    by_link_text,
    by_selector,
    by_text_pattern,
    first_match,
)


class GroupType(BaseModel):
    """One datatracker group category (wg, rg, area, ...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    abbreviation: str
    url: str


# Used when the group-types index cannot be read
STANDARD_GROUP_TYPES = [
    GroupType(name="Working Group", abbreviation="wg", url="/wg/"),
    GroupType(name="Research Group", abbreviation="rg", url="/rg/"),
    GroupType(name="Area", abbreviation="area", url="/area/"),
    GroupType(name="Team", abbreviation="team", url="/team/"),
    GroupType(name="Program", abbreviation="program", url="/program/"),
    GroupType(name="Directorate", abbreviation="dir", url="/dir/"),
    GroupType(name="Advisory Group", abbreviation="ag", url="/ag/"),
    GroupType(name="BOF", abbreviation="bof", url="/bof/"),
]

# Listing table layouts seen on the datatracker over time, newest last
ROW_SELECTORS = [
    ".group-list tbody tr",
    "table.table-sm tbody tr",
    "table.tablesorter tbody tr",
]

ABBREVIATION_STRATEGIES = [
    by_selector(".acronym"),
    by_column(0, min_columns=2),
    by_href_pattern(r"/([^/]+)/?$", str.upper),
]
NAME_STRATEGIES = [
    by_selector(".name"),
    by_column(1, min_columns=2),
    by_link_text(),
]
AREA_STRATEGIES = [by_selector(".area")]

CONCLUDED_PATTERN = re.compile(r"Concluded\s+([A-Z][a-z]+\s+\d{4})")
CONCLUDED_DATE_STRATEGIES = [by_text_pattern(CONCLUDED_PATTERN)]


class ListingRow(BaseModel):
    abbreviation: str
    name: str
    status: GroupStatus
    area: Optional[str]
    detail_url: str


def parse_group_types(doc: Tag) -> List[GroupType]:
    """Reads group categories from the index table; empty if the table is missing."""
    group_types = []
    for row in doc.select("table.tablesorter tbody tr"):
        link = row.select_one("td a")
        if link is None or not link.get("href"):
            continue
        href = link["href"]
        if "/" not in href:
            continue
        abbreviation = href.rstrip("/").split("/")[-1].lower()
        if not abbreviation:
            continue
        group_types.append(
            GroupType(
                name=clean_text(link.get_text()) or abbreviation,
                abbreviation=abbreviation,
                url=href,
            )
        )
    return group_types


def find_rows(doc: Tag) -> List[Tag]:
    """Rows matched by the first selector in ROW_SELECTORS that finds any."""
    for selector in ROW_SELECTORS:
        rows = doc.select(selector)
        if rows:
            return rows
    return []


def row_status(row: Tag, group_type: GroupType) -> GroupStatus:
    """Later rules override earlier ones; an explicit "Active" marker wins."""
    text = row.get_text(" ")
    css_class = " ".join(row.get("class") or [])

    status = GroupStatus.ACTIVE
    if group_type.abbreviation == "bof":
        status = GroupStatus.BOF
    if "Proposed" in text:
        status = GroupStatus.PROPOSED
    if "concluded" in css_class or "Concluded" in text:
        status = GroupStatus.CONCLUDED
    if row.select_one(".active") is not None or "Active" in text:
        status = GroupStatus.ACTIVE
    return status


def parse_row(row: Tag, group_type: GroupType, base_url: str) -> Optional[ListingRow]:
    """Extracts the listing fields of one table row, or None if it is unusable."""
    abbreviation = first_match(ABBREVIATION_STRATEGIES, row)
    name = first_match(NAME_STRATEGIES, row)
    if not abbreviation or not name:
        return None

    link = row.find("a", href=True)
    if link is None:
        return None

    return ListingRow(
        abbreviation=abbreviation,
        name=name,
        status=row_status(row, group_type),
        area=first_match(AREA_STRATEGIES, row),
        detail_url=urljoin(base_url, link["href"]),
    )


def parse_group_details(doc: Tag, host: str) -> GroupDetails:
    """Extracts charter, chairs and list metadata from a datatracker group page."""
    details = GroupDetails()

    charter_section = doc.select_one("#charter")
    if charter_section is not None:
        details.description = clean_text(charter_section.get_text(" "))

    for chair in doc.select(".role-WG-chair, .role-RG-chair"):
        name = clean_text(chair.get_text())
        if name:
            details.chairs.append(name)

    details.mailing_list = extract_mailing_list(doc)
    details.mailing_list_archive = extract_mailing_list_archive(doc)
    details.website_url = first_match([by_attribute(".additional-urls a", "href")], doc)
    details.charter_url = first_match(
        [
            by_attribute(
                'a[href*="/charter/"]', "href", lambda href: absolute_url(host, href)
            )
        ],
        doc,
    )
    details.concluded_date = parse_month_year(
        first_match(CONCLUDED_DATE_STRATEGIES, doc)
    )
    return details


class IetfScraper(BaseScraper):
    """Scraper for IETF groups from datatracker.ietf.org."""

    organization = Organization.IETF

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.base_url = base_url or settings.ietf_base_url
        self.host = urljoin(self.base_url, "/")

    async def fetch(self) -> List[Group]:
        """Fetch all IETF groups across every group type."""
        groups: List[Group] = []
        self.log("Fetching IETF groups...")

        for group_type in await self.fetch_group_types():
            self.log(f"Fetching {group_type.name} groups...", 1)

            if not group_type.url:
                continue

            type_doc = await self.fetch_html(urljoin(self.host, group_type.url))
            if type_doc is None:
                continue

            groups.extend(await self.extract_groups_from_table(type_doc, group_type))

        return groups

    async def fetch_group_types(self) -> List[GroupType]:
        doc = await self.fetch_html(self.base_url)
        group_types = parse_group_types(doc) if doc is not None else []

        if not group_types:
            self.log("Using predefined group types...", 1)
            group_types = list(STANDARD_GROUP_TYPES)

        self.log(
            f"Found {len(group_types)} group types: "
            f"{', '.join(t.abbreviation for t in group_types)}",
            1,
        )
        return group_types

    async def extract_groups_from_table(
        self, doc: BeautifulSoup, group_type: GroupType
    ) -> List[Group]:
        rows = find_rows(doc)
        listing = [
            parsed
            for parsed in (parse_row(row, group_type, self.base_url) for row in rows)
            if parsed is not None
        ]
        self.log(f"Found {len(listing)} {group_type.abbreviation} groups", 2)

        results = await gather_ordered(
            (self._scrape_group(row, group_type) for row in listing),
            self.detail_concurrency,
        )
        return [group for group in results if group is not None]

    async def _scrape_group(
        self, row: ListingRow, group_type: GroupType
    ) -> Optional[Group]:
        try:
            details = await self.fetch_group_details(row.detail_url)
            if details is None:
                self.log(
                    f"Skipping {row.abbreviation}: detail page unavailable",
                    2,
                    "WARNING",
                )
                return None

            return Group(
                abbreviation=row.abbreviation,
                name=row.name,
                organization=self.organization,
                type=group_type.abbreviation,
                area=row.area,
                status=row.status,
                description=details.description,
                chairs=tuple(details.chairs),
                mailing_list=details.mailing_list,
                mailing_list_archive=details.mailing_list_archive,
                website_url=details.website_url,
                charter_url=details.charter_url,
                concluded_date=(
                    details.concluded_date
                    if row.status == GroupStatus.CONCLUDED
                    else None
                ),
            )
        except Exception as e:
            self.log(f"Error fetching details for {row.abbreviation}: {e}", 2, "WARNING")
            return None

    async def fetch_group_details(self, url: str) -> Optional[GroupDetails]:
        doc = await self.fetch_html(url)
        if doc is None:
            return None
        return parse_group_details(doc, self.host)
