import asyncio
from datetime import date

import pytest
from bs4 import BeautifulSoup
from pydantic import ValidationError

from ietf_groups.models.enums import GroupStatus, Organization
from ietf_groups.scrapers.ietf_scraper import (
    STANDARD_GROUP_TYPES,
    GroupType,
    IetfScraper,
    parse_group_details,
    parse_group_types,
    parse_row,
    row_status,
)

BASE = "https://datatracker.ietf.org/group/"
HOST = "https://datatracker.ietf.org/"
WG = GroupType(name="Working Group", abbreviation="wg", url="/wg/")
BOF = GroupType(name="BOF", abbreviation="bof", url="/bof/")

GROUP_TYPES_PAGE = """
<table class="tablesorter"><tbody>
  <tr><td><a href="/wg/">Working Group</a></td><td>Working groups</td></tr>
  <tr><td><a href="/rg/">Research Group</a></td><td>Research groups</td></tr>
  <tr><td>No link here</td></tr>
</tbody></table>
"""

WG_LISTING = """
<table class="table table-sm"><tbody>
  <tr><td><a href="/group/httpbis/">httpbis</a></td><td>HTTP</td><td class="area">art</td></tr>
  <tr><td><a href="/group/quic/">quic</a></td><td>QUIC</td><td class="area">wit</td></tr>
  <tr><td><a href="/group/tls/">tls</a></td><td>Transport Layer Security</td><td class="area">sec</td></tr>
</tbody></table>
"""

HTTPBIS_DETAIL = """
<html><body>
  <div id="charter"><p>This WG maintains
     the core HTTP specifications.</p></div>
  <span class="role-WG-chair">Mark Nottingham</span>
  <span class="role-WG-chair">Tommy Pauly</span>
  <a href="mailto:ietf-http-wg@w3.org">list</a>
  <a href="https://mailarchive.ietf.org/arch/browse/httpbis/">archive</a>
  <div class="additional-urls"><a href="https://httpwg.org/">site</a></div>
  <a href="/group/httpbis/charter/">charter</a>
</body></html>
"""

QUIC_DETAIL = """
<html><body>
  <span class="role-WG-chair">Lucas Pardue</span>
  <a href="mailto:quic@ietf.org">list</a>
</body></html>
"""


def _run(site, **kwargs):
    async def run():
        async with IetfScraper(site.client(), base_url=BASE, **kwargs) as scraper:
            return await scraper.fetch()

    return asyncio.run(run())


def _row(html):
    return BeautifulSoup(f"<table><tbody>{html}</tbody></table>", "html.parser").tr


def test_parse_group_types_reads_index_table():
    doc = BeautifulSoup(GROUP_TYPES_PAGE, "html.parser")
    types = parse_group_types(doc)
    assert [(t.abbreviation, t.name, t.url) for t in types] == [
        ("wg", "Working Group", "/wg/"),
        ("rg", "Research Group", "/rg/"),
    ]


def test_parse_row_falls_back_from_classes_to_columns_to_link():
    classed = _row(
        '<tr><td class="acronym">httpbis</td><td class="name">HTTP</td>'
        '<td><a href="/group/httpbis/">about</a></td></tr>'
    )
    row = parse_row(classed, WG, BASE)
    assert (row.abbreviation, row.name) == ("httpbis", "HTTP")
    assert row.detail_url == "https://datatracker.ietf.org/group/httpbis/"

    link_only = _row('<tr><td><a href="/group/dnsop/">DNS Operations</a></td></tr>')
    row = parse_row(link_only, WG, BASE)
    assert (row.abbreviation, row.name) == ("DNSOP", "DNS Operations")


def test_parse_row_skips_rows_without_key_fields():
    assert parse_row(_row("<tr><td></td><td></td></tr>"), WG, BASE) is None
    # Abbreviation and name found by column, but there is no link to follow
    assert parse_row(_row("<tr><td>x</td><td>X</td></tr>"), WG, BASE) is None


@pytest.mark.parametrize(
    "html, group_type, expected",
    [
        ("<tr><td>a</td></tr>", WG, GroupStatus.ACTIVE),
        ('<tr class="concluded"><td>a</td></tr>', WG, GroupStatus.CONCLUDED),
        ("<tr><td>Concluded 2019</td></tr>", WG, GroupStatus.CONCLUDED),
        ("<tr><td>Proposed</td></tr>", WG, GroupStatus.PROPOSED),
        ("<tr><td>a</td></tr>", BOF, GroupStatus.BOF),
        ('<tr class="concluded"><td class="active">x</td></tr>', WG, GroupStatus.ACTIVE),
    ],
)
def test_row_status(html, group_type, expected):
    assert row_status(_row(html), group_type) == expected


def test_parse_group_details():
    doc = BeautifulSoup(HTTPBIS_DETAIL, "html.parser")
    details = parse_group_details(doc, HOST)

    assert details.description == "This WG maintains the core HTTP specifications."
    assert details.chairs == ["Mark Nottingham", "Tommy Pauly"]
    assert details.mailing_list == "ietf-http-wg@w3.org"
    assert details.mailing_list_archive == "https://mailarchive.ietf.org/arch/browse/httpbis/"
    assert details.website_url == "https://httpwg.org/"
    assert details.charter_url == "https://datatracker.ietf.org/group/httpbis/charter/"
    assert details.concluded_date is None


def test_parse_group_details_concluded_date():
    doc = BeautifulSoup("<p>State: Concluded March 2015</p>", "html.parser")
    assert parse_group_details(doc, HOST).concluded_date == date(2015, 3, 1)

    doc = BeautifulSoup("<p>Concluded Smarch 2015</p>", "html.parser")
    assert parse_group_details(doc, HOST).concluded_date is None


def test_fetch_falls_back_to_standard_types_and_drops_failed_detail(make_site):
    # No index page, only the wg listing exists; tls detail page is missing
    site = make_site(
        {
            "https://datatracker.ietf.org/wg/": WG_LISTING,
            "https://datatracker.ietf.org/group/httpbis/": HTTPBIS_DETAIL,
            "https://datatracker.ietf.org/group/quic/": QUIC_DETAIL,
        }
    )

    groups = _run(site)

    assert [g.abbreviation for g in groups] == ["httpbis", "quic"]
    httpbis = groups[0]
    assert httpbis.organization == Organization.IETF
    assert httpbis.type == "wg"
    assert httpbis.area == "art"
    assert httpbis.status == GroupStatus.ACTIVE
    assert httpbis.chairs == ("Mark Nottingham", "Tommy Pauly")
    assert groups[1].mailing_list == "quic@ietf.org"

    # Every standard category was tried after the index page failed
    for group_type in STANDARD_GROUP_TYPES:
        assert f"https://datatracker.ietf.org{group_type.url}" in site.requested
    assert "https://datatracker.ietf.org/group/tls/" in site.requested


def test_fetch_uses_index_types_and_keeps_order_with_concurrency(make_site):
    site = make_site(
        {
            BASE: GROUP_TYPES_PAGE,
            "https://datatracker.ietf.org/wg/": WG_LISTING,
            "https://datatracker.ietf.org/group/httpbis/": HTTPBIS_DETAIL,
            "https://datatracker.ietf.org/group/quic/": QUIC_DETAIL,
            "https://datatracker.ietf.org/group/tls/": QUIC_DETAIL,
        }
    )

    groups = _run(site, detail_concurrency=3)

    assert [g.abbreviation for g in groups] == ["httpbis", "quic", "tls"]
    assert "https://datatracker.ietf.org/area/" not in site.requested


def test_concluded_date_only_kept_for_concluded_rows(make_site):
    listing = """
    <div class="group-list"><table><tbody>
      <tr class="concluded"><td class="acronym">old</td><td class="name">Old WG</td>
          <td><a href="/group/old/">old</a></td></tr>
      <tr><td class="acronym">new</td><td class="name">New WG</td>
          <td><a href="/group/new/">new</a></td></tr>
    </tbody></table></div>
    """
    detail = "<p>Concluded June 2010</p>"
    site = make_site(
        {
            BASE: GROUP_TYPES_PAGE,
            "https://datatracker.ietf.org/wg/": listing,
            "https://datatracker.ietf.org/group/old/": detail,
            "https://datatracker.ietf.org/group/new/": detail,
        }
    )

    old, new = _run(site)

    assert old.status == GroupStatus.CONCLUDED
    assert old.concluded_date == date(2010, 6, 1)
    assert new.status == GroupStatus.ACTIVE
    assert new.concluded_date is None


def test_fetch_with_nothing_reachable_is_empty(make_site):
    assert _run(make_site({})) == []


def test_group_types_are_frozen_and_validated():
    with pytest.raises(ValidationError):
        WG.abbreviation = "rg"
    with pytest.raises(ValidationError):
        GroupType(name="Working Group", abbreviation="wg")
    assert BOF in STANDARD_GROUP_TYPES
