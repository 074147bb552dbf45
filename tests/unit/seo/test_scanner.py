"""
growth-autopilot: unit tests for the static-site SEO scanner

File: tests/unit/seo/test_scanner.py
Last updated: 2026-10-19

Purpose
- Validate per-page rules, internal link checks and the audit envelope.

What this test file should cover
- A fully tagged page yields no per-page findings.
- Short titles, missing descriptions and missing OG/canonical tags.
- Broken internal links and the sitemap opportunity.
- noindex detection and the empty-export failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from growth_autopilot.contracts.growth import validate_seo_audit
from growth_autopilot.errors import DependencyError
from growth_autopilot.seo.scanner import scan_html_file, scan_site, url_for_path

if TYPE_CHECKING:
    from pathlib import Path

    from growth_autopilot.domain.ids import IdFactory
    from growth_autopilot.domain.timestamps import Clock


@pytest.mark.unit
@pytest.mark.parametrize(
    ("relative", "expected"),
    [
        ("index.html", "/"),
        ("pricing.html", "/pricing"),
        ("blog/index.html", "/blog"),
        ("docs/guide/setup.html", "/docs/guide/setup"),
    ],
)
def test_url_for_path(relative: str, expected: str) -> None:
    assert url_for_path(relative) == expected


@pytest.mark.unit
def test_scan_html_file_extracts_markup(site_dir: Path) -> None:
    page = scan_html_file(site_dir / "index.html", site_dir)

    assert page.url == "/"
    assert page.title == "Acme Growth Platform for Teams"
    assert page.canonical == "https://acme.test/"
    assert set(page.og_tags) == {"og:title", "og:description", "og:url", "og:type"}
    assert [link.href for link in page.links] == ["/pricing.html", "/missing"]
    assert not any(link.is_external for link in page.links)


@pytest.mark.unit
def test_scan_site_audit_shape(
    site_dir: Path, tenant_context: dict[str, str], clock: Clock, id_factory: IdFactory
) -> None:
    audit = scan_site(tenant_context, "html_export", site_dir, clock=clock, id_factory=id_factory)

    assert validate_seo_audit(audit).success
    assert audit["id"] == "audit-1"
    assert audit["scanned_at"] == "2024-03-01T12:00:00.000Z"
    assert audit["urls_scanned"] == 2
    assert audit["summary"] == {"critical": 0, "warning": 3, "info": 5, "opportunity": 1}
    assert [finding["id"] for finding in audit["findings"]][:2] == ["seo-1", "seo-2"]


@pytest.mark.unit
def test_fully_tagged_page_has_no_page_findings(site_dir: Path, tenant_context: dict[str, str]) -> None:
    audit = scan_site(tenant_context, "html_export", site_dir)

    page_findings = [f for f in audit["findings"] if f["url"] == "/" and f["category"] not in {"sitemap", "broken_link"}]
    assert page_findings == []


@pytest.mark.unit
def test_short_title_and_missing_tags(site_dir: Path, tenant_context: dict[str, str]) -> None:
    audit = scan_site(tenant_context, "html_export", site_dir)

    pricing = [f for f in audit["findings"] if f["url"] == "/pricing"]
    messages = [f["message"] for f in pricing]
    assert messages == [
        "Title is too short",
        "Missing meta description",
        "Missing og:title tag",
        "Missing og:description tag",
        "Missing og:url tag",
        "Missing og:type tag",
        "Missing canonical tag",
    ]
    assert pricing[0]["current_value"] == "Short"
    assert pricing[0]["evidence"][0]["value"] == 5


@pytest.mark.unit
def test_broken_internal_link_is_reported(site_dir: Path, tenant_context: dict[str, str]) -> None:
    audit = scan_site(tenant_context, "html_export", site_dir)

    broken = [f for f in audit["findings"] if f["category"] == "broken_link"]
    assert len(broken) == 1
    assert broken[0]["message"] == "Broken internal link: /missing"
    assert broken[0]["url"] == "/"


@pytest.mark.unit
def test_sitemap_opportunity_is_always_last(site_dir: Path, tenant_context: dict[str, str]) -> None:
    audit = scan_site(tenant_context, "html_export", site_dir)

    last = audit["findings"][-1]
    assert last["category"] == "sitemap"
    assert last["severity"] == "opportunity"
    assert last["evidence"][0]["value"] == 2


@pytest.mark.unit
def test_missing_title_is_critical(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    (tmp_path / "index.html").write_text("<html><head></head><body></body></html>", encoding="utf-8")

    audit = scan_site(tenant_context, "html_export", tmp_path)

    assert audit["findings"][0]["message"] == "Missing page title"
    assert audit["findings"][0]["severity"] == "critical"


@pytest.mark.unit
def test_long_title_and_short_description(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    title = "T" * 71
    (tmp_path / "index.html").write_text(
        f'<html><head><title>{title}</title><meta name="description" content="Too brief"></head></html>',
        encoding="utf-8",
    )

    audit = scan_site(tenant_context, "html_export", tmp_path)

    by_category = {f["category"]: f for f in audit["findings"] if f["category"] in {"title", "meta_description"}}
    assert by_category["title"]["message"] == "Title may be truncated in search results"
    assert by_category["meta_description"]["severity"] == "info"


@pytest.mark.unit
def test_noindex_pages_are_summarized(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    (tmp_path / "index.html").write_text("<html><head></head></html>", encoding="utf-8")
    (tmp_path / "draft.html").write_text(
        '<html><head><meta name="robots" content="NOINDEX, nofollow"></head></html>', encoding="utf-8"
    )

    audit = scan_site(tenant_context, "html_export", tmp_path)

    robots = [f for f in audit["findings"] if f["category"] == "robots"]
    assert len(robots) == 1
    assert robots[0]["current_value"] == "/draft"


@pytest.mark.unit
def test_external_links_are_not_checked(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    (tmp_path / "index.html").write_text(
        '<html><body><a href="https://example.com/x">x</a><a href="mailto:a@b.c">m</a><a href="#top">t</a></body></html>',
        encoding="utf-8",
    )

    audit = scan_site(tenant_context, "html_export", tmp_path)

    assert not [f for f in audit["findings"] if f["category"] == "broken_link"]


@pytest.mark.unit
def test_export_without_html_is_dependency_error(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    (tmp_path / "notes.txt").write_text("nothing", encoding="utf-8")

    with pytest.raises(DependencyError, match="No HTML files found"):
        scan_site(tenant_context, "html_export", tmp_path)


@pytest.mark.unit
def test_missing_directory_is_dependency_error(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    with pytest.raises(DependencyError):
        scan_site(tenant_context, "html_export", tmp_path / "absent")
