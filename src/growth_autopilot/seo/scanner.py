"""
growth-autopilot: static-site SEO scanner

File: src/growth_autopilot/seo/scanner.py
Last updated: 2026-10-19

Purpose
- Walk an exported site (``*.html`` files), extract SEO-relevant markup and
  report findings with evidence pointing at the offending element.

Functional requirements
- Files are visited in sorted order so audits are reproducible.
- Page URLs derive from paths relative to the export root
  (``blog/index.html`` -> ``/blog``, ``about.html`` -> ``/about``).
- External links are never fetched; only internal links are checked against
  the set of scanned pages.
- An export without HTML files is a dependency failure.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from bs4 import BeautifulSoup

from growth_autopilot.contracts.envelopes import SEVERITIES
from growth_autopilot.domain.ids import AUDIT_ID_PREFIX, SEO_FINDING_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, now_iso8601z
from growth_autopilot.errors import DependencyError

REQUIRED_OG_TAGS: Final[tuple[str, ...]] = ("og:title", "og:description", "og:url", "og:type")
TITLE_MIN_LENGTH: Final[int] = 10
TITLE_MAX_LENGTH: Final[int] = 70
DESCRIPTION_MIN_LENGTH: Final[int] = 50

_SKIPPED_LINK_PREFIXES: Final[tuple[str, ...]] = ("#", "javascript:", "mailto:", "tel:")


@dataclass(frozen=True, slots=True)
class PageLink:
    href: str
    text: str
    is_external: bool


@dataclass(frozen=True, slots=True)
class PageScan:
    """SEO-relevant markup extracted from one HTML file."""

    url: str
    file_path: Path
    title: str | None
    meta_description: str | None
    og_tags: dict[str, str] = field(default_factory=dict)
    canonical: str | None = None
    robots: str | None = None
    links: tuple[PageLink, ...] = ()


def scan_site(
    tenant_context: dict[str, str],
    source_type: str,
    source_path: str | Path,
    *,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> dict[str, Any]:
    """Scan every HTML file under ``source_path`` and return an SEO audit."""

    new_id = id_factory or generate_prefixed_id
    root = Path(source_path)
    html_files = sorted(root.rglob("*.html")) if root.is_dir() else []
    if not html_files:
        raise DependencyError(f"No HTML files found in {source_path}")

    pages = [scan_html_file(file_path, root) for file_path in html_files]

    findings: list[dict[str, Any]] = []
    for page in pages:
        findings.extend(validate_page(page, new_id))
    findings.extend(check_broken_links(pages, new_id))
    findings.extend(check_sitemap_and_robots(pages, new_id))

    counts = Counter(finding["severity"] for finding in findings)
    return {
        "tenant_id": tenant_context["tenant_id"],
        "project_id": tenant_context["project_id"],
        "id": new_id(AUDIT_ID_PREFIX),
        "scanned_at": now_iso8601z(clock),
        "source_type": source_type,
        "source_path": str(source_path),
        "urls_scanned": len(pages),
        "findings": findings,
        "summary": {severity: counts.get(severity, 0) for severity in SEVERITIES},
    }


def scan_html_file(file_path: Path, root: Path) -> PageScan:
    try:
        html = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise DependencyError(f"failed to read {file_path}: {exc}") from exc

    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text() if title_tag else ""

    og_tags: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        prop = meta.get("property") or ""
        content = meta.get("content") or ""
        if prop.startswith("og:") and content and prop not in og_tags:
            og_tags[prop] = content

    description = _meta_content(soup, name="description") or og_tags.get("og:description")

    canonical_tag = soup.find("link", rel="canonical")
    canonical = canonical_tag.get("href") if canonical_tag else None

    base = str(root)
    links = tuple(
        PageLink(
            href=anchor.get("href") or "",
            text=anchor.get_text().strip(),
            is_external=_is_external(anchor.get("href") or "", base),
        )
        for anchor in soup.find_all("a", href=True)
    )

    return PageScan(
        url=url_for_path(file_path.relative_to(root).as_posix()),
        file_path=file_path,
        title=title or None,
        meta_description=description or None,
        og_tags=og_tags,
        canonical=canonical or None,
        robots=_meta_content(soup, name="robots"),
        links=links,
    )


def url_for_path(relative_path: str) -> str:
    """Map an export-relative file path to its served URL."""

    url_path = relative_path
    if url_path.endswith("index.html"):
        url_path = url_path[: -len("index.html")]
    elif url_path.endswith(".html"):
        url_path = url_path[: -len(".html")]
    url_path = url_path.rstrip("/")
    return "/" if not url_path else f"/{url_path}"


def validate_page(page: PageScan, new_id: IdFactory) -> list[dict[str, Any]]:
    findings: list[dict[str, Any]] = []

    def add(severity: str, category: str, message: str, current: str | None, recommendation: str, evidence: dict[str, Any]) -> None:
        findings.append(
            _finding(new_id, page.url, severity, category, message, current, recommendation, [evidence])
        )

    if not page.title:
        add(
            "critical",
            "title",
            "Missing page title",
            None,
            "Add a descriptive <title> tag (50-60 characters)",
            _evidence("html_element", "head > title", "No title element found"),
        )
    elif len(page.title) < TITLE_MIN_LENGTH:
        add(
            "warning",
            "title",
            "Title is too short",
            page.title,
            "Expand title to 50-60 characters for better SEO",
            _evidence("html_element", "head > title", f"Title is only {len(page.title)} characters", len(page.title)),
        )
    elif len(page.title) > TITLE_MAX_LENGTH:
        add(
            "warning",
            "title",
            "Title may be truncated in search results",
            page.title,
            "Shorten title to 50-60 characters",
            _evidence("html_element", "head > title", f"Title is {len(page.title)} characters", len(page.title)),
        )

    description = page.meta_description
    if not description:
        add(
            "warning",
            "meta_description",
            "Missing meta description",
            None,
            "Add a meta description tag (150-160 characters)",
            _evidence("html_element", 'meta[name="description"]', "No description meta tag found"),
        )
    elif len(description) < DESCRIPTION_MIN_LENGTH:
        add(
            "info",
            "meta_description",
            "Meta description is short",
            description,
            "Consider expanding to 150-160 characters",
            _evidence(
                "html_element",
                'meta[name="description"]',
                f"Description is {len(description)} characters",
                len(description),
            ),
        )

    for tag in REQUIRED_OG_TAGS:
        if not page.og_tags.get(tag):
            add(
                "info",
                "og_tags",
                f"Missing {tag} tag",
                None,
                f'Add <meta property="{tag}" content="..."> for social sharing',
                _evidence("html_element", f'meta[property="{tag}"]', "OG tag not found"),
            )

    if not page.canonical:
        add(
            "info",
            "canonical",
            "Missing canonical tag",
            None,
            'Add <link rel="canonical" href="..."> to prevent duplicate content issues',
            _evidence("html_element", 'link[rel="canonical"]', "Canonical link not found"),
        )

    return findings


def check_broken_links(pages: list[PageScan], new_id: IdFactory) -> list[dict[str, Any]]:
    known_urls = {_normalize_link(page.url) for page in pages}
    findings: list[dict[str, Any]] = []
    for page in pages:
        for link in page.links:
            if link.is_external or link.href.startswith(_SKIPPED_LINK_PREFIXES):
                continue
            if _normalize_link(link.href) in known_urls:
                continue
            findings.append(
                _finding(
                    new_id,
                    page.url,
                    "warning",
                    "broken_link",
                    f"Broken internal link: {link.href}",
                    link.href,
                    "Fix or remove the broken link",
                    [_evidence("html_element", f'a[href="{link.href}"]', f'Link text: "{link.text}"', link.href)],
                )
            )
    return findings


def check_sitemap_and_robots(pages: list[PageScan], new_id: IdFactory) -> list[dict[str, Any]]:
    findings: list[dict[str, Any]] = []
    noindex = [page for page in pages if page.robots and "noindex" in page.robots.lower()]
    if noindex:
        findings.append(
            _finding(
                new_id,
                "/",
                "info",
                "robots",
                f"{len(noindex)} pages have noindex directive",
                ", ".join(page.url for page in noindex),
                "Verify these pages should be excluded from search engines",
                [_evidence("calculation", "robots:noindex", "Pages with noindex meta tag", len(noindex))],
            )
        )
    findings.append(
        _finding(
            new_id,
            "/",
            "opportunity",
            "sitemap",
            "Consider generating a sitemap.xml",
            None,
            f"Submit sitemap to search engines with {len(pages)} pages",
            [_evidence("calculation", "pages:count", "Total pages scanned", len(pages))],
        )
    )
    return findings


def _meta_content(soup: BeautifulSoup, *, name: str) -> str | None:
    for meta in soup.find_all("meta"):
        if (meta.get("name") or "").lower() == name:
            content = meta.get("content")
            if content:
                return content
    return None


def _is_external(href: str, base: str) -> bool:
    return href.startswith("http") and not href.startswith(base)


def _normalize_link(href: str) -> str:
    # Internal hrefs may point at the exported file rather than its URL.
    path = href.split("#", 1)[0].split("?", 1)[0]
    if path.endswith("index.html"):
        path = path[: -len("index.html")]
    elif path.endswith(".html"):
        path = path[: -len(".html")]
    if path.endswith("/"):
        path = path[:-1]
    return path or "/"


def _evidence(kind: str, path: str, description: str, value: str | int | None = None) -> dict[str, Any]:
    evidence: dict[str, Any] = {"type": kind, "path": path, "description": description}
    if value is not None:
        evidence["value"] = value
    return evidence


def _finding(
    new_id: IdFactory,
    url: str,
    severity: str,
    category: str,
    message: str,
    current_value: str | None,
    recommendation: str,
    evidence: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "id": new_id(SEO_FINDING_ID_PREFIX),
        "url": url,
        "severity": severity,
        "category": category,
        "message": message,
        "current_value": current_value,
        "recommendation": recommendation,
        "evidence": evidence,
    }


__all__ = [
    "PageLink",
    "PageScan",
    "check_broken_links",
    "check_sitemap_and_robots",
    "scan_html_file",
    "scan_site",
    "url_for_path",
    "validate_page",
]
