"""
growth-autopilot: unit tests for template-based content drafting

File: tests/unit/content/test_drafter.py
Last updated: 2026-10-19

Purpose
- Validate rendered draft parts, SEO metadata and the draft envelope.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from growth_autopilot.content.drafter import draft_content, draft_content_with_llm, generate_seo_metadata
from growth_autopilot.content.profiles import ProfileLoader
from growth_autopilot.content.templates import ContentTemplateEngine, ContentTemplateError
from growth_autopilot.contracts.growth import CONTENT_TYPES, validate_content_draft
from growth_autopilot.errors import DependencyError

if TYPE_CHECKING:
    from pathlib import Path

    from growth_autopilot.domain.ids import IdFactory
    from growth_autopilot.domain.timestamps import Clock


@pytest.fixture()
def loader(profiles_dir: Path) -> ProfileLoader:
    return ProfileLoader(profiles_dir)


@pytest.mark.unit
def test_landing_page_draft(
    loader: ProfileLoader, tenant_context: dict[str, str], clock: Clock, id_factory: IdFactory
) -> None:
    draft = draft_content(
        tenant_context,
        "test-profile",
        "landing_page",
        "Convert visitors",
        profile_loader=loader,
        keywords=["automation"],
        features=["Fast deploys", "Cost reports"],
        clock=clock,
        id_factory=id_factory,
    )

    assert validate_content_draft(draft).success
    assert draft["id"] == "draft-1"
    assert draft["llm_used"] is False
    assert "llm_provider" not in draft
    assert draft["draft"]["headline"] == "The automation That Deploy faster"
    assert draft["draft"]["cta"] == "Start Your Free Trial"
    body = draft["draft"]["body"]
    assert body.startswith("Tired of slow performance?")
    assert "• Fast deploys\n• Cost reports" in body
    assert body.endswith("Convert visitors")
    assert draft["input_context"]["target_audience"] == "test users"
    assert len(draft["evidence"]) == 5


@pytest.mark.unit
def test_onboarding_email_has_subject_line(loader: ProfileLoader, tenant_context: dict[str, str]) -> None:
    draft = draft_content(tenant_context, "test-profile", "onboarding_email", "Welcome", profile_loader=loader)

    assert draft["draft"]["subject_line"] == "Welcome! Let's deploy faster"
    assert "headline" not in draft["draft"]
    assert draft["draft"]["body"].startswith("Hi there,")


@pytest.mark.unit
@pytest.mark.parametrize("content_type", CONTENT_TYPES)
def test_every_content_type_renders(loader: ProfileLoader, tenant_context: dict[str, str], content_type: str) -> None:
    draft = draft_content(tenant_context, "test-profile", content_type, "Grow", profile_loader=loader, features=["A"])

    assert validate_content_draft(draft).success
    assert draft["draft"]["body"]


@pytest.mark.unit
def test_short_form_bodies_respect_length_limits(loader: ProfileLoader, tenant_context: dict[str, str]) -> None:
    meta = draft_content(
        tenant_context,
        "test-profile",
        "meta_description",
        "Grow",
        profile_loader=loader,
        features=["An extremely long feature description " * 5],
    )
    title = draft_content(tenant_context, "test-profile", "title_tag", "Grow", profile_loader=loader)

    assert len(meta["draft"]["body"]) == 160
    assert title["draft"]["body"] == "test-profile | Deploy faster"


@pytest.mark.unit
def test_seo_metadata_for_long_form(loader: ProfileLoader) -> None:
    profile = loader.load("test-profile")

    metadata = generate_seo_metadata("landing_page", profile, ["automation"])

    assert metadata == {
        "title": "test-profile | Deploy faster",
        "meta_description": "test-profile helps test users deploy faster. test, optimization, automation.",
        "keywords": ["test", "optimization", "automation"],
    }
    assert generate_seo_metadata("ad_copy", profile, []) == {"keywords": ["test", "optimization"]}


@pytest.mark.unit
def test_llm_variant_marks_provider(loader: ProfileLoader, tenant_context: dict[str, str]) -> None:
    draft = draft_content_with_llm(
        tenant_context,
        "test-profile",
        "blog_post",
        "Grow",
        llm_provider="openai",
        profile_loader=loader,
        variant_count=2,
    )

    assert draft["llm_used"] is True
    assert draft["llm_provider"] == "openai"
    assert draft["variant_count"] == 2


@pytest.mark.unit
def test_unknown_profile_propagates_dependency_error(loader: ProfileLoader, tenant_context: dict[str, str]) -> None:
    with pytest.raises(DependencyError):
        draft_content(tenant_context, "missing", "landing_page", "Grow", profile_loader=loader)


@pytest.mark.unit
def test_engine_without_template_uses_generic_body() -> None:
    engine = ContentTemplateEngine(templates={})

    assert engine.render("landing_page", {"goal": "Grow"}) == {"body": "Content draft for landing_page: Grow"}


@pytest.mark.unit
def test_engine_fails_loudly_on_missing_variables() -> None:
    with pytest.raises(ContentTemplateError, match="title_tag body"):
        ContentTemplateEngine().render("title_tag", {})
