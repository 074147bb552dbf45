"""Template-based content drafting against a growth profile."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from growth_autopilot.content.profiles import Profile, ProfileLoader
from growth_autopilot.content.templates import ContentTemplateEngine
from growth_autopilot.domain.ids import DRAFT_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, now_iso8601z

# Content types whose SEO metadata carries a title and description.
_LONG_FORM_TYPES = frozenset({"landing_page", "blog_post"})

_DEFAULT_ENGINE = ContentTemplateEngine()


def template_variables(profile: Profile, goal: str, keywords: Sequence[str], features: Sequence[str]) -> dict[str, Any]:
    icp = profile["icp"]
    primary = profile["keywords"]["primary"]
    return {
        "name": profile["name"],
        "icp_description": icp["description"],
        "pain_points": list(icp["pain_points"]),
        "first_pain": icp["pain_points"][0] if icp["pain_points"] else None,
        "first_goal": icp["goals"][0] if icp["goals"] else None,
        "primary_keyword": keywords[0] if keywords else (primary[0] if primary else "solution"),
        "style_guide": profile["voice"]["style_guide"],
        "features": list(features),
        "goal": goal,
    }


def generate_seo_metadata(content_type: str, profile: Profile, keywords: Sequence[str]) -> dict[str, Any]:
    all_keywords = [*profile["keywords"]["primary"], *keywords]
    if content_type not in _LONG_FORM_TYPES:
        return {"keywords": all_keywords}

    icp = profile["icp"]
    first_goal = icp["goals"][0] if icp["goals"] else None
    title_tail = first_goal if first_goal is not None else (all_keywords[0] if all_keywords else "Solutions")
    goal_phrase = first_goal.lower() if first_goal is not None else "achieve more"
    return {
        "title": f"{profile['name']} | {title_tail}",
        "meta_description": f"{profile['name']} helps {icp['description']} {goal_phrase}. {', '.join(all_keywords[:3])}.",
        "keywords": all_keywords,
    }


def draft_content(
    tenant_context: Mapping[str, str],
    profile_name: str,
    content_type: str,
    goal: str,
    *,
    profile_loader: ProfileLoader,
    keywords: Sequence[str] = (),
    features: Sequence[str] = (),
    target_audience: str | None = None,
    llm_provider: str | None = None,
    variant_count: int = 1,
    engine: ContentTemplateEngine | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> dict[str, Any]:
    """Draft ``content_type`` copy from profile templates; no model is called."""

    profile = profile_loader.load(profile_name)
    keywords = list(keywords)
    features = list(features)
    draft = (engine or _DEFAULT_ENGINE).render(
        content_type, template_variables(profile, goal, keywords, features)
    )

    evidence: list[dict[str, Any]] = [
        {"type": "json_path", "path": "profile", "description": f"Profile: {profile['name']}", "value": profile_name},
        {"type": "json_path", "path": "content_type", "description": f"Content type: {content_type}", "value": content_type},
        {"type": "json_path", "path": "goal", "description": f"Goal: {goal}", "value": goal},
    ]
    if keywords:
        evidence.append(
            {"type": "json_path", "path": "keywords", "description": f"Keywords: {', '.join(keywords)}", "value": len(keywords)}
        )
    if features:
        evidence.append(
            {"type": "json_path", "path": "features", "description": f"Features: {', '.join(features)}", "value": len(features)}
        )

    result: dict[str, Any] = {
        "tenant_id": tenant_context["tenant_id"],
        "project_id": tenant_context["project_id"],
        "id": (id_factory or generate_prefixed_id)(DRAFT_ID_PREFIX),
        "created_at": now_iso8601z(clock),
        "content_type": content_type,
        "profile_used": profile_name,
        "llm_used": False,
        "input_context": {
            "keywords": keywords,
            "features": features,
            "target_audience": target_audience if target_audience is not None else profile["icp"]["description"],
            "goal": goal,
        },
        "draft": draft,
        "seo_metadata": generate_seo_metadata(content_type, profile, keywords),
        "variant_count": variant_count,
        "evidence": evidence,
    }
    if llm_provider is not None:
        result["llm_provider"] = llm_provider
    return result


def draft_content_with_llm(
    tenant_context: Mapping[str, str],
    profile_name: str,
    content_type: str,
    goal: str,
    *,
    llm_provider: str,
    profile_loader: ProfileLoader,
    **options: Any,
) -> dict[str, Any]:
    """Placeholder for model-assisted drafting: templates plus the provider marker."""

    draft = draft_content(
        tenant_context,
        profile_name,
        content_type,
        goal,
        profile_loader=profile_loader,
        llm_provider=llm_provider,
        **options,
    )
    draft["llm_used"] = True
    return draft


__all__ = ["draft_content", "draft_content_with_llm", "generate_seo_metadata", "template_variables"]
