"""
growth-autopilot: content templates per content type

File: src/growth_autopilot/content/templates.py
Last updated: 2026-10-19

Purpose
- Jinja2 templates for each draft part (headline, subject line, body, CTA)
  of every supported content type.

Functional requirements
- Rendering is deterministic and fails loudly on unknown variables.
- Multi-line bodies are trimmed; short-form bodies are cut to their length limit.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from jinja2 import Environment, StrictUndefined, TemplateError


class ContentTemplateError(RuntimeError):
    """Raised when a content template cannot be rendered."""


@dataclass(frozen=True, slots=True)
class ContentTemplate:
    body: str
    headline: str | None = None
    subject_line: str | None = None
    cta: str | None = None
    multiline: bool = False
    max_length: int | None = None


_FIRST_GOAL_LOWER = "first_goal | lower if first_goal is not none else"

CONTENT_TEMPLATES: Final[dict[str, ContentTemplate]] = {
    "landing_page": ContentTemplate(
        headline="The {{ primary_keyword }} That {{ first_goal if first_goal is not none else 'Solves Your Problem' }}",
        body="""
{% if first_pain %}Tired of {{ first_pain | lower }}?{% else %}Looking for a better solution?{% endif %}

{{ features[:3] | bullets }}

{{ style_guide }}

{{ goal }}
""",
        cta="Start Your Free Trial",
        multiline=True,
    ),
    "onboarding_email": ContentTemplate(
        subject_line="Welcome! Let's {{ " + _FIRST_GOAL_LOWER + " 'get you started' }}",
        body="""
Hi there,

Welcome to {{ name }}! We're excited to help you {{ """ + _FIRST_GOAL_LOWER + """ 'achieve your goals' }}.

Here's what you can do first:

{{ features[:3] | numbered }}

{{ style_guide }}

{{ goal }}

The {{ name }} Team
""",
        cta="Get Started Now",
        multiline=True,
    ),
    "changelog_note": ContentTemplate(
        headline="New: {{ features[0] if features else 'Improvements' }} Now Available",
        body="""
We've just shipped {{ features[0] if features else 'exciting updates' }} that help you {{ """
        + _FIRST_GOAL_LOWER
        + """ 'work better' }}.

**What's new:**

{{ features | bullets }}

{{ goal }}
""",
        multiline=True,
    ),
    "meta_description": ContentTemplate(
        body=(
            "{{ name }} helps {{ icp_description }} {{ " + _FIRST_GOAL_LOWER + " 'succeed' }}. "
            "{{ features[0] if features else '' }} {{ primary_keyword }}. {{ style_guide }}"
        ),
        max_length=160,
    ),
    "title_tag": ContentTemplate(
        body="{{ name }} | {{ first_goal if first_goal is not none else primary_keyword }}",
        max_length=60,
    ),
    "og_copy": ContentTemplate(
        headline="{{ name }}: {{ first_goal if first_goal is not none else 'Better Solutions' }}",
        body=(
            "{% if first_pain %}Stop struggling with {{ first_pain | lower }}. {% endif %}"
            "{{ features[0] if features else '' }} {{ primary_keyword }}."
        ),
    ),
    "blog_post": ContentTemplate(
        headline="How to {{ first_goal if first_goal is not none else 'Improve' }} with {{ primary_keyword }}",
        body="""
# {{ headline }}

{% if first_pain %}Many {{ icp_description }} struggle with {{ first_pain | lower }}.{% else %}Finding the right approach matters.{% endif %}

## The Challenge

{{ pain_points[:2] | paragraphs }}

## The Solution

{% for feature in features[:3] %}### {{ feature }}

{{ style_guide }}{% if not loop.last %}

{% endif %}{% endfor %}

## {{ goal }}

Start using {{ name }} today and see the difference.
""",
        multiline=True,
    ),
    "ad_copy": ContentTemplate(
        headline="Stop {{ first_pain if first_pain is not none else 'Wasting Time' }}",
        body=(
            "{{ icp_description }} use {{ name }} to {{ " + _FIRST_GOAL_LOWER + " 'succeed' }}. "
            "{{ features[0] if features else '' }}"
        ),
        cta="Try Free",
    ),
}


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{index}. {item}" for index, item in enumerate(items, start=1))


def _paragraphs(items: Sequence[str]) -> str:
    return "\n\n".join(items)


class ContentTemplateEngine:
    """Renders ``CONTENT_TEMPLATES`` parts against precomputed profile variables."""

    def __init__(self, templates: Mapping[str, ContentTemplate] | None = None) -> None:
        self._templates = dict(CONTENT_TEMPLATES if templates is None else templates)
        self._environment = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=False,
            lstrip_blocks=False,
            newline_sequence="\n",
            keep_trailing_newline=True,
        )
        self._environment.filters["bullets"] = _bullets
        self._environment.filters["numbered"] = _numbered
        self._environment.filters["paragraphs"] = _paragraphs

    def render(self, content_type: str, variables: Mapping[str, object]) -> dict[str, str]:
        """Return the draft parts (``headline``/``subject_line``/``body``/``cta``) that apply."""

        template = self._templates.get(content_type)
        if template is None:
            return {"body": f"Content draft for {content_type}: {variables.get('goal', '')}"}

        draft: dict[str, str] = {}
        context = dict(variables)
        if template.headline is not None:
            draft["headline"] = self._render_part(content_type, "headline", template.headline, context)
            context["headline"] = draft["headline"]
        if template.subject_line is not None:
            draft["subject_line"] = self._render_part(content_type, "subject_line", template.subject_line, context)

        body = self._render_part(content_type, "body", template.body, context)
        if template.multiline:
            body = body.strip()
        if template.max_length is not None:
            body = body[: template.max_length]
        draft["body"] = body

        if template.cta is not None:
            draft["cta"] = template.cta
        return draft

    def _render_part(self, content_type: str, part: str, source: str, context: Mapping[str, object]) -> str:
        try:
            return self._environment.from_string(source).render(**context)
        except TemplateError as exc:
            raise ContentTemplateError(f"failed to render {content_type} {part}: {exc}") from exc


__all__ = ["CONTENT_TEMPLATES", "ContentTemplate", "ContentTemplateEngine", "ContentTemplateError"]
