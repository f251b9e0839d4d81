"""Render prompt templates in remtool/prompt/promptFiles using pystache.

Templates are plain markdown with mustache tags. Partials may be wrapped in a
```markdown fence so they preview nicely; the fence is stripped before they
are inlined.

Usage:
    python -m remtool.prompt.render_prompt [template_filename] [context.json]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pystache

from ..models import Issue, IssueType

PROMPTS_DIR = Path(__file__).parent / "promptFiles"

SUGGESTION_SYSTEM_TEMPLATE = "suggestion_system_prompt.md"
GENERIC_ISSUE_TEMPLATE = "generic_issue.md"
PAGE_ANALYSIS_SYSTEM_TEMPLATE = "page_analysis_system_prompt.md"
PAGE_ANALYSIS_USER_TEMPLATE = "page_analysis_user_prompt.md"

_TEMPLATE_PARTIALS = {
    SUGGESTION_SYSTEM_TEMPLATE: ["response_format"],
    PAGE_ANALYSIS_SYSTEM_TEMPLATE: ["page_analysis_output_format"],
}

# Issue types with a dedicated user prompt; anything else uses the generic one.
_ISSUE_TEMPLATES = {
    IssueType.MISSING_ALT_TEXT: "missing-alt-text.md",
    IssueType.GENERIC_LINK_TEXT: "generic-link-text.md",
    IssueType.TABLE_STRUCTURE: "table-structure.md",
    IssueType.COMPLEX_TABLE: "complex-table.md",
    IssueType.MISSING_FORM_LABEL: "missing-form-label.md",
    IssueType.HEADING_HIERARCHY: "heading-hierarchy.md",
}


def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


def _strip_code_fences(s: str) -> str:
    """Strip a single leading and trailing code-fence line if present."""
    lines = s.splitlines()
    if not lines:
        return s
    if lines[0].lstrip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].lstrip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _renderer(template_name: str) -> pystache.Renderer:
    partials = {
        name: _strip_code_fences(_read_prompt(f"{name}.md"))
        for name in _TEMPLATE_PARTIALS.get(template_name, [])
    }
    # Prompts are not HTML; keep quotes and ampersands as written.
    return pystache.Renderer(partials=partials, escape=lambda s: s)


def render_template(template_name: str, context: dict[str, Any] | None = None) -> str:
    template = _read_prompt(template_name)
    return _renderer(template_name).render(template, context or {}).strip()


def template_for(issue_type: IssueType) -> str:
    return _ISSUE_TEMPLATES.get(issue_type, GENERIC_ISSUE_TEMPLATE)


def issue_context(issue: Issue) -> dict[str, Any]:
    """Mustache context for an issue; unset fields become empty strings so sections skip."""
    return {
        "type": issue.type.value,
        "page": issue.page,
        "message": issue.message,
        "wcag_criterion": issue.wcag_criterion or "",
        "current_text": issue.current_text or "",
        "url": issue.url or "",
        "heading_text": issue.heading_text or "",
        "field_type": issue.field_type or "",
        "context": issue.recommendation or "",
    }


def render_suggestion_prompt(issue: Issue) -> str:
    """Render the per-issue user prompt used when requesting a suggestion."""
    return render_template(template_for(issue.type), issue_context(issue))


def render_suggestion_system_prompt() -> str:
    return render_template(SUGGESTION_SYSTEM_TEMPLATE)


def render_page_analysis_system_prompt() -> str:
    issue_types = [
        value for value in IssueType.all_values() if value != IssueType.AI_DETECTED.value
    ]
    return render_template(PAGE_ANALYSIS_SYSTEM_TEMPLATE, {"issue_types": issue_types})


def render_page_analysis_user_prompt(page: int, text: str) -> str:
    return render_template(
        PAGE_ANALYSIS_USER_TEMPLATE,
        {"page": page, "text": text.strip() or "(no extractable text)"},
    )


def render_page_analysis_prompts(page: int, text: str) -> tuple[str, str]:
    """Render the system and user prompt pair for a whole-page review.

    Returns:
        (system_prompt, user_prompt)
    """
    return render_page_analysis_system_prompt(), render_page_analysis_user_prompt(page, text)


def _load_context(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


if __name__ == "__main__":
    tpl = sys.argv[1] if len(sys.argv) > 1 else SUGGESTION_SYSTEM_TEMPLATE
    ctx = None
    if len(sys.argv) > 2:
        ctx = _load_context(sys.argv[2])
    print(render_template(tpl, ctx))
