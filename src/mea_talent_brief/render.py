"""Markdown rendering for candidates and newsletters."""

from __future__ import annotations

from typing import Iterable, List

from .models import CandidateItem, Document


def split_lines(text: str) -> List[str]:
    lines: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped[0] in "-•–—*":
            stripped = stripped.lstrip("-•–—* ").strip()
        lines.append(stripped)
    return lines


def format_candidate(index: int, item: CandidateItem, *, selected: bool = False) -> str:
    """Render one candidate as a numbered line plus its snippet."""
    marker = "[x]" if selected else "[ ]"
    date_text = f", {item.published_date}" if item.published_date else ""
    header = f"{index:>2}. {marker} {item.title} ({item.source}{date_text}) [{item.category.value}]"
    return f"{header}\n      {item.summary}" if item.summary else header


def format_candidates(items: Iterable[CandidateItem], selected: Iterable[str] = ()) -> str:
    chosen = set(selected)
    return "\n".join(
        format_candidate(idx, item, selected=item.id in chosen)
        for idx, item in enumerate(items, start=1)
    )


def format_markdown(document: Document) -> str:
    """
    Render the newsletter as Markdown.

    Sections are numbered 01, 02, ...; strategic insights are rendered as a
    bullet list, one bullet per line of the model output.
    """
    lines = [
        f"# {document.title}",
        f"_{document.generated_date}_",
        "",
        document.intro,
    ]
    for idx, section in enumerate(document.sections, start=1):
        lines.extend(["", f"## {idx:02d}. {section.heading}", "", section.content])
        for brief in section.articles:
            lines.extend(
                [
                    "",
                    f"### [{brief.title}]({brief.url})",
                    f"Source: {brief.source}",
                    "",
                    brief.synopsis,
                    "",
                    "**Strategic Insights for Accenture**",
                ]
            )
            insights = split_lines(brief.strategic_insights) or [""]
            lines.extend(f"- {line}" for line in insights)
    lines.extend(["", "## Closing Strategic Outlook", "", document.conclusion])
    return "\n".join(lines)
