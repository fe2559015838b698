import json
from typing import List

import pytest

from mea_talent_brief.models import (
    ArticleBrief,
    CandidateItem,
    Category,
    Document,
    DocumentSection,
    NEWSLETTER_TITLE,
)


class FakeResponse:
    def __init__(self, output_text="", status="completed", error=None, incomplete_details=None):
        self.output_text = output_text
        self.status = status
        self.error = error
        self.incomplete_details = incomplete_details


class FakeResponses:
    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        out = self.outputs.pop(0)
        if isinstance(out, Exception):
            raise out
        return out


class FakeOpenAI:
    """Stands in for AsyncOpenAI: exposes `responses.create` returning queued outputs."""

    def __init__(self, *outputs):
        self.responses = FakeResponses(outputs)


def make_candidates(count: int) -> List[CandidateItem]:
    categories = list(Category)
    return [
        CandidateItem(
            id=f"article-{idx}",
            title=f"Headline {idx}",
            source="Gulf News",
            url=f"https://example.com/story-{idx}",
            date="October 2026",
            snippet=f"Snippet {idx}",
            category=categories[idx % len(categories)],
        )
        for idx in range(count)
    ]


def discovery_records(count: int) -> list:
    return [
        {
            "title": f"Headline {idx}",
            "source": "Arabian Business",
            "url": f"https://example.com/news-{idx}",
            "date": "2026-10-0{0}".format(idx % 9 + 1),
            "snippet": f"Snippet {idx}",
            "category": "Labor Law" if idx % 2 else "Talent Trend",
        }
        for idx in range(count)
    ]


def build_document(title: str = NEWSLETTER_TITLE) -> Document:
    return Document(
        title=title,
        intro="Regional hiring momentum continues across the GCC.",
        sections=[
            DocumentSection(
                heading="Workforce Shifts",
                content="Saudisation targets and talent mobility dominate.",
                articles=[
                    ArticleBrief(
                        title="KSA expands Nitaqat quotas",
                        url="https://example.com/nitaqat",
                        source="Arab News",
                        synopsis=(
                            "Saudi Arabia raised localisation quotas.\n"
                            "Private firms have twelve months to comply.\n"
                            "Penalties scale with headcount."
                        ),
                        strategic_insights=(
                            "- Audit Saudi national ratios per unit.\n"
                            "- Accelerate graduate hiring in Riyadh.\n"
                            "- Brief clients on compliance timelines."
                        ),
                    )
                ],
            ),
            DocumentSection(heading="Leadership", content="No moves this month.", articles=[]),
        ],
        conclusion="Expect continued regulatory pressure into Q1.",
        generatedDate="October 2026",
    )


@pytest.fixture
def sample_document() -> Document:
    return build_document()


@pytest.fixture
def newsletter_json(sample_document) -> str:
    return json.dumps(sample_document.to_wire())
