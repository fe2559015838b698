"""Boundary adapter for the two generation calls: discovery and synthesis.

Discovery is one logical call with two round trips (web search, then a
schema-forced formatting pass). Synthesis is a single schema-forced call.
Both are single-shot and all-or-nothing: any boundary exception or malformed
payload becomes a DiscoveryError/SynthesisError and no partial result leaks out.

Defaults call the OpenAI API and therefore need `OPENAI_API_KEY`, but an
injected client allows offline or preconfigured usage for tests.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import date
from typing import Any, Callable, List, Optional, Sequence

from openai import AsyncOpenAI

from .config import Settings, get_settings
from .errors import DiscoveryError, SynthesisError
from .models import (
    CATEGORY_VALUES,
    NEWSLETTER_TITLE,
    CandidateItem,
    Document,
)
from .schema import (
    DISCOVERY_SCHEMA,
    NEWSLETTER_SCHEMA,
    response_format,
    validate_payload,
)

logger = logging.getLogger(__name__)

REGIONS = ("KSA", "UAE", "Qatar", "South Africa", "Egypt")
SYNOPSIS_LINES = (3, 4)
INSIGHT_POINTS = 3

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


# --- Helpers --------------------------------------------------------------

def build_client(api_key: Optional[str] = None) -> AsyncOpenAI:
    """Create an async OpenAI client; separated for easier testing."""
    return AsyncOpenAI(api_key=api_key)


def _require_api_key(settings: Settings) -> str:
    if not settings.openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY is required. Set it in the environment or .env file."
        )
    return settings.openai_api_key


def _response_text_or_raise(response: object, *, step: str) -> str:
    """Extract response text or raise a clear error when output is missing."""
    text = getattr(response, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text

    status = getattr(response, "status", None)
    if status == "incomplete":
        details = getattr(response, "incomplete_details", None)
        reason = getattr(details, "reason", None) if details else None
        hint = ""
        if reason == "max_output_tokens":
            hint = " Increase MAX_TOKENS or select fewer articles."
        raise RuntimeError(f"{step} response incomplete (reason={reason}).{hint}")

    err = getattr(response, "error", None)
    if err:
        raise RuntimeError(f"{step} response error: {err}")

    raise RuntimeError(f"{step} response missing output text.")


def month_year(day: date) -> str:
    """Render a date the way the newsletter dates itself, e.g. "January 2026"."""
    return day.strftime("%B %Y")


def _new_item_id() -> str:
    return f"article-{uuid.uuid4().hex}"


def _count_points(text: str) -> int:
    """Count lines when the text is multi-line, otherwise sentences."""
    lines = [line.strip(" -•*\t") for line in text.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) > 1:
        return len(lines)
    if not lines:
        return 0
    return len([s for s in _SENTENCE_SPLIT.split(lines[0]) if s.strip()])


def brief_quality_issues(
    document: Document, items: Sequence[CandidateItem] = ()
) -> List[str]:
    """
    List deviations from the requested write-up shape.

    These are quality notes only; a document with issues is still valid.
    """
    issues: List[str] = []
    low, high = SYNOPSIS_LINES
    briefs = document.briefs()
    for brief in briefs:
        synopsis_points = _count_points(brief.synopsis)
        if not low <= synopsis_points <= high:
            issues.append(
                f"{brief.title}: synopsis has {synopsis_points} line(s), "
                f"expected {low}-{high}"
            )
        insight_points = _count_points(brief.strategic_insights)
        if insight_points != INSIGHT_POINTS:
            issues.append(
                f"{brief.title}: strategic insights have {insight_points} point(s), "
                f"expected {INSIGHT_POINTS}"
            )
    covered_urls = {brief.url for brief in briefs}
    covered_titles = {brief.title.strip().lower() for brief in briefs}
    for item in items:
        if item.url not in covered_urls and item.title.strip().lower() not in covered_titles:
            issues.append(f"{item.title}: no write-up in the newsletter")
    return issues


# --- Prompts --------------------------------------------------------------

def discovery_prompt(target_count: int) -> str:
    regions = ", ".join(REGIONS[:-1]) + f", and {REGIONS[-1]}"
    return (
        f"Find exactly {target_count} of the latest news and articles (last 30 days) "
        f"regarding HR and corporate trends in {regions}.\n"
        "Focus on:\n"
        "- Talent trends and workforce shifts in the Middle East and Africa (MEA).\n"
        "- Recent moves at MBB (McKinsey, BCG, Bain) and Big 4 (Deloitte, PwC, EY, KPMG) "
        "in these regions.\n"
        "- New C-suite appointments and labor law changes in the GCC, South Africa, "
        "and Egypt.\n\n"
        f"List details for {target_count} distinct articles including title, source, "
        "publication date, short summary, and URL."
    )


def formatting_prompt(search_text: str, target_count: int) -> str:
    categories = ", ".join(CATEGORY_VALUES)
    return (
        f"Based on these results:\n{search_text}\n\n"
        f"Extract {target_count} distinct articles into a JSON list under `articles`.\n"
        f"Schema: title, source, url, date, snippet, category ({categories}).\n"
        "Ensure the JSON is valid."
    )


def synthesis_prompt(items: Sequence[CandidateItem], generated_date: str) -> str:
    context = "\n\n---\n\n".join(
        f"Title: {item.title}\nSource: {item.source}\n"
        f"Snippet: {item.summary}\nLink: {item.url}"
        for item in items
    )
    return (
        "As a Senior HR Lead at Accenture MEA (Middle East & Africa), synthesize these "
        f"{len(items)} articles into a professional newsletter.\n\n"
        f"Articles:\n{context}\n\n"
        "STRICT REQUIREMENTS:\n"
        f'1. Newsletter Title: Must be exactly "{NEWSLETTER_TITLE}".\n'
        "2. For EACH Article in the output:\n"
        "   - Title: Use the article headline.\n"
        "   - Synopsis: Exactly 3 to 4 lines summarizing the core event.\n"
        "   - Strategic Insights for Accenture: Exactly 3 lines (or 3 bullet points) "
        "describing the specific impact or action required for Accenture in the MEA "
        "region (KSA, UAE, Qatar, South Africa, Egypt).\n"
        f'3. GeneratedDate: Must be exactly "{generated_date}".\n\n'
        "Structure the newsletter with a Title, Executive Intro, logical Sections "
        "grouping these articles, and a Conclusion."
    )


# --- Payload shaping ------------------------------------------------------

def parse_discovery_payload(
    text: str, id_factory: Callable[[], str] = _new_item_id
) -> List[CandidateItem]:
    """Parse the formatter output into candidate items with fresh local ids."""
    data: Any = json.loads(text)
    if isinstance(data, list):
        data = {"articles": data}
    validate_payload(data, DISCOVERY_SCHEMA)
    return [
        CandidateItem.model_validate({**record, "id": id_factory()})
        for record in data["articles"]
    ]


def parse_newsletter_payload(text: str) -> Document:
    """Parse the synthesis output into a Document; raises ValueError when malformed."""
    data: Any = json.loads(text)
    validate_payload(data, NEWSLETTER_SCHEMA)
    document = Document.from_wire(data)
    if document.title != NEWSLETTER_TITLE:
        logger.warning(
            "Synthesis returned title %r; using %r", document.title, NEWSLETTER_TITLE
        )
        document = document.model_copy(update={"title": NEWSLETTER_TITLE})
    return document


# --- Client ---------------------------------------------------------------

class ContentClient:
    """Issues discovery and synthesis requests and shapes their results."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        *,
        settings: Optional[Settings] = None,
        id_factory: Callable[[], str] = _new_item_id,
        today: Callable[[], date] = date.today,
    ):
        self._client = client
        self._settings = settings or get_settings()
        self._id_factory = id_factory
        self._today = today

    @property
    def settings(self) -> Settings:
        return self._settings

    def _active_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = build_client(_require_api_key(self._settings))
        return self._client

    async def discover(self) -> List[CandidateItem]:
        """Return freshly discovered candidates; raises DiscoveryError on any failure."""
        settings = self._settings
        target = settings.discovery_target_count
        try:
            client = self._active_client()
            search = await client.responses.create(
                model=settings.discovery_model,
                input=discovery_prompt(target),
                tools=[{"type": "web_search"}],
            )
            search_text = _response_text_or_raise(search, step="Discovery search")
            shaped = await client.responses.create(
                model=settings.formatter_model,
                input=[
                    {
                        "role": "system",
                        "content": "You convert research notes into strict JSON.",
                    },
                    {"role": "user", "content": formatting_prompt(search_text, target)},
                ],
                text={"format": response_format(DISCOVERY_SCHEMA)},
                temperature=0.0,
            )
            shaped_text = _response_text_or_raise(shaped, step="Discovery formatting")
            items = parse_discovery_payload(shaped_text, self._id_factory)
        except Exception as exc:
            logger.error("Discovery failed: %s", exc)
            raise DiscoveryError() from exc

        if len(items) != target:
            logger.info("Discovery returned %d item(s); requested %d", len(items), target)
        return items

    async def synthesize(self, items: Sequence[CandidateItem]) -> Document:
        """Write the newsletter for ``items``; raises SynthesisError on any failure."""
        if not items:
            raise SynthesisError("Select articles before generating a newsletter.")
        settings = self._settings
        generated_date = month_year(self._today())
        request_kwargs: dict[str, Any] = {
            "model": settings.synthesis_model,
            "input": synthesis_prompt(items, generated_date),
            "text": {"format": response_format(NEWSLETTER_SCHEMA)},
            "temperature": settings.temperature,
        }
        if settings.max_tokens and settings.max_tokens > 0:
            request_kwargs["max_output_tokens"] = settings.max_tokens
        try:
            client = self._active_client()
            response = await client.responses.create(**request_kwargs)
            text = _response_text_or_raise(response, step="Synthesis")
            document = parse_newsletter_payload(text)
        except Exception as exc:
            logger.error("Synthesis failed: %s", exc)
            raise SynthesisError() from exc

        for issue in brief_quality_issues(document, items):
            logger.warning("Newsletter quality: %s", issue)
        return document
