import asyncio
import json
import logging
from datetime import date

import pytest

from mea_talent_brief.config import Settings
from mea_talent_brief.content_client import (
    ContentClient,
    brief_quality_issues,
    month_year,
    parse_discovery_payload,
)
from mea_talent_brief.errors import DiscoveryError, SynthesisError
from mea_talent_brief.models import Category, NEWSLETTER_TITLE

from conftest import (
    FakeOpenAI,
    FakeResponse,
    build_document,
    discovery_records,
    make_candidates,
)


def _client(fake, **kwargs) -> ContentClient:
    return ContentClient(
        fake,
        settings=Settings(),
        today=lambda: date(2026, 10, 19),
        **kwargs,
    )


def test_discover_runs_search_then_formatting_and_assigns_ids():
    fake = FakeOpenAI(
        FakeResponse("1. Headline 0 - Arabian Business ..."),
        FakeResponse(json.dumps({"articles": discovery_records(15)})),
    )

    items = asyncio.run(_client(fake).discover())

    assert len(items) == 15
    assert len({item.id for item in items}) == 15
    assert items[1].category is Category.LABOR_LAW
    assert items[0].published_date == "2026-10-01"
    assert items[0].summary == "Snippet 0"

    search_call, format_call = fake.responses.calls
    assert search_call["tools"] == [{"type": "web_search"}]
    assert "KSA, UAE, Qatar, South Africa, and Egypt" in search_call["input"]
    assert "exactly 15" in search_call["input"]
    assert format_call["text"]["format"]["type"] == "json_schema"
    assert "Headline 0 - Arabian Business" in format_call["input"][1]["content"]


def test_discover_accepts_bare_array_and_any_count():
    fake = FakeOpenAI(
        FakeResponse("notes"),
        FakeResponse(json.dumps(discovery_records(4))),
    )

    items = asyncio.run(_client(fake).discover())

    assert [item.title for item in items] == [f"Headline {i}" for i in range(4)]


def test_discover_ids_come_from_factory():
    counter = iter(range(100))
    fake = FakeOpenAI(
        FakeResponse("notes"),
        FakeResponse(json.dumps(discovery_records(2))),
    )

    items = asyncio.run(_client(fake, id_factory=lambda: f"id-{next(counter)}").discover())

    assert [item.id for item in items] == ["id-0", "id-1"]


@pytest.mark.parametrize(
    "outputs",
    [
        [RuntimeError("network down")],
        [FakeResponse("notes"), RuntimeError("timeout")],
        [FakeResponse("notes"), FakeResponse("not json")],
        [FakeResponse("")],
        [FakeResponse("notes"), FakeResponse(json.dumps({"articles": [{"title": "x"}]}))],
    ],
)
def test_discover_failures_raise_discovery_error(outputs):
    fake = FakeOpenAI(*outputs)

    with pytest.raises(DiscoveryError):
        asyncio.run(_client(fake).discover())


def test_discover_rejects_unknown_category():
    records = discovery_records(3)
    records[2]["category"] = "Sports"
    fake = FakeOpenAI(FakeResponse("notes"), FakeResponse(json.dumps(records)))

    with pytest.raises(DiscoveryError) as excinfo:
        asyncio.run(_client(fake).discover())
    assert "category" in str(excinfo.value.__cause__)


def test_discover_without_api_key_raises_discovery_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    client = ContentClient(settings=Settings(_env_file=None))

    with pytest.raises(DiscoveryError):
        asyncio.run(client.discover())


def test_synthesize_parses_document_and_sends_requirements(newsletter_json):
    fake = FakeOpenAI(FakeResponse(newsletter_json))
    items = make_candidates(7)

    document = asyncio.run(_client(fake).synthesize(items))

    assert document == build_document()
    prompt = fake.responses.calls[0]["input"]
    assert f'"{NEWSLETTER_TITLE}"' in prompt
    assert '"October 2026"' in prompt
    assert "synthesize these 7 articles" in prompt
    for item in items:
        assert f"Link: {item.url}" in prompt


def test_synthesize_forces_constant_title():
    payload = json.dumps(build_document(title="Weekly HR Roundup").to_wire())
    fake = FakeOpenAI(FakeResponse(payload))

    document = asyncio.run(_client(fake).synthesize(make_candidates(7)))

    assert document.title == NEWSLETTER_TITLE


@pytest.mark.parametrize(
    "output",
    [
        RuntimeError("quota exceeded"),
        FakeResponse("{}"),
        FakeResponse("not json at all"),
        FakeResponse(json.dumps([1, 2, 3])),
        FakeResponse("", status="incomplete"),
    ],
)
def test_synthesize_failures_raise_synthesis_error(output):
    fake = FakeOpenAI(output)

    with pytest.raises(SynthesisError):
        asyncio.run(_client(fake).synthesize(make_candidates(7)))


def test_synthesize_rejects_empty_selection():
    fake = FakeOpenAI()

    with pytest.raises(SynthesisError):
        asyncio.run(_client(fake).synthesize([]))
    assert fake.responses.calls == []


def test_synthesize_logs_quality_issues_without_failing(newsletter_json, caplog):
    fake = FakeOpenAI(FakeResponse(newsletter_json))

    with caplog.at_level(logging.WARNING, logger="mea_talent_brief.content_client"):
        document = asyncio.run(_client(fake).synthesize(make_candidates(7)))

    assert document.title == NEWSLETTER_TITLE
    assert "no write-up in the newsletter" in caplog.text


def test_brief_quality_issues_accepts_target_shapes(sample_document):
    assert brief_quality_issues(sample_document) == []


def test_brief_quality_issues_flags_short_insights(sample_document):
    brief = sample_document.sections[0].articles[0]
    short = brief.model_copy(update={"strategic_insights": "Only one point."})
    section = sample_document.sections[0].model_copy(update={"articles": [short]})
    document = sample_document.model_copy(update={"sections": [section]})

    issues = brief_quality_issues(document)

    assert issues == [f"{brief.title}: strategic insights have 1 point(s), expected 3"]


def test_month_year():
    assert month_year(date(2026, 1, 5)) == "January 2026"


def test_parse_discovery_payload_requires_articles_key():
    with pytest.raises(ValueError):
        parse_discovery_payload(json.dumps({"items": []}))
