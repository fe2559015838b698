"""Data models for the talent brief workflow."""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

NEWSLETTER_TITLE = "MEA Talent Intelligence"


class Category(str, Enum):
    """Fixed category enumeration requested from discovery."""

    TALENT_TREND = "Talent Trend"
    LAYOFFS = "Layoffs"
    C_SUITE = "C-Suite"
    ACQUISITION = "Acquisition"
    LABOR_LAW = "Labor Law"


CATEGORY_VALUES: List[str] = [c.value for c in Category]


class CandidateItem(BaseModel):
    """One discovered news item offered for curation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Locally generated token; never supplied by the model.")
    title: str
    source: str
    url: str
    published_date: str = Field("", alias="date", description="Free-text publication date.")
    summary: str = Field("", alias="snippet")
    category: Category


class ArticleBrief(BaseModel):
    """Synthesized write-up for a single curated item."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    url: str
    source: str
    synopsis: str = Field(..., description="Target 3-4 lines of prose.")
    strategic_insights: str = Field(
        ..., alias="strategicInsights", description="Target exactly 3 lines/points."
    )


class DocumentSection(BaseModel):
    """Thematic grouping of briefs inside the newsletter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    heading: str
    content: str
    articles: List[ArticleBrief] = Field(default_factory=list)


class Document(BaseModel):
    """The synthesized newsletter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = NEWSLETTER_TITLE
    intro: str
    sections: List[DocumentSection] = Field(default_factory=list)
    conclusion: str
    generated_date: str = Field(..., alias="generatedDate")

    def to_wire(self) -> Dict[str, Any]:
        """Return the camelCase JSON form shared with the model and share links."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Document":
        return cls.model_validate(data)

    def briefs(self) -> List[ArticleBrief]:
        return [brief for section in self.sections for brief in section.articles]
