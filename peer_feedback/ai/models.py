"""Pydantic models for AI analysis responses."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..github_client.locator import is_github_url
from ..github_client.models import ContributionType, Role

Importance = Literal["high", "medium", "low"]
QualityLevel = Literal["excellent", "good", "adequate", "needs_improvement", "n/a"]
Complexity = Literal["high", "medium", "low", "n/a"]
Alignment = Literal["strong", "moderate", "weak"]
Sentiment = Literal["positive", "concerning"]


class ImpactAnalysis(BaseModel):
    """What the contribution changed and how much it mattered."""

    summary: str = Field(description="Plain-sentence summary of impact")
    importance: Importance = Field(description="Overall importance of the work")


class TechnicalQualityAnalysis(BaseModel):
    """Assessment of the technical side of a contribution."""

    applicable: bool = Field(
        description="False when the contribution has no technical content "
        "(e.g. a process discussion)"
    )
    analysis: str = Field(description="Assessment of the technical work")
    complexity: Complexity = Field(description="Technical complexity")
    quality: QualityLevel = Field(description="Quality of the implementation")
    standards_adherence: QualityLevel = Field(
        description="Adherence to project conventions and best practice"
    )


class CollaborationAnalysis(BaseModel):
    """How the actor worked with others on the contribution."""

    analysis: str = Field(description="Assessment of collaboration")
    communication: QualityLevel = Field(description="Clarity and tone")
    helpfulness: QualityLevel = Field(description="Usefulness to others")


class AlignmentAnalysis(BaseModel):
    """Fit between the contribution and the actor's role."""

    analysis: str = Field(description="How the work relates to the role")
    alignment: Alignment = Field(description="Strength of alignment with the role")


class ContributionAnalysis(BaseModel):
    """Structured judgment of one contribution, as produced by the agent."""

    model_config = ConfigDict(extra="forbid")

    role: Role = Field(description="The actor's role in this contribution")
    impact: ImpactAnalysis
    technical_quality: TechnicalQualityAnalysis
    collaboration: CollaborationAnalysis
    alignment_with_goals: AlignmentAnalysis
    referenced_urls: list[str] = Field(
        default_factory=list,
        description="github.com links cited as evidence. Only include URLs "
        "that appear in the contribution.",
    )

    @field_validator("referenced_urls")
    @classmethod
    def validate_referenced_urls(cls, v: list[str]) -> list[str]:
        """Only github.com links may be referenced."""
        foreign = [url for url in v if not is_github_url(url)]
        if foreign:
            raise ValueError(f"referenced_urls must be github.com links: {foreign}")
        return v


class AnalysisRecord(ContributionAnalysis):
    """An accepted analysis together with the contribution it describes."""

    user: str = Field(description="GitHub login of the analysed actor")
    url: str = Field(description="URL of the contribution")
    contribution_type: ContributionType
    owner: str
    repo: str
    number: int


class StandoutContribution(BaseModel):
    """A contribution singled out in the executive summary."""

    url: str = Field(description="URL of one of the analysed contributions")
    contribution_type: ContributionType
    reason: str = Field(description="Why this contribution stands out")
    sentiment: Sentiment = Field(
        description="'positive' for exemplary work, 'concerning' for work "
        "that shows a growth area"
    )


class ExecutiveSummary(BaseModel):
    """Run-level synthesis of all accepted analyses."""

    model_config = ConfigDict(extra="forbid")

    user: str = Field(description="GitHub login of the analysed actor")
    role_summary: str = Field(description="How the actor operated in their role")
    metrics_summary: str = Field(description="Narrative reading of the metrics")
    high_level_performance_summary: str = Field(
        description="Overall performance in a short paragraph"
    )
    key_strengths: list[str] = Field(
        min_length=2, max_length=2, description="Exactly two strengths"
    )
    areas_for_improvement: list[str] = Field(
        min_length=2, max_length=2, description="Exactly two growth areas"
    )
    standout_contributions: list[StandoutContribution] = Field(
        min_length=1,
        max_length=3,
        description="One to three contributions; include both a positive and "
        "a concerning one when both kinds exist",
    )
