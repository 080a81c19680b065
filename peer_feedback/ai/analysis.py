"""Core analysis logic: prompt formatting and agent invocation."""

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.exceptions import UnexpectedModelBehavior

from ..errors import OutputValidationError
from ..github_client.models import (
    ContributionDetail,
    DiscussionDetail,
    GitHubComment,
    PullRequestDetail,
    Role,
)
from .agents import contribution_analysis_agent, executive_summary_agent
from .models import AnalysisRecord, ContributionAnalysis, ExecutiveSummary, Sentiment

if TYPE_CHECKING:
    from ..pipeline.metrics import ContributionMetrics

logger = logging.getLogger(__name__)

# Diffs beyond this many characters per file are cut before prompting
MAX_PATCH_CHARS = 2000


def _format_comments(comments: list[GitHubComment]) -> str:
    return "\n".join(f"**Comment by {c.author}:**\n{c.body}\n" for c in comments)


def _format_pull_request(detail: PullRequestDetail) -> str:
    reviews = []
    for review in detail.reviews:
        inline = "\n".join(
            f"  - {c.path}:{c.line if c.line is not None else '?'} {c.body}"
            for c in review.comments
        )
        reviews.append(
            f"**Review by {review.author} ({review.state}):**\n{review.body}\n{inline}"
        )

    commits = []
    for commit in detail.commits:
        files = []
        for changed in commit.changed_files:
            entry = f"  - {changed.path} (+{changed.additions}/-{changed.deletions})"
            if changed.patch:
                patch = changed.patch[:MAX_PATCH_CHARS]
                if len(changed.patch) > MAX_PATCH_CHARS:
                    patch += "\n[... diff truncated ...]"
                entry += f"\n```diff\n{patch}\n```"
            files.append(entry)
        first_line = commit.message.splitlines()[0] if commit.message else ""
        header = f"**{commit.oid[:7]}** by {commit.author}: {first_line}"
        commits.append("\n".join([header, *files]))

    return f"""
**Reviews:**
{chr(10).join(reviews) or "No reviews"}

**Commits:**
{chr(10).join(commits) or "No commits"}
"""


def _format_discussion(detail: DiscussionDetail) -> str:
    if detail.answer is None:
        answer_text = "No accepted answer"
    else:
        replies = _format_comments(detail.answer.replies)
        answer_text = (
            f"**Answer by {detail.answer.author}:**\n{detail.answer.body}\n\n"
            f"{replies or 'No replies'}"
        )

    return f"""
**Category:** {detail.category or "none"}

**Answered:** {"yes" if detail.is_answered else "no"}

**Accepted answer:**
{answer_text}
"""


def format_contribution_prompt(
    actor: str, role: Role, detail: ContributionDetail, role_description: str
) -> str:
    """Format a contribution into a prompt for analysis.

    Args:
        actor: GitHub login of the person being analysed
        role: The actor's role in the contribution
        detail: Full contribution detail
        role_description: Description of the actor's job role

    Returns:
        Formatted prompt string
    """
    if isinstance(detail, PullRequestDetail):
        type_specific = _format_pull_request(detail)
    elif isinstance(detail, DiscussionDetail):
        type_specific = _format_discussion(detail)
    else:
        type_specific = ""

    return f"""
**PERSON:** {actor}

**ROLE IN THIS CONTRIBUTION:** {Role(role).value}

**JOB ROLE DESCRIPTION:**
{role_description}

**CONTRIBUTION ({detail.type}):**

**Title:** {detail.title}

**URL:** {detail.url}

**Repository:** {detail.owner}/{detail.repo}

**State:** {detail.state}

**Author:** {detail.author}

**Labels:** {detail.labels}

**Description:**
{detail.body or "No description"}

**Comments:**
{_format_comments(detail.comments) or "No comments available"}
{type_specific}
**ANALYSIS TASK:** Analyse {actor}'s part in this contribution.
"""


def format_summary_prompt(
    actor: str,
    analyses: list[AnalysisRecord],
    role_description: str,
    metrics: "ContributionMetrics",
) -> str:
    """Format all accepted analyses into the executive summary prompt."""
    payload = {
        "user": actor,
        "roleDescription": role_description,
        "metrics": metrics.model_dump(mode="json"),
        "analyses": [a.model_dump(mode="json") for a in analyses],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def classify_sentiment(record: ContributionAnalysis) -> Sentiment | None:
    """Classify which way an analysis leans, if it clearly leans at all.

    Any "needs_improvement" rating or weak alignment makes a record
    concerning; otherwise high importance, strong alignment or an excellent
    rating makes it positive.
    """
    ratings = [
        record.technical_quality.quality,
        record.technical_quality.standards_adherence,
        record.collaboration.communication,
        record.collaboration.helpfulness,
    ]
    weak = record.alignment_with_goals.alignment == "weak"
    if weak or "needs_improvement" in ratings:
        return "concerning"
    if (
        record.impact.importance == "high"
        or record.alignment_with_goals.alignment == "strong"
        or "excellent" in ratings
    ):
        return "positive"
    return None


def validate_executive_summary(
    summary: ExecutiveSummary, analyses: list[AnalysisRecord]
) -> ExecutiveSummary:
    """Check cross-field rules the schema alone cannot express.

    Raises:
        OutputValidationError: If a standout cites an unknown URL, or the
            standouts miss a leaning that the analyses contain
    """
    known_urls = {a.url for a in analyses}
    unknown = [s.url for s in summary.standout_contributions if s.url not in known_urls]
    if unknown:
        raise OutputValidationError(
            f"Standout contributions cite URLs that were not analysed: {unknown}"
        )

    leanings = {classify_sentiment(a) for a in analyses} - {None}
    if leanings == {"positive", "concerning"}:
        chosen = {s.sentiment for s in summary.standout_contributions}
        missing = sorted(leanings - chosen)
        if missing:
            raise OutputValidationError(
                f"Standout contributions must include a {missing[0]} example"
            )

    return summary


class _AgentRunner:
    def __init__(
        self,
        agent: Agent[None, Any],
        model: Any = None,
        model_settings: dict[str, Any] | None = None,
    ):
        """Initialize the runner.

        Args:
            agent: PydanticAI agent to run
            model: Optional model override (name or Model instance)
            model_settings: Optional model settings override
        """
        self.agent = agent
        self.model = model
        self.model_settings = model_settings

    def _run_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.model:
            kwargs["model"] = self.model
        if self.model_settings:
            kwargs["model_settings"] = self.model_settings
        return kwargs


class ContributionAnalyzer(_AgentRunner):
    """Runs the per-contribution analysis agent."""

    def __init__(
        self,
        agent: Agent[None, ContributionAnalysis] = contribution_analysis_agent,
        model: Any = None,
        model_settings: dict[str, Any] | None = None,
    ):
        super().__init__(agent, model, model_settings)

    async def analyze(
        self,
        actor: str,
        role: Role,
        detail: ContributionDetail,
        role_description: str,
    ) -> AnalysisRecord:
        """Analyse one contribution.

        Raises:
            OutputValidationError: If the agent output does not fit the schema
        """
        prompt = format_contribution_prompt(actor, role, detail, role_description)

        try:
            result = await self.agent.run(prompt, **self._run_kwargs())
            analysis = result.output
            return AnalysisRecord(
                **analysis.model_dump(),
                user=actor,
                url=detail.url,
                contribution_type=detail.type,
                owner=detail.owner,
                repo=detail.repo,
                number=detail.number,
            )
        except (UnexpectedModelBehavior, ValidationError) as e:
            raise OutputValidationError(
                f"Analysis output for {detail.url} did not match the schema: {e}"
            ) from e


class ExecutiveSummarizer(_AgentRunner):
    """Runs the run-level executive summary agent."""

    def __init__(
        self,
        agent: Agent[None, ExecutiveSummary] = executive_summary_agent,
        model: Any = None,
        model_settings: dict[str, Any] | None = None,
    ):
        super().__init__(agent, model, model_settings)

    async def summarize(
        self,
        actor: str,
        analyses: list[AnalysisRecord],
        role_description: str,
        metrics: "ContributionMetrics",
    ) -> ExecutiveSummary:
        """Summarise all accepted analyses for an actor.

        Raises:
            OutputValidationError: If the output fails schema or cross-field checks
        """
        prompt = format_summary_prompt(actor, analyses, role_description, metrics)

        try:
            result = await self.agent.run(prompt, **self._run_kwargs())
        except UnexpectedModelBehavior as e:
            raise OutputValidationError(
                f"Executive summary output did not match the schema: {e}"
            ) from e

        summary = result.output.model_copy(update={"user": actor})
        logger.debug(
            "Executive summary cites %d standouts", len(summary.standout_contributions)
        )
        return validate_executive_summary(summary, analyses)
