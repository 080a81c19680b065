"""PydanticAI agents for contribution analysis."""

from pydantic_ai import Agent

from .models import ContributionAnalysis, ExecutiveSummary
from .prompts import CONTRIBUTION_ANALYSIS_PROMPT, EXECUTIVE_SUMMARY_PROMPT

# Per-contribution analysis agent - model is supplied at run time
contribution_analysis_agent = Agent(
    output_type=ContributionAnalysis,
    instructions=CONTRIBUTION_ANALYSIS_PROMPT,
    retries=2,
)

# Run-level executive summary agent
executive_summary_agent = Agent(
    output_type=ExecutiveSummary,
    instructions=EXECUTIVE_SUMMARY_PROMPT,
    retries=2,
)
