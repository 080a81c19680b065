"""AI analysis of GitHub contributions."""

from .agents import contribution_analysis_agent, executive_summary_agent
from .analysis import (
    ContributionAnalyzer,
    ExecutiveSummarizer,
    classify_sentiment,
    format_contribution_prompt,
    validate_executive_summary,
)
from .models import AnalysisRecord, ContributionAnalysis, ExecutiveSummary

__all__ = [
    "AnalysisRecord",
    "ContributionAnalysis",
    "ContributionAnalyzer",
    "ExecutiveSummarizer",
    "ExecutiveSummary",
    "classify_sentiment",
    "contribution_analysis_agent",
    "executive_summary_agent",
    "format_contribution_prompt",
    "validate_executive_summary",
]
