"""Contribution metrics: counts by role and contribution type."""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field
from rich.table import Table

from ..ai.models import AnalysisRecord
from ..github_client.models import ContributionType, Role


class ContributionMetrics(BaseModel):
    """Tally of accepted analyses.

    Every role and contribution type is present, with zero counts where
    nothing was found, so two tallies of the same records always compare
    equal.
    """

    by_role_and_type: dict[str, dict[str, int]] = Field(
        default_factory=dict, description="role -> contribution type -> count"
    )
    by_role: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    total: int = 0


def aggregate_metrics(records: Iterable[AnalysisRecord]) -> ContributionMetrics:
    """Count records by role x contribution type.

    Args:
        records: Accepted analyses, in any order

    Returns:
        ContributionMetrics with the full matrix, both marginals and the total
    """
    pairs = Counter(
        (Role(r.role).value, ContributionType(r.contribution_type).value)
        for r in records
    )

    matrix = {
        role.value: {
            ctype.value: pairs[(role.value, ctype.value)] for ctype in ContributionType
        }
        for role in Role
    }

    return ContributionMetrics(
        by_role_and_type=matrix,
        by_role={role: sum(counts.values()) for role, counts in matrix.items()},
        by_type={
            ctype.value: sum(matrix[role.value][ctype.value] for role in Role)
            for ctype in ContributionType
        },
        total=sum(pairs.values()),
    )


def format_metrics_table(metrics: ContributionMetrics) -> Table:
    """Render metrics as a role x type table with totals."""
    table = Table(title="Contribution Metrics")
    table.add_column("Role", style="cyan")
    for ctype in ContributionType:
        table.add_column(ctype.value.replace("_", " ").title(), justify="right")
    table.add_column("Total", justify="right", style="green")

    for role in Role:
        counts = metrics.by_role_and_type.get(role.value, {})
        table.add_row(
            role.value.title(),
            *(str(counts.get(ctype.value, 0)) for ctype in ContributionType),
            str(metrics.by_role.get(role.value, 0)),
        )

    table.add_row(
        "Total",
        *(str(metrics.by_type.get(ctype.value, 0)) for ctype in ContributionType),
        str(metrics.total),
        style="bold",
    )
    return table
