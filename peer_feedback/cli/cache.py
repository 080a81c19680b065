"""CLI commands for inspecting and clearing the local caches."""

import typer
from rich.console import Console
from rich.table import Table

from ..config import PipelineConfig
from ..errors import PeerFeedbackError
from ..github_client.models import ContributionType
from ..storage.cache import AnalysisCache, DetailCache
from .options import (
    CACHE_DIR_OPTION,
    FORCE_OPTION,
    NUMBER_OPTION,
    OWNER_OPTION,
    REPO_OPTION,
    TYPE_OPTION,
    USER_OPTION_OPTIONAL,
)

console = Console()
app = typer.Typer(
    help="Inspect and clear cached contributions and analyses",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command()
def status(cache_dir: str | None = CACHE_DIR_OPTION) -> None:
    """Show cache status and statistics."""
    cache_path = cache_dir or PipelineConfig().cache_dir
    console.print("📊 Cache Status")

    detail_stats = DetailCache(cache_path).stats()
    analysis_stats = AnalysisCache(cache_path).stats()

    stats_table = Table(title="Cache Statistics")
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", style="green")

    stats_table.add_row("Cached Contributions", str(detail_stats["total_entries"]))
    stats_table.add_row(
        "Contribution Cache Size", f"{detail_stats['total_size_mb']} MB"
    )
    stats_table.add_row("Cached Analyses", str(analysis_stats["total_entries"]))
    stats_table.add_row("Analysis Cache Size", f"{analysis_stats['total_size_mb']} MB")
    stats_table.add_row("Analysed Users", ", ".join(analysis_stats["actors"]) or "-")
    stats_table.add_row("Cache Path", cache_path)

    console.print(stats_table)

    # Repository breakdown
    if detail_stats["repositories"]:
        repo_table = Table(title="Contributions by Repository")
        repo_table.add_column("Repository", style="cyan")
        repo_table.add_column("Count", justify="right", style="green")

        for repo, count in sorted(detail_stats["repositories"].items()):
            repo_table.add_row(repo, str(count))

        console.print(repo_table)
    else:
        console.print("No contributions found in cache.")


@app.command()
def clear(
    owner: str | None = OWNER_OPTION,
    repo: str | None = REPO_OPTION,
    type: ContributionType | None = TYPE_OPTION,
    number: int | None = NUMBER_OPTION,
    user: str | None = USER_OPTION_OPTIONAL,
    cache_dir: str | None = CACHE_DIR_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Clear cached contributions, and a user's analyses of them.

    Filters narrow from the outside in: --owner, then --repo, then --type,
    then --number.

    Examples:
        peer-feedback cache clear --owner acme --repo widgets
        peer-feedback cache clear --owner acme --repo widgets --type issue \\
            --number 42 --user octocat
    """
    cache_path = cache_dir or PipelineConfig().cache_dir
    scope = "/".join(
        str(part)
        for part in (owner, repo, type.value if type else None, number)
        if part is not None
    )

    if not force and not typer.confirm(
        f"Clear cached entries for {scope or 'everything'}?"
    ):
        console.print("Cancelled.")
        raise typer.Exit(0)

    try:
        removed = DetailCache(cache_path).clear(owner, repo, type, number)
        console.print(f"🗑️  Removed {removed} cached contributions")
        if user:
            analyses = AnalysisCache(cache_path, actor=user).clear(
                owner, repo, type, number
            )
            console.print(f"🗑️  Removed {analyses} cached analyses for {user}")
    except (PeerFeedbackError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)
