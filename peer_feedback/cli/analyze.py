"""CLI command for analysing a person's GitHub contributions."""

import asyncio
import logging
from pathlib import Path

import typer
from github.GithubException import GithubException
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..ai.analysis import ContributionAnalyzer, ExecutiveSummarizer
from ..config import PipelineConfig
from ..errors import PeerFeedbackError
from ..github_client.client import GitHubClient
from ..github_client.search import ContributionSearcher
from ..pipeline.metrics import format_metrics_table
from ..pipeline.orchestrator import ContributionPipeline, RunResult
from ..storage.cache import AnalysisCache, DetailCache
from ..utils.date_parser import (
    format_datetime_for_github,
    parse_date_input,
    validate_date_range,
)
from .options import (
    CACHE_DIR_OPTION,
    DEBUG_OPTION,
    END_DATE_OPTION,
    LIMIT_OPTION,
    MODEL_OPTION,
    ORGANIZATION_OPTION,
    OUTPUT_PATH_OPTION,
    ROLE_DESCRIPTION_OPTION,
    START_DATE_OPTION,
    TOKEN_OPTION,
    USER_OPTION,
)

console = Console()


def configure_logging(debug: bool) -> None:
    """Send library logs through rich; DEBUG when requested, else INFO."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=debug)],
        force=True,
    )
    # PyGithub and the HTTP stack are noisy at DEBUG
    for name in ("github", "urllib3", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)


def build_pipeline(
    config: PipelineConfig, model: str, cache_dir: str
) -> ContributionPipeline:
    """Wire the client, caches and AI collaborators into a pipeline."""
    client = GitHubClient(
        token=config.github_token,
        min_interval=config.min_request_interval,
    )
    return ContributionPipeline(
        searcher=ContributionSearcher(client),
        fetcher=client,
        detail_cache=DetailCache(cache_dir),
        analysis_cache=AnalysisCache(cache_dir),
        analyzer=ContributionAnalyzer(model=model),
        summarizer=ExecutiveSummarizer(model=model),
        max_attempts=config.max_attempts,
        retry_backoff=config.retry_backoff,
    )


def analyze(
    organization: str = ORGANIZATION_OPTION,
    user: str = USER_OPTION,
    start_date: str = START_DATE_OPTION,
    end_date: str = END_DATE_OPTION,
    role_description: Path = ROLE_DESCRIPTION_OPTION,
    output_path: Path | None = OUTPUT_PATH_OPTION,
    model: str | None = MODEL_OPTION,
    token: str | None = TOKEN_OPTION,
    cache_dir: str | None = CACHE_DIR_OPTION,
    limit: int | None = LIMIT_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Analyse a person's contributions to an organization.

    Searches issues, pull requests and discussions the person authored,
    reviewed or commented on in the date range, analyses each one and
    writes an executive summary.

    Examples:
        peer-feedback analyze -o acme -u octocat -s 2024-01-01 -e 2024-03-31 \\
            -r roles/backend-senior.md

        # Save the full result as JSON
        peer-feedback analyze -o acme -u octocat -s 2024-01-01 -e 2024-03-31 \\
            -r roles/staff.md -p results/octocat.json
    """
    try:
        config = PipelineConfig()
        if token:
            config.github_token = token
        config.validate()
    except PeerFeedbackError as e:
        console.print(f"[red]❌ Configuration error: {e}[/red]")
        raise typer.Exit(1)

    configure_logging(debug or config.debug)

    # Date parameter validation
    try:
        start_dt = parse_date_input(start_date)
        end_dt = parse_date_input(end_date)
        validate_date_range(start_dt, end_dt)
    except ValueError as e:
        console.print(f"[red]❌ Date validation error: {e}[/red]")
        raise typer.Exit(1)

    try:
        role_text = role_description.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]❌ Could not read role description: {e}[/red]")
        raise typer.Exit(1)
    if not role_text:
        console.print(
            f"[red]❌ Role description file {role_description} is empty[/red]"
        )
        raise typer.Exit(1)

    model_name = model or config.model
    cache_path = cache_dir or config.cache_dir
    start = format_datetime_for_github(start_dt)
    end = format_datetime_for_github(end_dt)

    params_table = Table(title="Analysis Parameters")
    params_table.add_column("Parameter", style="cyan")
    params_table.add_column("Value", style="green")
    params_table.add_row("Organization", organization)
    params_table.add_row("User", user)
    params_table.add_row("Role Description", str(role_description))
    params_table.add_row("Date Range", f"{start} .. {end}")
    params_table.add_row("Model", model_name)
    params_table.add_row("Cache", cache_path)
    if limit is not None:
        params_table.add_row("Limit", str(limit))
    console.print(params_table)

    try:
        pipeline = build_pipeline(config, model_name, cache_path)
        result = asyncio.run(
            pipeline.run(
                organization, user, start, end, role_text, limit=limit
            )
        )
    except (PeerFeedbackError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)
    except GithubException as e:
        console.print(f"[red]❌ GitHub API error: {e}[/red]")
        raise typer.Exit(1)

    print_result(result)

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"💾 Saved run result to {output_path}")


def print_result(result: RunResult) -> None:
    """Show metrics, skipped contributions and the executive summary."""
    console.print(
        f"✅ Found {len(result.contributions)} contributions, "
        f"analysed {len(result.analyses)}"
    )
    console.print(format_metrics_table(result.metrics))

    if result.skipped:
        skipped_table = Table(title="Skipped Contributions")
        skipped_table.add_column("Contribution", style="cyan")
        skipped_table.add_column("Phase", style="magenta")
        skipped_table.add_column("Cause", style="red")
        for skipped in result.skipped:
            skipped_table.add_row(skipped.url, skipped.phase.value, skipped.cause)
        console.print(skipped_table)

    summary = result.executive_summary
    if summary is None:
        console.print("[yellow]No contributions were analysed; no summary.[/yellow]")
        return

    console.print(f"\n[bold]Executive summary for {summary.user}[/bold]")
    console.print(f"\n[cyan]Role:[/cyan] {summary.role_summary}")
    console.print(f"\n[cyan]Metrics:[/cyan] {summary.metrics_summary}")
    console.print(
        f"\n[cyan]Performance:[/cyan] {summary.high_level_performance_summary}"
    )

    console.print("\n[green]Key strengths[/green]")
    for strength in summary.key_strengths:
        console.print(f"  • {strength}")

    console.print("\n[yellow]Areas for improvement[/yellow]")
    for area in summary.areas_for_improvement:
        console.print(f"  • {area}")

    console.print("\n[bold]Standout contributions[/bold]")
    for standout in summary.standout_contributions:
        marker = "👍" if standout.sentiment == "positive" else "⚠️"
        console.print(f"  {marker} {standout.url}\n     {standout.reason}")
