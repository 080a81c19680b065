"""Standardized CLI option definitions for consistent shorthand mappings.

This module provides centralized option definitions to ensure consistent
shorthand options across all commands and prevent future drift.
"""

import typer

# Core options - identify whose work is analysed
ORGANIZATION_OPTION = typer.Option(
    ..., "--organization", "-o", help="GitHub organization to search"
)

USER_OPTION = typer.Option(..., "--user", "-u", help="GitHub login to analyse")

USER_OPTION_OPTIONAL = typer.Option(
    None, "--user", "-u", help="GitHub login whose analyses are affected"
)

START_DATE_OPTION = typer.Option(
    ..., "--start-date", "-s", help="Start of the date range (YYYY-MM-DD)"
)

END_DATE_OPTION = typer.Option(
    ..., "--end-date", "-e", help="End of the date range (YYYY-MM-DD)"
)

ROLE_DESCRIPTION_OPTION = typer.Option(
    ...,
    "--role-description",
    "-r",
    exists=True,
    dir_okay=False,
    readable=True,
    help="File describing the person's job role, used to judge alignment",
)

# Output options
OUTPUT_PATH_OPTION = typer.Option(
    None, "--output-path", "-p", help="Write the full run result as JSON"
)

# AI options
MODEL_OPTION = typer.Option(
    None,
    "--model",
    "-m",
    help="AI model to use (defaults to PEER_FEEDBACK_MODEL or 'openai:gpt-4.1')",
)

# Authentication options
TOKEN_OPTION = typer.Option(
    None, "--token", "-t", help="GitHub API token (defaults to GITHUB_TOKEN env var)"
)

# Configuration options
CACHE_DIR_OPTION = typer.Option(
    None,
    "--cache-dir",
    help="Cache directory (defaults to PEER_FEEDBACK_CACHE_DIR or ./.cache)",
)

LIMIT_OPTION = typer.Option(
    None, "--limit", help="Maximum results per search (checked after each page)"
)

DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")

# Cache filter options
OWNER_OPTION = typer.Option(None, "--owner", help="Repository owner")

REPO_OPTION = typer.Option(None, "--repo", help="Repository name")

TYPE_OPTION = typer.Option(
    None, "--type", help="Contribution type: issue, pull_request or discussion"
)

NUMBER_OPTION = typer.Option(None, "--number", "-n", help="Contribution number")

FORCE_OPTION = typer.Option(
    False, "--force", "-f", help="Clear without confirmation"
)
