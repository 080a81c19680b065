"""Main CLI entry point."""

import typer
from dotenv import load_dotenv
from rich.console import Console

from . import cache
from .analyze import analyze

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="peer-feedback",
    help="GitHub contribution analysis and peer feedback",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


app.command(name="analyze", context_settings={"help_option_names": ["-h", "--help"]})(
    analyze
)
app.add_typer(cache.app, name="cache")


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from peer_feedback import __version__

    console.print(f"Peer Feedback v{__version__}")


if __name__ == "__main__":
    app()
