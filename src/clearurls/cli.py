"""Command line interface: clean URLs and refresh the rule list."""

import sys
from pathlib import Path
from typing import List, Optional

import typer

from clearurls.cleaner import UrlCleaner
from clearurls.config import settings
from clearurls.exceptions import ClearUrlsError
from clearurls.services.rules_fetcher import DEFAULT_HASH_URL, DEFAULT_RULES_URL, download_rules
from clearurls.utils.logging import configure_logging

app = typer.Typer(
    name="clearurls",
    help="Remove tracking parameters from URLs with the ClearURLs rules.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Log to stderr so stdout only carries results."""
    configure_logging(settings.environment, settings.log_level)


@app.command()
def clean(
    urls: Optional[List[str]] = typer.Argument(None, help="URLs to clean; read from stdin when omitted."),
    rules: Optional[Path] = typer.Option(
        None,
        "--rules",
        "-r",
        help="Rules file to use instead of the bundled one.",
        dir_okay=False,
    ),
    strip_referral_marketing: bool = typer.Option(
        False,
        "--strip-referral-marketing",
        help="Also drop referral and affiliate parameters.",
    ),
) -> None:
    """Print the cleaned form of each URL, one per line."""
    try:
        cleaner = UrlCleaner.from_rules_path(rules) if rules else UrlCleaner.from_embedded_rules()
    except ClearUrlsError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    cleaner = cleaner.strip_referral_marketing(strip_referral_marketing)

    inputs = urls or [line.strip() for line in sys.stdin if line.strip()]
    failed = 0
    for url in inputs:
        try:
            typer.echo(cleaner.clear_url(url))
        except ClearUrlsError as exc:
            typer.echo(f"{url}: {exc}", err=True)
            failed += 1
    if failed:
        raise typer.Exit(code=1)


@app.command("update-rules")
def update_rules(
    path: Path = typer.Argument(..., help="Where to save the rules file.", dir_okay=False),
    url: str = typer.Option(DEFAULT_RULES_URL, "--url", help="Rules document to download."),
    hash_url: str = typer.Option(DEFAULT_HASH_URL, "--hash-url", help="Its published SHA-256."),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Check the download against --hash-url."),
) -> None:
    """Download the current ClearURLs rule list to PATH.

    Point CLEARURLS_RULES_PATH at the file to serve it.
    """
    try:
        store = download_rules(path, url, hash_url if verify else None)
    except ClearUrlsError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"saved {len(store.providers)} providers to {path}")


if __name__ == "__main__":
    app()
