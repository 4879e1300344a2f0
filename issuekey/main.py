"""issuekey CLI — all commands."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from issuekey.exceptions import IssueKeyError
from issuekey.models import Found, IssueKeyResult, KeyCheck, Source
from issuekey.providers.base import IssueChecker
from issuekey.providers.jira import JiraChecker
from issuekey.resolver import KeyResolver, choose_source
from issuekey.settings import RunnerInputs, get_settings, load_event

app = typer.Typer(help="Find Jira issue keys in a branch, commits or string", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/issuekey/config.toml"),
]

VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]


# ---------------------------------------------------------------------------
# Checker factory
# ---------------------------------------------------------------------------


def get_checker(profile: str | None = None) -> IssueChecker:
    return JiraChecker(get_settings(profile=profile))


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def write_outputs(path: Path, result: IssueKeyResult) -> None:
    """Append issue/issues to the Actions step output file (GITHUB_OUTPUT)."""
    with path.open("a", encoding="utf-8") as fh:
        fh.write(f"issue={result.issue}\n")
        fh.write(f"issues={','.join(result.issues)}\n")


def _describe(result: IssueKeyResult) -> str:
    if len(result.issues) > 1:
        return f"Detected issueKeys: {', '.join(result.issues)}"
    return f"Detected issueKey: {result.issue}"


async def _find(
    checker: IssueChecker,
    string: str | None,
    from_: str | None,
    event_path: Path | None,
) -> IssueKeyResult | None:
    source = choose_source(string, from_)
    # A literal string never needs the event payload
    event = None if source is Source.STRING else load_event(event_path)
    async with checker:
        return await KeyResolver(checker).resolve(source, string=string, event=event)


async def _check_one(checker: IssueChecker, key: str) -> KeyCheck:
    async with checker:
        return await checker.check(key)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("find")
def find(
    string: Annotated[
        str | None,
        typer.Option("--string", "-s", help="Text to scan (defaults to INPUT_STRING)"),
    ] = None,
    from_: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Source when no string is given: branch or commits (INPUT_FROM)"),
    ] = None,
    event_path: Annotated[
        Path | None,
        typer.Option("--event-path", help="GitHub event payload (defaults to GITHUB_EVENT_PATH)"),
    ] = None,
    github_output: Annotated[
        Path | None,
        typer.Option("--github-output", help="Step output file (defaults to GITHUB_OUTPUT)"),
    ] = None,
    profile: ProfileOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Find issue keys and expose them as the issue/issues outputs."""
    _configure_logging(verbose)
    runner = RunnerInputs()
    checker = get_checker(profile)

    try:
        result = asyncio.run(
            _find(
                checker,
                string=string or runner.string,
                from_=from_ or runner.from_,
                event_path=event_path or runner.event_path,
            )
        )
    except IssueKeyError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    if result is None:
        rprint("No issue keys found.")
        return

    rprint(_describe(result))
    output = github_output or runner.github_output
    if output:
        write_outputs(output, result)


@app.command("check")
def check(
    key: Annotated[str, typer.Argument(help="Issue key (e.g. ABC-123)")],
    profile: ProfileOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Check that a single issue exists and print its canonical key."""
    _configure_logging(verbose)
    try:
        outcome = asyncio.run(_check_one(get_checker(profile), key))
    except IssueKeyError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
    if isinstance(outcome, Found):
        rprint(f"[green]✓[/green] [bold]{outcome.key}[/bold]")
        return
    rprint(f"[red]✗ {escape(key)}: {escape(outcome.reason)}[/red]")
    raise typer.Exit(1)


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    try:
        settings = get_settings(profile=profile)
    except (SystemExit, typer.Exit):
        return

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    table = Table(title="issuekey Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("profile", settings.profile or "[dim](not set)[/dim]")
    table.add_row("base_url", settings.base_url or "[dim](not set)[/dim]")
    table.add_row("user_email", settings.user_email or "[dim](not set)[/dim]")
    table.add_row("api_token", mask(settings.api_token.get_secret_value() if settings.api_token else None))
    table.add_row("timeout", f"{settings.timeout:g}s")
    table.add_row("max_concurrency", str(settings.max_concurrency))

    rprint(table)
