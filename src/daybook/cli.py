"""Daybook CLI - speech-to-journal bullet log."""

import logging
import sys
from pathlib import Path

import click

from .config import UNPARSED_DATE_POLICIES, load_config
from .core.dates import DateParseError, normalize_date
from .core.document import Document, DuplicateSectionError, section_content
from .core.merge import EngineInvariantViolation
from .workflows import (
    clear_journal,
    commit_entry,
    file_failures_under_today,
    get_llm,
    load_journal,
    prepare_entry,
    save_journal,
)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Daybook - turn spoken notes into a dated bullet journal."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--overwrite", "-o", "overwrite_dates", multiple=True,
              help="Date whose existing entries should be replaced (repeatable)")
@click.option("--append", "append_only", is_flag=True, help="Never overwrite, skip the conflict prompt")
@click.option("--no-llm", is_flag=True, help="Use basic processing instead of the LLM")
@click.option("--unparsed", type=click.Choice(UNPARSED_DATE_POLICIES), default=None,
              help="What to do with groups whose date cannot be understood")
@click.option("--yes", "-y", is_flag=True, help="Do not ask questions")
def add(text: tuple[str, ...], overwrite_dates: tuple[str, ...], append_only: bool,
        no_llm: bool, unparsed: str | None, yes: bool):
    """Record an utterance. Use '-' to read it from stdin."""
    config = load_config()
    utterance = sys.stdin.read() if text == ("-",) else " ".join(text)
    if not utterance.strip():
        click.echo("Nothing to record.")
        return

    try:
        overwrite = [normalize_date(d) for d in overwrite_dates]
    except DateParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    document = load_journal(config)
    llm = None if no_llm else get_llm(config)

    try:
        pending = prepare_entry(utterance, document, llm, strict=config.strict_headers)
    except DuplicateSectionError as e:
        click.echo(f"Error: {e}. Fix the journal or disable STRICT_HEADERS.", err=True)
        sys.exit(1)

    if pending.summary.fallback and pending.summary.error:
        click.echo(f"LLM unavailable, used basic processing ({pending.summary.error})", err=True)

    policy = unparsed or config.unparsed_dates
    if pending.failures:
        to_today = []
        for failure in pending.failures:
            if policy == "today":
                to_today.append(failure)
            elif policy == "ask" and not yes and click.confirm(
                f"Could not understand date {failure.group.date!r}. File under today?"
            ):
                to_today.append(failure)
            else:
                click.echo(f"Skipped entries for unrecognized date {failure.group.date!r}", err=True)
        if to_today:
            pending = file_failures_under_today(pending, to_today, document)

    if not pending.groups:
        click.echo("Nothing to record.")
        return

    report = pending.report
    if report.has_conflicts and not append_only and not overwrite and not yes:
        click.echo("Existing entries for:")
        for key in report.existing:
            click.echo(f"\n{key}")
            for line in report.preview.get(key, []):
                click.echo(f"  {line}")
        click.echo()

        choice = click.prompt(
            "[a]ppend, [o]verwrite selected dates, [c]ancel",
            type=click.Choice(["a", "o", "c"]),
            default="a",
        )
        if choice == "c":
            click.echo("Cancelled.")
            return
        if choice == "o":
            overwrite = [k for k in report.existing if click.confirm(f"Overwrite {k}?")]

    if append_only:
        overwrite = []

    try:
        updated = commit_entry(document, pending.groups, overwrite, strict=config.strict_headers)
    except (EngineInvariantViolation, DuplicateSectionError) as e:
        click.echo(f"Error: {e}. Journal left unchanged.", err=True)
        sys.exit(1)

    save_journal(config, updated)

    for group in pending.groups:
        action = "Replaced" if group.date in overwrite else "Added"
        click.echo(f"{action} {len(group.entries)} entries under {group.date}")
        for entry in group.entries:
            click.echo(f"  {entry}")


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Show only this date")
def show(target_date: str | None):
    """Print the journal."""
    config = load_config()
    document = load_journal(config)

    if not document.strip():
        click.echo("Journal is empty.")
        return

    if target_date is None:
        click.echo(document)
        return

    try:
        key = normalize_date(target_date)
    except DateParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    lines = section_content(Document.parse(document), key)
    if not any(line.strip() for line in lines):
        click.echo(f"No entries for {key}.")
        return

    click.echo(key)
    click.echo("\n".join(lines).rstrip())


@main.command()
@click.argument("expression")
def normalize(expression: str):
    """Show the journal key a date expression resolves to."""
    try:
        click.echo(normalize_date(expression))
    except DateParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
def check():
    """Validate the journal structure."""
    config = load_config()
    doc = Document.parse(load_journal(config))

    duplicates = doc.duplicate_dates()
    click.echo(f"{len(doc.sections)} sections, {sum(len(s.entries) for s in doc.sections)} entries")
    if doc.prologue and any(line.strip() for line in doc.prologue):
        click.echo("Text before the first date header is kept but never updated.")
    if duplicates:
        click.echo(f"Duplicate sections (only the first is updated): {', '.join(duplicates)}", err=True)
        sys.exit(1)


@main.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def export(path: Path):
    """Write the journal to a text file."""
    config = load_config()
    document = load_journal(config)
    path.write_text(document, encoding="utf-8")
    click.echo(f"Journal exported to {path}")


@main.command()
@click.confirmation_option(prompt="Delete the whole journal?")
def clear():
    """Delete the journal."""
    config = load_config()
    clear_journal(config)
    click.echo("Journal cleared.")


if __name__ == "__main__":
    main()
