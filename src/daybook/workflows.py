"""Shared workflow layer between the CLI and the core.

Loading and saving the journal, summarizing an utterance into entry groups,
and committing them. The core never touches storage; these functions own the
latest document text and persist it after each successful operation.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from .adapters.file_store import FileBlobStore
from .adapters.openai_chat import OpenAIChatService
from .config import DATA_DIR, Config
from .core.conflicts import ConflictReport, detect_conflicts
from .core.document import Document
from .core.groups import (
    DateFailure,
    EntryGroup,
    canonicalize_groups,
    resolve_failure_as_today,
)
from .core.merge import append, overwrite_selected
from .ports.llm_service import LLMService
from .summarizer import Summary, summarize

logger = logging.getLogger(__name__)


def get_store(config: Config) -> FileBlobStore:
    """Resolve the blob store directory from config."""
    if config.data_dir:
        return FileBlobStore(Path(config.data_dir).expanduser())
    return FileBlobStore(DATA_DIR)


def get_llm(config: Config) -> OpenAIChatService | None:
    """LLM summarizer, or None when no API key is configured."""
    if not config.openai_api_key:
        return None
    return OpenAIChatService(
        api_key=config.openai_api_key,
        model=config.openai_model,
        base_url=config.openai_base_url,
        timeout=config.llm_timeout,
    )


def load_journal(config: Config) -> str:
    """Load the journal text. A missing journal is an empty one."""
    data = get_store(config).get(config.storage_key)
    if data is None:
        return ""
    return data.decode("utf-8")


def save_journal(config: Config, text: str) -> None:
    get_store(config).put(config.storage_key, text.encode("utf-8"))


def clear_journal(config: Config) -> None:
    get_store(config).delete(config.storage_key)


@dataclass
class PendingEntry:
    """A summarized utterance waiting for the caller's merge decision."""

    summary: Summary
    groups: list[EntryGroup] = field(default_factory=list)
    failures: list[DateFailure] = field(default_factory=list)
    report: ConflictReport = field(default_factory=ConflictReport)


def prepare_entry(
    text: str,
    document_text: str,
    llm: LLMService | None = None,
    as_of: date | None = None,
    strict: bool = False,
) -> PendingEntry:
    """Summarize an utterance and report which existing dates it would touch."""
    summary = summarize(text, llm, as_of)
    resolution = canonicalize_groups(summary.groups, as_of)
    doc = Document.parse(document_text, strict=strict)
    return PendingEntry(
        summary=summary,
        groups=resolution.resolved,
        failures=resolution.failures,
        report=detect_conflicts(doc, resolution.resolved, as_of),
    )


def file_failures_under_today(
    pending: PendingEntry,
    failures: list[DateFailure],
    document_text: str,
    as_of: date | None = None,
) -> PendingEntry:
    """Add groups with unparseable dates under today and refresh the report."""
    groups = [EntryGroup(date=g.date, entries=list(g.entries)) for g in pending.groups]
    by_key = {g.date: g for g in groups}

    for failure in failures:
        group = resolve_failure_as_today(failure, as_of)
        if group.date in by_key:
            by_key[group.date].entries.extend(group.entries)
        else:
            by_key[group.date] = group
            groups.append(group)

    filed = {id(f) for f in failures}
    remaining = [f for f in pending.failures if id(f) not in filed]
    doc = Document.parse(document_text)
    return PendingEntry(
        summary=pending.summary,
        groups=groups,
        failures=remaining,
        report=detect_conflicts(doc, groups, as_of),
    )


def commit_entry(
    document_text: str,
    groups: list[EntryGroup],
    overwrite: list[str] | None = None,
    strict: bool = False,
) -> str:
    """Merge groups into the document text and return the new text."""
    doc = Document.parse(document_text, strict=strict)
    if overwrite:
        logger.info(f"Overwriting {', '.join(overwrite)}")
        merged = overwrite_selected(doc, groups, overwrite, strict=strict)
    else:
        merged = append(doc, groups, strict=strict)
    return merged.to_text()
