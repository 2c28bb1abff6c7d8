"""Conflict detection between incoming entries and the document - pure, no I/O."""

from dataclasses import dataclass, field
from datetime import date

from .dates import today_key
from .document import Document, has_section, is_entry
from .groups import EntryGroup


@dataclass
class ConflictReport:
    """What an incoming set of groups would touch, shown before committing."""

    affected: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    preview: dict[str, list[str]] = field(default_factory=dict)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.existing)


def affected_dates(
    groups: list[EntryGroup] | None,
    as_of: date | None = None,
) -> list[str]:
    """
    Canonical keys the groups would touch, deduplicated in group order.

    groups=None means a single ungrouped utterance, which only touches today.
    """
    if groups is None:
        return [today_key(as_of)]

    keys: list[str] = []
    for group in groups:
        if group.date not in keys:
            keys.append(group.date)
    return keys


def existing_dates(doc: Document, affected: list[str]) -> list[str]:
    """The subset of affected keys that already have a section, in order."""
    return [key for key in affected if has_section(doc, key)]


def preview(doc: Document, dates: list[str]) -> dict[str, list[str]]:
    """
    Current content of each requested section, for "what would be lost".

    Shows the entry lines; a section without entry lines shows its non-blank
    lines instead. Keys without a section are left out.
    """
    result: dict[str, list[str]] = {}
    for key in dates:
        section = doc.find(key)
        if section is None:
            continue
        entries = [line.strip() for line in section.lines if is_entry(line.strip())]
        if not entries:
            entries = [line.strip() for line in section.lines if line.strip()]
        result[key] = entries
    return result


def detect_conflicts(
    doc: Document,
    groups: list[EntryGroup] | None,
    as_of: date | None = None,
) -> ConflictReport:
    """Build the full conflict report for a pending merge."""
    affected = affected_dates(groups, as_of)
    existing = existing_dates(doc, affected)
    return ConflictReport(
        affected=affected,
        existing=existing,
        preview=preview(doc, existing),
    )
