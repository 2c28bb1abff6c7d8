"""Merge and selective overwrite of entry groups into a document - pure, no I/O.

Both entry points take a Document and return a new one. The input is never
mutated: work happens on a copy that is only returned once every consistency
check has passed.
"""

import copy
import logging
from collections import Counter

from .dates import is_canonical_key
from .document import ENTRY_PREFIX, Document, Section, is_entry
from .groups import EntryGroup

logger = logging.getLogger(__name__)


class EngineInvariantViolation(RuntimeError):
    """Raised when a merge would break the document's structure."""

    pass


def append(doc: Document, groups: list[EntryGroup], strict: bool = False) -> Document:
    """
    Add each group's entries without removing anything.

    A date with no section gets a new section at the end of the document,
    separated from prior content by a blank line. A date that already has a
    section gets its entries at the bottom of that section's leading run of
    entries, ahead of any incidental text or the next header.
    """
    return _apply(doc, groups, overwrite=set(), strict=strict)


def overwrite_selected(
    doc: Document,
    groups: list[EntryGroup],
    dates_to_overwrite: list[str] | set[str],
    strict: bool = False,
) -> Document:
    """
    Replace the bodies of the selected dates, append everything else.

    For a selected date the whole body of its section is replaced by the
    group's entries. A selected date with no section gets a new one, exactly
    as append would create it. With no dates selected this is append.
    """
    return _apply(doc, groups, overwrite=set(dates_to_overwrite), strict=strict)


def _apply(
    doc: Document,
    groups: list[EntryGroup],
    overwrite: set[str],
    strict: bool,
) -> Document:
    if strict:
        doc.check_unique()
    elif doc.duplicate_dates():
        logger.warning(
            f"Document has duplicate sections for {', '.join(doc.duplicate_dates())}; "
            "only the first of each is updated"
        )

    prepared = _prepare(groups)
    result = copy.deepcopy(doc)
    overwritten: set[str] = set()

    for group in prepared:
        if not group.entries:
            continue
        # A second group for an already-overwritten date adds to the new body
        if group.date in overwrite and group.date not in overwritten:
            _overwrite_group(result, group)
            overwritten.add(group.date)
        else:
            _append_group(result, group)

    _verify(doc, result)
    return result


def _prepare(groups: list[EntryGroup]) -> list[EntryGroup]:
    """Check group shape and return copies with "- " prefixed entries."""
    prepared = []
    for group in groups:
        if not is_canonical_key(group.date):
            raise EngineInvariantViolation(f"Group date is not a canonical key: {group.date!r}")

        entries = []
        for entry in group.entries:
            if not isinstance(entry, str):
                raise EngineInvariantViolation(f"Entry is not a string: {entry!r}")
            if "\n" in entry or "\r" in entry:
                raise EngineInvariantViolation(f"Entry spans multiple lines: {entry!r}")
            entries.append(entry if is_entry(entry) else f"{ENTRY_PREFIX}{entry}")

        prepared.append(EntryGroup(date=group.date, entries=entries))
    return prepared


def _insertion_point(lines: list[str]) -> int:
    """Index just past the last entry of the leading entry-or-blank run."""
    end = 0
    while end < len(lines) and (is_entry(lines[end]) or not lines[end].strip()):
        end += 1
    # Blank lines closing the run stay after the new entries
    while end > 0 and not lines[end - 1].strip():
        end -= 1
    return end


def _last_line(doc: Document) -> str | None:
    if doc.sections:
        section = doc.sections[-1]
        return section.lines[-1] if section.lines else section.header
    if doc.prologue:
        return doc.prologue[-1]
    return None


def _add_section(doc: Document, group: EntryGroup) -> None:
    last = _last_line(doc)
    section = Section.new(group.date, group.entries)

    if last is not None and last.strip():
        # Separate from prior content by one blank line
        if doc.sections:
            doc.sections[-1].lines.append("")
        else:
            doc.prologue.append("")
    elif last == "":
        # Text ended with a newline: that line now separates, keep one at the end
        section.lines.append("")

    doc.sections.append(section)
    logger.debug(f"Added section {group.date} with {len(group.entries)} entries")


def _append_group(doc: Document, group: EntryGroup) -> None:
    position = doc.index().get(group.date)
    if position is None:
        _add_section(doc, group)
        return

    section = doc.sections[position]
    at = _insertion_point(section.lines)
    section.lines[at:at] = group.entries
    logger.debug(f"Appended {len(group.entries)} entries to {group.date}")


def _overwrite_group(doc: Document, group: EntryGroup) -> None:
    position = doc.index().get(group.date)
    if position is None:
        _add_section(doc, group)
        return

    section = doc.sections[position]
    logger.debug(f"Overwriting {len(section.lines)} lines under {group.date}")
    section.lines = list(group.entries)


def _verify(before: Document, after: Document) -> None:
    """Check the result re-parses to itself and kept existing sections in place."""
    reparsed = Document.parse(after.to_text())
    if reparsed.dates() != after.dates():
        raise EngineInvariantViolation("Merged text contains a header inside a section body")
    if reparsed != after:
        raise EngineInvariantViolation("Merged document does not round-trip through its text")

    if after.dates()[: len(before.sections)] != before.dates():
        raise EngineInvariantViolation("Existing sections were reordered or removed")

    counts_before = Counter(before.dates())
    for key, count in Counter(after.dates()).items():
        if count > max(counts_before[key], 1):
            raise EngineInvariantViolation(f"Merge created a duplicate section for {key}")
