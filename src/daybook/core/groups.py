"""Phrase groups and the summarizer payload boundary - pure, no I/O.

Summarizer output is duck-typed JSON. It is validated here into strict
PhraseGroup values, then canonicalized into EntryGroup values that the merge
engine consumes. Malformed groups are filtered out and logged, never passed on.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date

from .dates import DateParseError, normalize_date, today_key
from .document import ENTRY_PREFIX

logger = logging.getLogger(__name__)


class MalformedGroupError(ValueError):
    """Raised when a summarizer payload has no usable group structure at all."""

    pass


@dataclass
class PhraseGroup:
    """Summarizer output for one date, before the date is normalized."""

    date: str | None
    phrases: list[str] = field(default_factory=list)


@dataclass
class EntryGroup:
    """Entries for one canonical date, ready for the merge engine."""

    date: str
    entries: list[str] = field(default_factory=list)


@dataclass
class DateFailure:
    """A group whose date expression could not be normalized."""

    group: PhraseGroup
    error: DateParseError


@dataclass
class GroupResolution:
    """Result of canonicalizing phrase groups."""

    resolved: list[EntryGroup] = field(default_factory=list)
    failures: list[DateFailure] = field(default_factory=list)


def to_entry(phrase: str) -> str:
    """Format a phrase as a single-line "- " entry."""
    text = " ".join(phrase.split())
    if text.startswith(ENTRY_PREFIX):
        text = text[len(ENTRY_PREFIX):]
    return f"{ENTRY_PREFIX}{text}"


def _clean_phrases(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [p.strip() for p in raw if isinstance(p, str) and p.strip()]


def parse_phrase_groups(payload: str | dict | list) -> list[PhraseGroup]:
    """
    Validate a summarizer payload into phrase groups.

    Accepts a JSON string, an object with a "dateSections" list, or a bare
    list of groups. Each group needs a "phrases" (or "events") list; non-string
    and blank phrases are discarded and groups left empty are dropped. A
    missing or null date is kept as None so the caller can substitute today.

    Raises MalformedGroupError if the payload has no group list at all.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedGroupError(f"Summary is not valid JSON: {e}") from e

    if isinstance(payload, dict):
        sections = payload.get("dateSections")
    else:
        sections = payload

    if not isinstance(sections, list):
        raise MalformedGroupError("Summary has no dateSections list")

    groups = []
    for item in sections:
        if not isinstance(item, dict):
            logger.warning(f"Discarding malformed group: {item!r}")
            continue

        raw_phrases = item.get("phrases", item.get("events"))
        phrases = _clean_phrases(raw_phrases)
        if not phrases:
            logger.warning(f"Discarding group with no usable phrases: {item!r}")
            continue

        raw_date = item.get("date")
        if raw_date is not None and not isinstance(raw_date, str):
            raw_date = str(raw_date)
        if raw_date is not None and not raw_date.strip():
            raw_date = None

        groups.append(PhraseGroup(date=raw_date, phrases=phrases))

    return groups


def canonicalize_groups(
    groups: list[PhraseGroup],
    as_of: date | None = None,
) -> GroupResolution:
    """
    Normalize each group's date and turn its phrases into entries.

    A missing date becomes today's key. A present but unparseable date is
    reported as a DateFailure and left out of the resolved groups. Groups that
    resolve to the same key are merged in first-seen order.
    """
    as_of = as_of or date.today()
    resolution = GroupResolution()
    by_key: dict[str, EntryGroup] = {}

    for group in groups:
        if group.date is None:
            key = today_key(as_of)
        else:
            try:
                key = normalize_date(group.date, as_of)
            except DateParseError as e:
                logger.warning(f"Could not parse date {group.date!r}: {e}")
                resolution.failures.append(DateFailure(group=group, error=e))
                continue

        entries = [to_entry(p) for p in group.phrases if p.strip()]
        if not entries:
            continue

        if key in by_key:
            by_key[key].entries.extend(entries)
        else:
            by_key[key] = EntryGroup(date=key, entries=entries)
            resolution.resolved.append(by_key[key])

    return resolution


def resolve_failure_as_today(
    failure: DateFailure,
    as_of: date | None = None,
) -> EntryGroup:
    """Explicitly file a group with an unparseable date under today."""
    logger.warning(
        f"Filing entries with unparsed date {failure.group.date!r} under today"
    )
    return EntryGroup(
        date=today_key(as_of),
        entries=[to_entry(p) for p in failure.group.phrases if p.strip()],
    )
