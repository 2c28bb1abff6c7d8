"""Functional core - pure journal logic with no I/O."""

from .dates import DateParseError, format_key, is_canonical_key, normalize_date, today_key
from .document import Document, DuplicateSectionError, Section, has_section, section_content
from .groups import (
    DateFailure,
    EntryGroup,
    GroupResolution,
    MalformedGroupError,
    PhraseGroup,
    canonicalize_groups,
    parse_phrase_groups,
)
from .segmenter import fallback_phrase_groups, fallback_summarize, segment
from .conflicts import ConflictReport, affected_dates, detect_conflicts, existing_dates, preview
from .merge import EngineInvariantViolation, append, overwrite_selected

__all__ = [
    # Dates
    "DateParseError",
    "format_key",
    "is_canonical_key",
    "normalize_date",
    "today_key",
    # Document
    "Document",
    "DuplicateSectionError",
    "Section",
    "has_section",
    "section_content",
    # Groups
    "DateFailure",
    "EntryGroup",
    "GroupResolution",
    "MalformedGroupError",
    "PhraseGroup",
    "canonicalize_groups",
    "parse_phrase_groups",
    # Segmenter
    "fallback_phrase_groups",
    "fallback_summarize",
    "segment",
    # Conflicts
    "ConflictReport",
    "affected_dates",
    "detect_conflicts",
    "existing_dates",
    "preview",
    # Merge
    "EngineInvariantViolation",
    "append",
    "overwrite_selected",
]
