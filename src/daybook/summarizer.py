"""Utterance summarization into date-grouped phrases.

The LLM path asks for JSON grouped by date and validates it at the boundary.
If no LLM is configured, or the call or its output fails, the heuristic
fallback produces the same shape.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from .core.dates import format_key
from .core.groups import MalformedGroupError, PhraseGroup, parse_phrase_groups
from .core.segmenter import fallback_phrase_groups
from .ports.llm_service import LLMService

logger = logging.getLogger(__name__)


@dataclass
class Summary:
    """Summarizer output, ready for canonicalize_groups."""

    groups: list[PhraseGroup] = field(default_factory=list)
    fallback: bool = False
    error: str | None = None
    original_length: int = 0
    summarized_length: int = 0


def build_prompt(text: str, as_of: date | None = None) -> str:
    """Compile the date-aware extraction prompt."""
    as_of = as_of or date.today()
    today = format_key(as_of)
    return f"""You are an expert at synthesizing spoken journal entries into concise bullet points organized by date.

Take the following spoken text and extract key events, activities, and important moments. Organize them by date if dates are mentioned, or use today's date if no specific dates are mentioned.

## Today
{as_of.strftime("%A")}, {today}

## Events
- Focus on concrete actions, events, and outcomes
- Remove filler words, repetitions, and conversational padding
- Combine related activities into single bullet points when appropriate
- Use active voice and clear, journal-style language
- Each bullet should be 3-15 words maximum
- Return 1-5 bullet points per date depending on content richness

## Dates
- Look for mentions like "9/21", "September 21", "yesterday", "last Friday", "on Monday"
- Convert every date to M.D.YYYY with no leading zeros (for example {today})
- If no date is mentioned, use today's date
- Group events under their respective dates, in chronological order when possible

## Spoken text
{text}

Respond with JSON in this exact format:
{{
  "dateSections": [
    {{"date": "{today}", "events": ["event 1", "event 2"]}}
  ]
}}
"""


def _summarized_length(groups: list[PhraseGroup]) -> int:
    return sum(len(" ".join(g.phrases)) for g in groups)


def summarize_fallback(text: str, error: str | None = None) -> Summary:
    """Heuristic summary with no LLM."""
    groups = fallback_phrase_groups(text)
    return Summary(
        groups=groups,
        fallback=True,
        error=error,
        original_length=len(text),
        summarized_length=_summarized_length(groups),
    )


def summarize(
    text: str,
    llm: LLMService | None = None,
    as_of: date | None = None,
) -> Summary:
    """Summarize an utterance, falling back to heuristics when the LLM fails."""
    if llm is None:
        return summarize_fallback(text)

    try:
        raw = llm.generate(build_prompt(text, as_of))
        groups = parse_phrase_groups(raw)
    except (RuntimeError, MalformedGroupError) as e:
        logger.warning(f"LLM summarization unavailable, using basic processing: {e}")
        return summarize_fallback(text, error=str(e))

    return Summary(
        groups=groups,
        original_length=len(text),
        summarized_length=_summarized_length(groups),
    )
