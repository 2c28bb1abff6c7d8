"""Heuristic bullet segmentation for the fallback summarizer - pure, no I/O.

Used when no LLM is available. The output has the same shape as the LLM
summarizer (short phrases grouped by date), so the merge engine cannot tell
the two paths apart.
"""

import re

from .groups import PhraseGroup

SPLITTER = re.compile(r"\.(?:\s|$)|;|,?\s*\b(?:and then|then)\s+", re.IGNORECASE)

# Tried in order, first match wins. Only one opener is stripped per piece.
FILLER_PREFIXES = [
    re.compile(r"^I\s+", re.IGNORECASE),
    re.compile(r"^I'm\s+", re.IGNORECASE),
    re.compile(r"^I\s+went\s+and\s+", re.IGNORECASE),
    re.compile(r"^I\s+had\s+", re.IGNORECASE),
    re.compile(r"^I\s+was\s+", re.IGNORECASE),
    re.compile(r"^I\s+did\s+", re.IGNORECASE),
    re.compile(r"^then\s+I\s+", re.IGNORECASE),
    re.compile(r"^and\s+I\s+", re.IGNORECASE),
    re.compile(r"^so\s+I\s+", re.IGNORECASE),
    re.compile(r"^after\s+that\s+I\s+", re.IGNORECASE),
]

TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")

MIN_WORDS = 3
MAX_WORDS = 15
MAX_BULLETS = 5

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

DATE_MENTION = re.compile(
    r"\b(?:"
    r"\d{1,2}[/-]\d{1,2}(?:[/-]\d{4})?"
    rf"|{_MONTH}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s+\d{{4}})?"
    r"|(?:last\s+)?(?:mon|tues|wednes|thurs|fri|satur|sun)day"
    r"|yesterday|today"
    r")\b",
    re.IGNORECASE,
)


def split_into_bullets(text: str) -> list[str]:
    """Split an utterance on sentence ends, semicolons and "then" connectives."""
    return [piece.strip() for piece in SPLITTER.split(text) if piece and piece.strip()]


def clean_bullet(bullet: str) -> str:
    """Strip one filler opener, capitalize, drop trailing punctuation."""
    cleaned = bullet.strip().lstrip(",;: ")

    for prefix in FILLER_PREFIXES:
        stripped = prefix.sub("", cleaned, count=1)
        if stripped != cleaned:
            cleaned = stripped
            break

    if cleaned:
        cleaned = cleaned[0].upper() + cleaned[1:]

    cleaned = TRAILING_PUNCTUATION.sub("", cleaned)
    return cleaned.strip()


def segment(utterance: str) -> list[str]:
    """Split an utterance into cleaned, non-empty bullets in input order."""
    bullets = (clean_bullet(piece) for piece in split_into_bullets(utterance))
    return [b for b in bullets if b]


def fallback_summarize(text: str) -> list[str]:
    """
    Summarize without an LLM.

    Keeps bullets of at least MIN_WORDS words, truncates anything longer than
    MAX_WORDS words and returns at most MAX_BULLETS bullets.
    """
    phrases = []
    for bullet in segment(text):
        words = bullet.split()
        if len(words) < MIN_WORDS:
            continue
        phrases.append(" ".join(words[:MAX_WORDS]))
    return phrases[:MAX_BULLETS]


def find_date_mentions(text: str) -> list[re.Match]:
    """Locate date expressions spoken inside an utterance."""
    return list(DATE_MENTION.finditer(text))


def fallback_phrase_groups(text: str) -> list[PhraseGroup]:
    """
    Group an utterance by the dates mentioned in it.

    Each date mention owns the text up to the next mention. Text before the
    first mention belongs to the first mention. With no mentions at all the
    whole utterance is filed under today. Dates are left as spoken; they are
    resolved later by canonicalize_groups. Groups without usable phrases are
    dropped.
    """
    mentions = find_date_mentions(text)
    if not mentions:
        phrases = fallback_summarize(text)
        return [PhraseGroup(date="today", phrases=phrases)] if phrases else []

    groups = []
    for i, mention in enumerate(mentions):
        end = mentions[i + 1].start() if i + 1 < len(mentions) else len(text)
        chunk = text[mention.end():end]
        if i == 0:
            chunk = f"{text[:mention.start()]} {chunk}"

        phrases = fallback_summarize(chunk)
        if phrases:
            groups.append(PhraseGroup(date=mention.group(0), phrases=phrases))

    return groups
