"""Flat-text journal document model - pure, no I/O.

The journal is a single text where a line holding only a date key starts a
section. Parsing keeps every line verbatim, so ``Document.parse(text).to_text()``
returns the original text byte for byte. Lookups scan the sections; the
key-to-index map is rebuilt for every operation rather than stored.
"""

from dataclasses import dataclass, field

from .dates import is_header

ENTRY_PREFIX = "- "


class DuplicateSectionError(ValueError):
    """Raised in strict mode when two sections share a date key."""

    def __init__(self, dates: list[str]):
        self.dates = dates
        super().__init__(f"Duplicate date sections: {', '.join(dates)}")


def is_entry(line: str) -> bool:
    """Entry lines start with the "- " bullet prefix."""
    return line.startswith(ENTRY_PREFIX)


@dataclass
class Section:
    """A date header and every line up to the next header."""

    date: str
    header: str
    lines: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, date: str, entries: list[str]) -> "Section":
        return cls(date=date, header=date, lines=list(entries))

    @property
    def entries(self) -> list[str]:
        return [line for line in self.lines if is_entry(line)]

    def to_lines(self) -> list[str]:
        return [self.header, *self.lines]


@dataclass
class Document:
    """Ordered date sections plus any text before the first header."""

    prologue: list[str] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str, strict: bool = False) -> "Document":
        """
        Parse flat text into sections.

        A line is a header iff its stripped form is a date key. Lines before
        the first header form the prologue, which is never a merge target.
        With strict=True, duplicate headers raise DuplicateSectionError.
        """
        doc = cls()
        if not text:
            return doc

        current: Section | None = None
        for line in text.split("\n"):
            if is_header(line):
                current = Section(date=line.strip(), header=line)
                doc.sections.append(current)
            elif current is None:
                doc.prologue.append(line)
            else:
                current.lines.append(line)

        if strict:
            doc.check_unique()
        return doc

    def to_lines(self) -> list[str]:
        lines = list(self.prologue)
        for section in self.sections:
            lines.extend(section.to_lines())
        return lines

    def to_text(self) -> str:
        """Serialize back to flat text."""
        return "\n".join(self.to_lines())

    def is_empty(self) -> bool:
        return not self.prologue and not self.sections

    def dates(self) -> list[str]:
        """Section keys in document order, duplicates included."""
        return [s.date for s in self.sections]

    def index(self) -> dict[str, int]:
        """Map each key to the position of its first section."""
        positions: dict[str, int] = {}
        for i, section in enumerate(self.sections):
            positions.setdefault(section.date, i)
        return positions

    def find(self, key: str) -> Section | None:
        """First section with the given key."""
        for section in self.sections:
            if section.date == key:
                return section
        return None

    def duplicate_dates(self) -> list[str]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for key in self.dates():
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates

    def check_unique(self) -> None:
        """Raise DuplicateSectionError if any key has more than one section."""
        duplicates = self.duplicate_dates()
        if duplicates:
            raise DuplicateSectionError(duplicates)


def has_section(doc: Document, key: str) -> bool:
    return doc.find(key) is not None


def section_content(doc: Document, key: str) -> list[str]:
    """Body lines of the first section with this key, or [] if absent."""
    section = doc.find(key)
    return list(section.lines) if section else []
