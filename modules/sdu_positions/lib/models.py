from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class ValidationError(ValueError):
    """Raised when a scraped label or cell cannot be turned into a domain value."""


class Campus(Enum):
    """
    SDU campus locations as listed on the open-positions page.
    Values are the canonical display strings.
    """

    COPENHAGEN = "Copenhagen"
    ESBJERG = "Esbjerg"
    KOLDING = "Kolding"
    ODENSE = "Odense"
    SLAGELSE = "Slagelse"
    SOENDERBORG = "Sønderborg"
    SEVERAL = "Several"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> Campus:
        campus = _CAMPUS_LABELS.get(label)
        if campus is None:
            raise ValidationError(f"Campus not known: {label!r}")
        return campus


# Page label -> Campus. Canonical display strings are accepted too.
_CAMPUS_LABELS: dict[str, Campus] = {c.value: c for c in Campus}
_CAMPUS_LABELS["Flere tjenestesteder"] = Campus.SEVERAL


class Faculty(Enum):
    """
    SDU faculties and administrative units. Values are the long display
    strings, which are also the labels used by the page.
    """

    ENGINEERING = "Faculty of Engineering"
    HEALTH_SCIENCES = "Faculty of Health Sciences"
    BUSINESS_AND_SOCIAL_SCIENCES = "Faculty of Business and Social Sciences"
    SCIENCE = "Faculty of Science"
    HUMANITIES = "Faculty of Humanities"
    CENTRAL_ADMINISTRATION = "Central Administration"
    LIBRARY = "SDU Library"

    def __str__(self) -> str:
        return self.value

    @property
    def short_name(self) -> str:
        """Compact name used in feed item titles."""
        return _FACULTY_SHORT[self]

    @classmethod
    def from_label(cls, label: str) -> Faculty:
        try:
            return cls(label)
        except ValueError:
            raise ValidationError(f"Faculty not known: {label!r}") from None


_FACULTY_SHORT: dict[Faculty, str] = {
    Faculty.ENGINEERING: "Engineering",
    Faculty.HEALTH_SCIENCES: "Health",
    Faculty.BUSINESS_AND_SOCIAL_SCIENCES: "Business",
    Faculty.SCIENCE: "Science",
    Faculty.HUMANITIES: "Humanities",
    Faculty.CENTRAL_ADMINISTRATION: "Administration",
    Faculty.LIBRARY: "Library",
}


@dataclass(frozen=True)
class Position:
    """
    One open position from the listings table.

    Identity for dedupe is (link, title, campus, faculty); the deadline is
    left out so an extended deadline keeps the original first-seen date.
    """

    link: str  # absolute URL
    title: str  # whitespace-collapsed
    campus: Campus
    faculty: Faculty
    deadline: date
    first_seen: datetime | None = None  # set by the dedupe pass

    def identity(self) -> tuple[str, str, str, str]:
        return (self.link, self.title, str(self.campus), str(self.faculty))


@dataclass
class ParseResult:
    """
    Result bundle produced by the table parser.
    - positions: every row that fully validated, in document order.
    - skipped: one diagnostic per dropped <tr> (header rows, decoration, bad data).
    """

    positions: list[Position] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
