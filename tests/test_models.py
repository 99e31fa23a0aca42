# tests/test_models.py
from datetime import date

import pytest

from modules.sdu_positions.lib.models import Campus, Faculty, Position, ValidationError


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Copenhagen", Campus.COPENHAGEN),
        ("Odense", Campus.ODENSE),
        ("Sønderborg", Campus.SOENDERBORG),
        ("Flere tjenestesteder", Campus.SEVERAL),
        ("Several", Campus.SEVERAL),
    ],
)
def test_campus_from_label(label, expected):
    assert Campus.from_label(label) is expected


def test_campus_display_keeps_non_ascii():
    assert str(Campus.SOENDERBORG) == "Sønderborg"
    assert str(Campus.SEVERAL) == "Several"


def test_unknown_campus_names_the_label():
    with pytest.raises(ValidationError, match="Aarhus"):
        Campus.from_label("Aarhus")


def test_faculty_long_and_short_names():
    f = Faculty.from_label("Faculty of Business and Social Sciences")
    assert f is Faculty.BUSINESS_AND_SOCIAL_SCIENCES
    assert str(f) == "Faculty of Business and Social Sciences"
    assert f.short_name == "Business"
    assert Faculty.from_label("SDU Library").short_name == "Library"
    assert Faculty.CENTRAL_ADMINISTRATION.short_name == "Administration"


def test_every_faculty_has_a_short_name():
    assert all(f.short_name for f in Faculty)


def test_unknown_faculty_is_a_value_error():
    with pytest.raises(ValueError, match="Faculty of Magic"):
        Faculty.from_label("Faculty of Magic")


def test_identity_leaves_out_deadline_and_first_seen():
    p = Position(
        link="https://www.sdu.dk/x",
        title="Postdoc",
        campus=Campus.ODENSE,
        faculty=Faculty.SCIENCE,
        deadline=date(2023, 3, 5),
    )
    assert p.identity() == ("https://www.sdu.dk/x", "Postdoc", "Odense", "Faculty of Science")
    assert p.first_seen is None
