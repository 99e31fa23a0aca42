"""
Parser for the SDU open-positions table.

The page's `tbody.list` holds one <tr> per position:

    <tr>
      <td><a href="/en/service/ledige_stillinger/1234">Title</a></td>
      <td>Faculty of Science</td>
      <td>Odense</td>
      <td>2023-March-05</td>
    </tr>

Conversion is strict and positional. A row that doesn't fit is dropped and a
reason is kept in ParseResult.skipped; only a document that can't be parsed
at all raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime

from bs4 import BeautifulSoup, Comment, NavigableString, PageElement, Tag
from bs4.builder import ParserRejectedMarkup

from .models import Campus, Faculty, ParseResult, Position, ValidationError
from .utils import collapse_ws

log = logging.getLogger(__name__)

DEADLINE_FORMAT = "%Y-%B-%d"  # e.g. 2023-March-05


class StructuralParseError(Exception):
    """The input could not be parsed as an HTML document at all."""


class RowValidationError(ValidationError):
    """A single <tr> does not have the expected shape or content."""


# ---- Public API -------------------------------------------------------------


def parse_table(html: str | bytes, domain_root: str) -> ParseResult:
    """
    Parse the listings HTML and convert every <tr> into a Position.

    Args:
        html: table markup (a full document or just the tbody's inner HTML)
        domain_root: prefix for relative links, e.g. "https://www.sdu.dk"

    Returns:
        ParseResult with valid positions in document order (first_seen unset)
        and one diagnostic per skipped row.

    Raises:
        StructuralParseError: if the markup is not text or is rejected by the parser.
    """
    soup = _parse_document(html)

    result = ParseResult()
    for index, tr in enumerate(iter_rows(soup)):
        try:
            result.positions.append(parse_row(tr, domain_root))
        except RowValidationError as e:
            log.debug("Skipping row %d: %s", index, e)
            result.skipped.append(f"row {index}: {e}")
    return result


def iter_rows(node: Tag) -> Iterator[Tag]:
    """
    Post-order walk over element nodes: children are fully explored before the
    node itself is tested, so rows of nested tables come out before their
    enclosing row.
    """
    for child in node.children:
        if isinstance(child, Tag):
            yield from iter_rows(child)
    if node.name == "tr":
        yield node


def parse_row(tr: Tag, domain_root: str) -> Position:
    """
    Convert one <tr> into a Position.

    Raises:
        RowValidationError: on any missing cell, wrong node kind, unknown
        label or malformed deadline.
    """
    cells = _significant_children(tr)
    if len(cells) < 4:
        raise RowValidationError(f"expected 4 cells, found {len(cells)}")
    for i, cell in enumerate(cells[:4]):
        if not isinstance(cell, Tag):
            raise RowValidationError(f"cell {i} is not an element")

    link, title = _link_and_title(cells[0])

    faculty_label = _label(_cell_text(cells[1]).replace("&amp;", ""))
    campus_label = _label(_cell_text(cells[2]))
    deadline = _deadline(_cell_text(cells[3]))

    try:
        faculty = Faculty.from_label(faculty_label)
        campus = Campus.from_label(campus_label)
    except ValidationError as e:
        raise RowValidationError(str(e)) from e

    return Position(
        link=absolute_link(link, domain_root),
        title=title,
        campus=campus,
        faculty=faculty,
        deadline=deadline,
    )


def absolute_link(href: str, domain_root: str) -> str:
    """Prefix root-relative links with the domain root; pass anything else through."""
    if href.startswith("/"):
        return f"{domain_root.rstrip('/')}{href}"
    return href


# ---- Internal utilities -----------------------------------------------------


def _parse_document(html: str | bytes) -> BeautifulSoup:
    if isinstance(html, bytes):
        try:
            html = html.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StructuralParseError(f"HTML is not valid UTF-8: {e}") from e
    if not isinstance(html, str):
        raise StructuralParseError(f"expected HTML text, got {type(html).__name__}")
    try:
        # html.parser keeps bare <tr> fragments that are not wrapped in <table>
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise StructuralParseError(f"HTML could not be parsed: {e}") from e


def _significant_children(tag: Tag) -> list[PageElement]:
    """Child nodes minus comments and whitespace-only text."""
    out: list[PageElement] = []
    for child in tag.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString) and not child.strip():
            continue
        out.append(child)
    return out


def _link_and_title(cell: Tag) -> tuple[str, str]:
    inner = _significant_children(cell)
    if not inner or not isinstance(inner[0], Tag) or inner[0].name != "a":
        raise RowValidationError("first cell has no leading <a>")
    anchor = inner[0]

    href = anchor.get("href")
    if not isinstance(href, str) or not href.strip():
        raise RowValidationError("anchor has no href")

    title = collapse_ws(anchor.get_text())
    if not title:
        raise RowValidationError("anchor has no title text")
    return href.strip(), title


def _cell_text(cell: Tag) -> str:
    inner = _significant_children(cell)
    if not inner or not isinstance(inner[0], NavigableString):
        raise RowValidationError(f"<{cell.name}> does not start with text")
    return str(inner[0]).strip()


def _label(text: str) -> str:
    """NBSP (decoded or literal) becomes a space; whitespace runs collapse."""
    return collapse_ws(text.replace("&nbsp;", " ").replace("\xa0", " "))


def _deadline(text: str) -> date:
    try:
        return datetime.strptime(text, DEADLINE_FORMAT).date()
    except ValueError as e:
        raise RowValidationError(f"bad deadline {text!r}") from e
