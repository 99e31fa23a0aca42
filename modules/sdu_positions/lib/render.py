from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import datetime, timezone

from .config import Settings
from .models import Position
from .utils import rfc2822, truncate_ellipsis

CHANNEL_TITLE = "Open Positions @ SDU"
CHANNEL_DESCRIPTION = "Read and parsed"
GENERATOR = "sdu_positions"
TITLE_LIMIT = 80
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def feed_title(p: Position) -> str:
    """
    Compact item title, e.g.:
        "Science/Odense 2023-03-05: Assistant Professor in Theoretical Physics"
    """
    return f"{p.faculty.short_name}/{p.campus} {p.deadline.isoformat()}: {truncate_ellipsis(p.title, TITLE_LIMIT)}"


def build_rss(
    positions: Iterable[Position],
    settings: Settings,
    *,
    now: datetime | None = None,
) -> str:
    """
    Build an RSS 2.0 document with one <item> per position.

    pubDate is the position's first_seen; it is left out when unknown.
    guid is the (permalink) posting URL.
    """
    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = CHANNEL_TITLE
    ET.SubElement(channel, "link").text = settings.listings_url
    ET.SubElement(channel, "description").text = CHANNEL_DESCRIPTION
    ET.SubElement(channel, "language").text = "en"
    ET.SubElement(channel, "generator").text = GENERATOR
    ET.SubElement(channel, "lastBuildDate").text = rfc2822(now or datetime.now(timezone.utc))
    if settings.webmaster:
        ET.SubElement(channel, "webMaster").text = settings.webmaster

    for p in positions:
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = feed_title(p)
        ET.SubElement(item, "link").text = p.link
        ET.SubElement(item, "description").text = p.title
        if p.first_seen is not None:
            ET.SubElement(item, "pubDate").text = rfc2822(p.first_seen)
        ET.SubElement(item, "source", {"url": settings.listings_url})
        ET.SubElement(item, "guid", {"isPermaLink": "true"}).text = p.link

    ET.indent(rss, space="    ")
    return XML_DECLARATION + ET.tostring(rss, encoding="unicode")


def build_listing(positions: Iterable[Position]) -> str:
    """One line per position: '<deadline> <campus>: <title> <faculty>'."""
    return "\n".join(f"{p.deadline.isoformat()} {p.campus}: {p.title} {p.faculty}" for p in positions)
