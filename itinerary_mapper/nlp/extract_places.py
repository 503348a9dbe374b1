"""Venue name extraction from generated itinerary markdown.

Itineraries arrive as loosely structured markdown: day headings, map
links, booking links and bold venue names mixed with tips, prices and
song titles. This module harvests the strings that look like venues and
filters out the rest with a set of conservative heuristics.

Three sources are read, from most to least reliable:

1. map links, whose query parameter is already a clean venue string;
2. other markdown links, whose label usually names the venue;
3. bold text, which is noisy and filtered aggressively.

Content after a ``Soundtrack`` heading is never read, and the
``Where to Stay`` section is harvested separately so that lodging keeps
reserved slots in the merged result.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from ..domain.models import Coordinates, ExtractedPlaces

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
DEFAULT_STAY_SLOTS = 4
PLACES_PER_DAY = 10
MAX_PLACES = 25

_SOUNDTRACK_HEADING = re.compile(r"^#{1,6}[^\n]*\bSoundtrack\b", re.IGNORECASE | re.MULTILINE)
_STAY_HEADING = re.compile(r"^#{1,6}[ \t]*Where to Stay\b", re.IGNORECASE | re.MULTILINE)
_DAY_HEADING = re.compile(r"^# Day \d+", re.MULTILINE)

_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)\n]+)\)")
_EMBEDDED_COORDS = re.compile(
    r"\[([^\]]+)\]\(([^)]*@(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)[^)]*)\)"
)
_BOLD = re.compile(r"\*\*([^*]+)\*\*")

_MAP_URL = re.compile(r"google\.[a-z.]+/maps|maps\.google\.|\bmaps\?", re.IGNORECASE)

_GENERIC_LABEL = re.compile(
    r"^(?:open in spotify|view on maps|view events|view deals|view on yelp|go city|"
    r"tripadvisor|reserve on opentable|watch on youtube|view on instagram|"
    r"view on facebook|search|here|link|map)\b",
    re.IGNORECASE,
)
_NON_VENUE_DOMAIN = re.compile(
    r"spotify\.com|yelp\.com/biz|tripadvisor\.|opentable\.com|youtube\.com|youtu\.be|"
    r"instagram\.com|facebook\.com|eventbrite\.|booking\.com",
    re.IGNORECASE,
)

_BOLD_TIP_PREFIX = re.compile(
    r"^(?:pro tip|tip|note|save|deal|free|warning|heads up|budget|cost|price)\b",
    re.IGNORECASE,
)
_BOLD_ARTICLE_PREFIX = re.compile(r"^(?:the|a|an|order|try|get|grab|skip) ", re.IGNORECASE)
_BOLD_PRICE = re.compile(r"^\$|^\d|\d+%")
_BOLD_TIME_OR_TRANSIT = re.compile(
    r"^(?:open|closed|hours|daily|cash only|reserv|book|uber|lyft|taxi|subway|walk|"
    r"since it|today|tonight)",
    re.IGNORECASE,
)

_SECTION_WORD = re.compile(
    r"^(?:morning|afternoon|evening|night|soundtrack|tip|note|pro tip|free|deal|save|"
    r"right now|quick bite|week \d|today|tonight|sunrise|sunset|golden hour|brunch|"
    r"lunch|dinner|breakfast|where to stay|happy hour|your route)\b",
    re.IGNORECASE,
)
_TEMPERATURE = re.compile(r"\d+°")


def _split_regions(content: str) -> Tuple[str, str]:
    """Return (itinerary, stay) text with the soundtrack section removed."""
    soundtrack = _SOUNDTRACK_HEADING.search(content)
    if soundtrack:
        content = content[: soundtrack.start()]

    stay = _STAY_HEADING.search(content)
    if stay is None:
        return content, ""
    return content[: stay.start()], content[stay.start():]


def _is_map_url(url: str) -> bool:
    return bool(_MAP_URL.search(url))


def _map_link_name(label: str, url: str) -> str:
    """Venue name carried by a map link.

    The ``q`` (or ``query``) parameter up to its first comma wins; links
    without one fall back to the label, where ``+`` stands for a space.
    """
    query = parse_qs(urlsplit(url).query)
    for param in ("q", "query"):
        values = query.get(param)
        if values:
            name = values[0].split(",", 1)[0].strip()
            if name:
                return name
    return label.replace("+", " ").strip()


def _is_venue_bold(text: str) -> bool:
    if "](" in text or text.startswith("["):
        return False
    if _BOLD_TIP_PREFIX.match(text) or _BOLD_ARTICLE_PREFIX.match(text):
        return False
    if _BOLD_PRICE.search(text):
        return False
    if _BOLD_TIME_OR_TRANSIT.match(text):
        return False
    return len(text) > 3


def _harvest(text: str) -> List[str]:
    """Raw candidate names of one region, in source priority order."""
    map_names: List[str] = []
    link_names: List[str] = []

    for match in _MARKDOWN_LINK.finditer(text):
        label = match.group(1).strip()
        url = match.group(2).strip()
        if _is_map_url(url):
            name = _map_link_name(label, url)
            if not _GENERIC_LABEL.match(name):
                map_names.append(name)
            continue
        if _GENERIC_LABEL.match(label) or _NON_VENUE_DOMAIN.search(url):
            continue
        link_names.append(label)

    bold_names = [
        m.group(1).strip() for m in _BOLD.finditer(text) if _is_venue_bold(m.group(1).strip())
    ]
    return map_names + link_names + bold_names


def _keep(name: str, city_lower: str) -> bool:
    if not 2 < len(name) < 60:
        return False
    if name.lower() == city_lower:
        return False
    if _SECTION_WORD.match(name):
        return False
    if name[0].isdigit():
        return False
    if " - " in name:
        return False
    return not _TEMPERATURE.search(name)


def _filter_names(names: List[str], city: str) -> Tuple[str, ...]:
    """Apply the shared filter and dedupe, preserving first occurrence."""
    city_lower = city.strip().lower()
    seen = set()
    kept = []
    for name in names:
        if name in seen or not _keep(name, city_lower):
            continue
        seen.add(name)
        kept.append(name)
    return tuple(kept)


def extract_place_groups(content: Optional[str], city: Optional[str]) -> ExtractedPlaces:
    """Extract itinerary and accommodation venue names separately.

    Parameters
    ----------
    content:
        Raw itinerary markdown.
    city:
        Target city; a candidate equal to it is dropped because it would
        geocode to the city centre rather than a venue.

    Returns
    -------
    ExtractedPlaces
        Filtered, deduplicated names per section. Empty for empty or
        non-string input.
    """
    if not content or not isinstance(content, str):
        return ExtractedPlaces()
    city = city if isinstance(city, str) else ""

    itinerary_text, stay_text = _split_regions(content)
    groups = ExtractedPlaces(
        itinerary=_filter_names(_harvest(itinerary_text), city),
        stay=_filter_names(_harvest(stay_text), city),
    )
    logger.debug(
        "Places extracted",
        extra={"itinerary": len(groups.itinerary), "stay": len(groups.stay)},
    )
    return groups


def extract_places(
    content: Optional[str],
    city: Optional[str],
    max_results: int = DEFAULT_MAX_RESULTS,
    *,
    stay_slots: int = DEFAULT_STAY_SLOTS,
) -> List[str]:
    """Ordered venue names, with room reserved for accommodation.

    At most ``max_results`` names are returned. Up to ``stay_slots`` of
    them are reserved for the ``Where to Stay`` section whenever it
    yields names, however long the itinerary list is.
    """
    return extract_place_groups(content, city).names(max_results, stay_slots=stay_slots)


def extract_place_coords(content: Optional[str]) -> Dict[str, Coordinates]:
    """Coordinates embedded in map links as ``@lat,lng``.

    Keys are the names the extractor gives the same links, so the
    result can be joined with ``extract_places`` output directly.
    Out-of-range pairs are ignored; a later link for the same name wins.
    """
    coords: Dict[str, Coordinates] = {}
    if not content or not isinstance(content, str):
        return coords

    for match in _EMBEDDED_COORDS.finditer(content):
        label, url, lat, lng = match.groups()
        name = _map_link_name(label.strip(), url) if _is_map_url(url) else label.strip()
        if len(name) <= 2:
            continue
        try:
            coords[name] = Coordinates(float(lat), float(lng))
        except ValueError:
            continue
    return coords


def detect_day_count(content: Optional[str]) -> int:
    """Number of ``# Day N`` headings, at least 1."""
    if not content or not isinstance(content, str):
        return 1
    return max(len(_DAY_HEADING.findall(content)), 1)


def places_limit(
    content: Optional[str],
    per_day: int = PLACES_PER_DAY,
    cap: int = MAX_PLACES,
) -> int:
    """Default result count for an itinerary: ``per_day`` per day, capped."""
    return min(detect_day_count(content) * per_day, cap)
