"""
Text Heuristic Extractor.
Pulls trip dates and per-family flight lines out of pasted free text.
"""
import re
from typing import Iterable, Optional

from ..models.families import FAMILIES, Family
from .normalizer import normalize_flight


ISO_DATE_RE = re.compile(r"\b20\d{2}-\d{2}-\d{2}\b")
NAME_JOINER_RE = re.compile(r"\s+and\s+", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
HORIZONTAL_SPACE_RE = re.compile(r"[ \t\f\v]+")

FLIGHT_KEYWORDS = ("flight", "depart", "arriv", "airline", "airport")
# Lines longer than this count as details even without a flight keyword
MIN_DETAIL_LINE_LENGTH = 20


def strip_markup(text: str) -> str:
    """Drop HTML tags and squeeze runs of spaces, keeping line breaks."""
    stripped = TAG_RE.sub(" ", text)
    lines = [HORIZONTAL_SPACE_RE.sub(" ", line).strip() for line in stripped.splitlines()]
    content = "\n".join(line for line in lines if line)
    return content if content else text


def _name_parts(family: Family) -> list[str]:
    return [part.strip().lower() for part in NAME_JOINER_RE.split(family.name) if part.strip()]


def _is_family_line(line: str, name_parts: list[str]) -> bool:
    lower = line.lower()
    if not any(part in lower for part in name_parts):
        return False
    has_flight_word = any(keyword in lower for keyword in FLIGHT_KEYWORDS)
    return has_flight_word or len(line) > MIN_DETAIL_LINE_LENGTH


def extract_dates(text: str) -> dict[str, str]:
    dates = sorted(set(ISO_DATE_RE.findall(text)))
    if not dates:
        return {}
    return {"tripStartDate": dates[0], "tripEndDate": dates[-1]}


def extract_flight_blocks(text: str, families: Iterable[Family]) -> dict[str, str]:
    """Lines mentioning each family, joined in document order."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    blocks: dict[str, str] = {}
    for family in families:
        name_parts = _name_parts(family)
        matched = [line for line in lines if _is_family_line(line, name_parts)]
        if matched:
            blocks[family.id] = "\n".join(matched)
    return blocks


def parse_imported_text(text: str, families: Optional[Iterable[Family]] = None) -> dict:
    """
    Build a partial trip record (wire keys) from free text.

    Only fields found in the text are set; an empty dict means nothing was found.
    """
    if not isinstance(text, str) or not text.strip():
        return {}

    partial: dict = {}
    partial.update(extract_dates(text))

    blocks = extract_flight_blocks(text, FAMILIES if families is None else families)
    if blocks:
        partial["flights"] = {
            family_id: [normalize_flight(block).model_dump(by_alias=True)]
            for family_id, block in blocks.items()
        }

    return partial


def has_trip_data(partial: dict) -> bool:
    """True when an extraction found dates or flights."""
    return bool(
        partial.get("tripStartDate")
        or partial.get("tripEndDate")
        or partial.get("flights")
    )
