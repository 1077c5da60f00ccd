"""
Parsers for BoardGameGeek XML API2 payloads

Search response:
    <items total="N">
      <item type="boardgame" id="123">
        <name type="primary" value="Catan"/>
        <yearpublished value="1995"/>
      </item>
    </items>

Thing response:
    <items>
      <item type="boardgame" id="123">
        <thumbnail>https://cf.geekdo-images.com/...</thumbnail>
        <image>https://cf.geekdo-images.com/...</image>
        <name type="primary" value="Catan"/>
      </item>
    </items>

Parsers never raise: they return a ParseResult and the caller decides how a
malformed or empty payload maps onto its own outcome.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
from xml.etree import ElementTree as ET

from constants import CATALOG_ITEM_TYPE
from services.catalog_matching import CandidateMatch


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one payload: ok (with value), empty, or failed (with reason)"""
    kind: str
    value: Any = None
    error: Optional[str] = None

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"

    @classmethod
    def ok(cls, value) -> "ParseResult":
        return cls(cls.OK, value=value)

    @classmethod
    def empty(cls) -> "ParseResult":
        return cls(cls.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "ParseResult":
        return cls(cls.FAILED, error=error)

    @property
    def is_ok(self) -> bool:
        return self.kind == self.OK

    @property
    def is_empty(self) -> bool:
        return self.kind == self.EMPTY

    @property
    def is_failed(self) -> bool:
        return self.kind == self.FAILED

    def value_or(self, default):
        return self.value if self.is_ok else default


@dataclass(frozen=True)
class CatalogImages:
    image: Optional[str] = None
    thumbnail: Optional[str] = None
    primary_name: Optional[str] = None


def _parse_items_root(xml: str):
    """Return the <items> root element, or raise ValueError describing why not"""
    if not xml or not xml.strip():
        raise ValueError("empty payload")
    root = ET.fromstring(xml)
    if root.tag != "items":
        raise ValueError(f"unexpected root element <{root.tag}>")
    return root


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except (TypeError, ValueError):
        return None


def _item_name(item) -> str:
    names = item.findall("name")
    if not names:
        return ""

    primary = next((n for n in names if n.get("type") == "primary"), None)
    value = primary.get("value") if primary is not None else None
    if value is None:
        value = names[0].get("value")
    return value or ""


def _text_or_none(element) -> Optional[str]:
    if element is None or element.text is None:
        return None
    text = element.text.strip()
    return text or None


def parse_search_xml(xml: str) -> ParseResult:
    """
    Parse a search response into CandidateMatch objects.

    Only items typed as board games are kept; expansions and accessories in
    the same response are dropped, as is anything without a positive id or a name.
    """
    try:
        root = _parse_items_root(xml)
    except (ET.ParseError, ValueError) as e:
        return ParseResult.failed(f"search payload: {e}")

    candidates: List[CandidateMatch] = []
    for item in root.findall("item"):
        if item.get("type") != CATALOG_ITEM_TYPE:
            continue

        external_id = _to_int(item.get("id")) or 0
        name = _item_name(item)
        if external_id <= 0 or not name:
            continue

        year_element = item.find("yearpublished")
        year = _to_int(year_element.get("value")) if year_element is not None else None

        candidates.append(CandidateMatch(external_id=external_id, name=name, year_published=year))

    if not candidates:
        return ParseResult.empty()
    return ParseResult.ok(candidates)


def parse_thing_xml(xml: str) -> ParseResult:
    """Parse a thing (detail) response into CatalogImages for its first item"""
    try:
        root = _parse_items_root(xml)
    except (ET.ParseError, ValueError) as e:
        return ParseResult.failed(f"thing payload: {e}")

    item = root.find("item")
    if item is None:
        return ParseResult.empty()

    primary = next((n for n in item.findall("name") if n.get("type") == "primary"), None)

    return ParseResult.ok(
        CatalogImages(
            image=_text_or_none(item.find("image")),
            thumbnail=_text_or_none(item.find("thumbnail")),
            primary_name=primary.get("value") if primary is not None else None,
        )
    )
