"""Parse and normalize Open Library API responses."""
import re
import logging
from datetime import date, datetime
from typing import Dict, Any, List, Optional

from booklookup.client import OpenLibraryClient
from booklookup.models import BookRecord

logger = logging.getLogger(__name__)

FULL_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
YEAR_MONTH_RE = re.compile(r"[0-9]{4}-[0-9]{2}")
YEAR_RE = re.compile(r"[0-9]{4}")

# Formats seen in Open Library "publish_date" values
FREE_TEXT_FORMATS = [
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %Y",
    "%b %Y",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
]

WORKS_PREFIX = "/works/"


def parse_free_text_date(text: str) -> Optional[date]:
    """
    Best-effort parse of a free-form date string.

    Args:
        text: Date text such as "March 15, 2023" or "15/03/2023"

    Returns:
        The date, or None if no known format matches. Formats without a
        day resolve to the first of the month.
    """
    cleaned = " ".join(text.split()).rstrip(".")
    if not cleaned:
        return None

    for fmt in FREE_TEXT_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    return None


def parse_publish_date(text: Any) -> Optional[date]:
    """
    Normalize a publication date to day precision.

    Tries YYYY-MM-DD, then YYYY-MM (day 1), then YYYY (January 1), then
    the free-text parser. Blank input and parse errors give None.
    """
    if text is None:
        return None

    if not isinstance(text, str):
        logger.warning(f"Could not parse date {text!r}: not a string")
        return None

    if not text.strip():
        return None

    value = text.strip()

    try:
        if FULL_DATE_RE.fullmatch(value):
            return date.fromisoformat(value)

        if YEAR_MONTH_RE.fullmatch(value):
            year, month = value.split("-")
            return date(int(year), int(month), 1)

        if YEAR_RE.fullmatch(value):
            return date(int(value), 1, 1)

        return parse_free_text_date(value)
    except Exception as e:
        logger.warning(f"Could not parse date {text!r}: {e}")
        return None


def _join_authors(authors: List[Any]) -> str:
    names = []
    for author in authors:
        if isinstance(author, dict) and isinstance(author.get("name"), str):
            names.append(author["name"])
    return ", ".join(names)


def _first_publisher(publishers: List[Any]) -> Optional[str]:
    if not publishers or not isinstance(publishers[0], dict):
        return None
    name = publishers[0].get("name")
    return name if isinstance(name, str) else None


def _work_id(works: List[Any]) -> Optional[str]:
    if not works or not isinstance(works[0], dict):
        return None
    key = works[0].get("key")
    if not isinstance(key, str):
        return None
    return key.replace(WORKS_PREFIX, "")


def _alternate_isbns(data: Dict[str, Any]) -> List[str]:
    isbns = []
    for field_name in ("isbn_10", "isbn_13"):
        values = data.get(field_name)
        if isinstance(values, list):
            isbns.extend(v for v in values if isinstance(v, str))
    return isbns


def parse_book(
    data: Dict[str, Any],
    isbn: str,
    client: Optional[OpenLibraryClient] = None
) -> BookRecord:
    """
    Map an Open Library book object onto a BookRecord.

    Missing or malformed fields keep their defaults. When the book
    references a work, its edition count is fetched through ``client``.

    Args:
        data: Object returned by OpenLibraryClient.fetch_book_data
        isbn: ISBN the lookup was made with
        client: Client used for the editions lookup

    Returns:
        Populated BookRecord
    """
    record = BookRecord(isbn=isbn)

    if not isinstance(data, dict):
        logger.warning(f"Book data for {isbn} is not an object")
        return record

    title = data.get("title")
    if isinstance(title, str):
        record.title = title

    authors = data.get("authors")
    if isinstance(authors, list):
        record.authors = _join_authors(authors)

    publishers = data.get("publishers")
    if isinstance(publishers, list):
        record.publisher = _first_publisher(publishers)

    if "publish_date" in data:
        try:
            record.published_date = parse_publish_date(data["publish_date"])
        except Exception as e:
            logger.warning(f"Ignoring publish_date for {isbn}: {e}")
            record.published_date = None

    record.alternate_isbns = _alternate_isbns(data)

    works = data.get("works")
    if isinstance(works, list):
        work_id = _work_id(works)
        if work_id is not None:
            if client is None:
                client = OpenLibraryClient()
            record.similar_editions = client.fetch_edition_count(work_id)

    return record


def lookup_book(isbn: str, client: Optional[OpenLibraryClient] = None) -> BookRecord:
    """
    Fetch and map the record for an ISBN.

    Raises:
        BookRetrievalError: The metadata fetch failed
    """
    client = client or OpenLibraryClient()
    data = client.fetch_book_data(isbn)
    return parse_book(data, isbn, client=client)
