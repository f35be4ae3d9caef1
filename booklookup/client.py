"""HTTP client for the Open Library Books and Works APIs."""
import requests
from typing import Optional, Dict, Any
import logging

from booklookup.config import Config

logger = logging.getLogger(__name__)


class BookRetrievalError(Exception):
    """Raised when book metadata cannot be retrieved from Open Library."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BookNotFoundError(BookRetrievalError):
    """Raised when Open Library has no entry for the requested ISBN."""

    def __init__(self, isbn: str):
        super().__init__(f"No book found for ISBN: {isbn}", status_code=200)
        self.isbn = isbn


class OpenLibraryClient:
    """Client for Open Library with one short-lived session per request."""

    HEADERS = {"Accept": "application/json"}

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize Open Library client.

        Args:
            base_url: API root, defaults to OPENLIBRARY_BASE_URL
            timeout: Request timeout in seconds, defaults to DEFAULT_TIMEOUT
        """
        config = Config()
        self.base_url = (base_url or config.OPENLIBRARY_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.DEFAULT_TIMEOUT

    def fetch_book_data(self, isbn: str) -> Dict[str, Any]:
        """
        Fetch the raw book object for an ISBN.

        Args:
            isbn: ISBN string, sent as given

        Returns:
            The JSON object stored under the "ISBN:<isbn>" key

        Raises:
            BookNotFoundError: The response has no entry for the ISBN
            BookRetrievalError: Bad status, transport or parse failure
        """
        isbn_key = f"ISBN:{isbn}"
        url = f"{self.base_url}/api/books"
        params = {
            "bibkeys": isbn_key,
            "format": "json",
            "jscmd": "data"
        }

        with requests.Session() as session:
            try:
                logger.info(f"Fetching book data for {isbn_key}")
                response = session.get(
                    url,
                    params=params,
                    headers=self.HEADERS,
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                logger.error(f"Request failed for {isbn_key}: {e}")
                raise BookRetrievalError(f"Error fetching book information: {e}") from e

            if response.status_code != 200:
                logger.error(f"Unexpected response ({response.status_code}) for {isbn_key}")
                raise BookRetrievalError(
                    f"Unexpected response: {response.status_code}",
                    status_code=response.status_code
                )

            try:
                payload = response.json()
            except ValueError as e:
                logger.error(f"Invalid JSON for {isbn_key}: {e}")
                raise BookRetrievalError(f"Error parsing book information: {e}", status_code=200) from e

        if not isinstance(payload, dict):
            raise BookRetrievalError(
                f"Unexpected payload type: {type(payload).__name__}",
                status_code=200
            )

        if isbn_key not in payload:
            logger.warning(f"No entry for {isbn_key}")
            raise BookNotFoundError(isbn)

        book = payload[isbn_key]
        if not isinstance(book, dict):
            logger.error(f"Entry for {isbn_key} is not an object")
            raise BookRetrievalError(
                f"Unexpected book data type: {type(book).__name__}",
                status_code=200
            )

        return book

    def fetch_edition_count(self, work_id: str) -> int:
        """
        Count the editions of a work.

        Never raises: any failure yields 0.
        """
        url = f"{self.base_url}/works/{work_id}/editions.json"

        try:
            with requests.Session() as session:
                response = session.get(url, headers=self.HEADERS, timeout=self.timeout)

                if response.status_code != 200:
                    logger.warning(f"Editions lookup for {work_id} returned {response.status_code}")
                    return 0

                payload = response.json()

            logger.debug(f"Editions response for {work_id}: {payload}")
            return _edition_size(payload)

        except Exception as e:
            logger.error(f"Failed to count editions for {work_id}: {e}")
            return 0


def _edition_size(payload: Any) -> int:
    """Read the scalar "size" field of an editions listing."""
    if not isinstance(payload, dict):
        return 0

    size = payload.get("size")
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(size, bool) or not isinstance(size, (int, float, str)):
        return 0

    return int(size)
