"""Tests for the Open Library client (HTTP mocked)."""
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from booklookup.client import BookNotFoundError, BookRetrievalError, OpenLibraryClient
from booklookup.parse import lookup_book

BASE_URL = "https://openlibrary.example"


def make_response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def session_from(mock_session_cls):
    return mock_session_cls.return_value.__enter__.return_value


@pytest.fixture
def client():
    return OpenLibraryClient(base_url=BASE_URL, timeout=5)


class TestFetchBookData:
    @patch("booklookup.client.requests.Session")
    def test_returns_nested_object(self, mock_session_cls, client):
        book = {"title": "Effective Java", "authors": [{"name": "Joshua Bloch"}]}
        session = session_from(mock_session_cls)
        session.get.return_value = make_response(payload={"ISBN:9780134685991": book})

        assert client.fetch_book_data("9780134685991") == book

        session.get.assert_called_once_with(
            f"{BASE_URL}/api/books",
            params={"bibkeys": "ISBN:9780134685991", "format": "json", "jscmd": "data"},
            headers={"Accept": "application/json"},
            timeout=5
        )
        mock_session_cls.return_value.__exit__.assert_called_once()

    @patch("booklookup.client.requests.Session")
    def test_non_200_raises_with_status(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(status_code=503)

        with pytest.raises(BookRetrievalError) as exc_info:
            client.fetch_book_data("9780134685991")

        assert exc_info.value.status_code == 503
        mock_session_cls.return_value.__exit__.assert_called_once()

    @patch("booklookup.client.requests.Session")
    def test_missing_key_raises_not_found(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(payload={})

        with pytest.raises(BookNotFoundError) as exc_info:
            client.fetch_book_data("0000000000")

        assert exc_info.value.isbn == "0000000000"
        assert isinstance(exc_info.value, BookRetrievalError)

    @patch("booklookup.client.requests.Session")
    def test_transport_error_is_wrapped(self, mock_session_cls, client):
        session_from(mock_session_cls).get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(BookRetrievalError, match="offline") as exc_info:
            client.fetch_book_data("9780134685991")

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        mock_session_cls.return_value.__exit__.assert_called_once()

    @patch("booklookup.client.requests.Session")
    def test_invalid_json_is_wrapped(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(json_error=ValueError("bad json"))

        with pytest.raises(BookRetrievalError):
            client.fetch_book_data("9780134685991")

    @patch("booklookup.client.requests.Session")
    def test_non_object_payload_raises(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(payload=["ISBN:1"])

        with pytest.raises(BookRetrievalError):
            client.fetch_book_data("1")

    @pytest.mark.parametrize("book", [None, ["title"], "T", 3])
    @patch("booklookup.client.requests.Session")
    def test_non_object_book_entry_raises(self, mock_session_cls, book, client):
        session_from(mock_session_cls).get.return_value = make_response(payload={"ISBN:1": book})

        with pytest.raises(BookRetrievalError) as exc_info:
            client.fetch_book_data("1")

        assert exc_info.value.status_code == 200
        assert not isinstance(exc_info.value, BookNotFoundError)


class TestFetchEditionCount:
    @patch("booklookup.client.requests.Session")
    def test_returns_size(self, mock_session_cls, client):
        session = session_from(mock_session_cls)
        session.get.return_value = make_response(payload={"size": 7, "entries": []})

        assert client.fetch_edition_count("OL1W") == 7
        session.get.assert_called_once_with(
            f"{BASE_URL}/works/OL1W/editions.json",
            headers={"Accept": "application/json"},
            timeout=5
        )

    @patch("booklookup.client.requests.Session")
    def test_numeric_string_size(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(payload={"size": "12"})

        assert client.fetch_edition_count("OL1W") == 12

    @patch("booklookup.client.requests.Session")
    def test_non_200_returns_zero(self, mock_session_cls, client):
        session_from(mock_session_cls).get.return_value = make_response(status_code=404)

        assert client.fetch_edition_count("OL1W") == 0

    @pytest.mark.parametrize("payload", [{}, {"size": None}, {"size": [1]}, {"size": True}, {"size": "many"}, []])
    @patch("booklookup.client.requests.Session")
    def test_malformed_size_returns_zero(self, mock_session_cls, payload, client):
        session_from(mock_session_cls).get.return_value = make_response(payload=payload)

        assert client.fetch_edition_count("OL1W") == 0

    @patch("booklookup.client.requests.Session")
    def test_errors_return_zero(self, mock_session_cls, client):
        session_from(mock_session_cls).get.side_effect = requests.Timeout("slow")

        assert client.fetch_edition_count("OL1W") == 0


class TestLookupBook:
    @patch("booklookup.client.requests.Session")
    def test_end_to_end(self, mock_session_cls, client):
        book = {
            "title": "T",
            "authors": [{"name": "A"}],
            "publishers": [{"name": "P"}],
            "publish_date": "2020",
            "works": [{"key": "/works/OL1W"}]
        }
        session_from(mock_session_cls).get.side_effect = [
            make_response(payload={"ISBN:123": book}),
            make_response(payload={"size": 3}),
        ]

        record = lookup_book("123", client=client)

        assert record.isbn == "123"
        assert record.title == "T"
        assert record.authors == "A"
        assert record.publisher == "P"
        assert record.published_date == date(2020, 1, 1)
        assert record.similar_editions == 3
        assert mock_session_cls.call_count == 2

    @patch("booklookup.client.requests.Session")
    def test_editions_failure_does_not_fail_lookup(self, mock_session_cls, client):
        book = {"title": "T", "works": [{"key": "/works/OL1W"}]}
        session_from(mock_session_cls).get.side_effect = [
            make_response(payload={"ISBN:123": book}),
            make_response(status_code=500),
        ]

        record = lookup_book("123", client=client)

        assert record.title == "T"
        assert record.similar_editions == 0
