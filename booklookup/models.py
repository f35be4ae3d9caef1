"""Data models for books."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List, Dict, Any


@dataclass
class BookRecord:
    """Normalized book record built from an Open Library response."""
    isbn: str
    title: Optional[str] = None
    authors: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[date] = None
    similar_editions: int = 0
    alternate_isbns: List[str] = field(default_factory=list)

    @property
    def authors_str(self) -> str:
        """Authors for display."""
        return self.authors if self.authors else "Unknown"

    @property
    def published_str(self) -> str:
        """Publication date as ISO string for display."""
        return self.published_date.isoformat() if self.published_date else "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation."""
        return {
            "isbn": self.isbn,
            "title": self.title,
            "authors": self.authors,
            "publisher": self.publisher,
            "published_date": self.published_date.isoformat() if self.published_date else None,
            "similar_editions": self.similar_editions,
            "alternate_isbns": list(self.alternate_isbns),
        }
