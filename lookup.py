#!/usr/bin/env python3
"""Book Lookup CLI - Open Library metadata by ISBN."""
import argparse
import csv
import sys
import json
from tabulate import tabulate
from booklookup.client import OpenLibraryClient, BookRetrievalError
from booklookup.parse import lookup_book
from booklookup.config import Config
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def lookup_isbns(args, config: Config) -> int:
    """Look up each ISBN and display the records found."""
    client = OpenLibraryClient(
        base_url=config.OPENLIBRARY_BASE_URL,
        timeout=config.DEFAULT_TIMEOUT
    )

    books = []
    for isbn in args.isbns:
        try:
            books.append(lookup_book(isbn, client=client))
        except BookRetrievalError as e:
            logger.error(f"❌ {isbn}: {e}")

    if not books:
        logger.error("No books found")
        return 1

    logger.info(f"Found {len(books)} of {len(args.isbns)} books")
    display_books(books, args.format, args.output)
    return 0


def count_editions(args, config: Config) -> int:
    """Print the edition count for a work."""
    client = OpenLibraryClient(
        base_url=config.OPENLIBRARY_BASE_URL,
        timeout=config.DEFAULT_TIMEOUT
    )
    work_id = args.work_id.replace("/works/", "")
    print(client.fetch_edition_count(work_id))
    return 0


def display_books(books, format_type: str, output_file=None):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ISBN", "Title", "Authors", "Publisher", "Published", "Editions"]
        rows = [
            [
                book.isbn,
                _truncate(book.title or "Unknown", 50),
                _truncate(book.authors_str, 30),
                book.publisher or "N/A",
                book.published_str,
                book.similar_editions
            ]
            for book in books
        ]
        _write("\n" + tabulate(rows, headers=headers, tablefmt="grid"), output_file)

    elif format_type == "json":
        _write(json.dumps([book.to_dict() for book in books], indent=2), output_file)

    elif format_type == "compact":
        lines = [f"{i}. {book.title or 'Unknown'} - {book.authors_str}" for i, book in enumerate(books, 1)]
        _write("\n".join(lines), output_file)

    elif format_type == "csv":
        stream = open(output_file, "w", newline="", encoding="utf-8") if output_file else sys.stdout
        try:
            writer = csv.writer(stream)
            writer.writerow(["ISBN", "Title", "Authors", "Publisher", "Published", "Editions"])
            for book in books:
                writer.writerow([
                    book.isbn,
                    book.title or "",
                    book.authors or "",
                    book.publisher or "",
                    book.published_date.isoformat() if book.published_date else "",
                    book.similar_editions
                ])
        finally:
            if output_file:
                stream.close()
                logger.info(f"✅ Exported {len(books)} books to {output_file}")


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def _write(text: str, output_file=None):
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info(f"✅ Wrote output to {output_file}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Book Lookup - Open Library metadata by ISBN",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Look up a single ISBN
  %(prog)s isbn 9780134685991

  # Several ISBNs as JSON
  %(prog)s isbn 9780134685991 0201633612 --format json

  # Export to CSV
  %(prog)s isbn 9780134685991 --format csv --output books.csv

  # Edition count for a work
  %(prog)s editions OL1W
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    isbn_parser = subparsers.add_parser("isbn", help="Look up books by ISBN")
    isbn_parser.add_argument("isbns", nargs="+", help="One or more ISBNs")
    isbn_parser.add_argument("--format", choices=["table", "json", "compact", "csv"], default="table", help="Output format")
    isbn_parser.add_argument("--output", help="Output file (default: stdout)")

    editions_parser = subparsers.add_parser("editions", help="Count editions of a work")
    editions_parser.add_argument("work_id", help="Work id, e.g. OL1W or /works/OL1W")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    setup_logging(config)

    try:
        if args.command == "isbn":
            sys.exit(lookup_isbns(args, config))

        elif args.command == "editions":
            sys.exit(count_editions(args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
