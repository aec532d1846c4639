"""Error types for the content build.

Anything raised from here aborts the build; the CLI turns it into exit code 1.
"""

from __future__ import annotations


class BookFeedError(Exception):
    """Base exception for all bookfeed errors."""


class SchemaValidationError(BookFeedError):
    """A document did not match its schema."""

    def __init__(self, document: str, violations: list[str]) -> None:
        self.document = document
        self.violations = list(violations)
        detail = "; ".join(self.violations) or "invalid document"
        super().__init__(f"{document}: {detail}")


class ContentError(BookFeedError):
    """Content tree is structurally broken (unreadable file, wrong shape)."""


class DuplicateItemError(ContentError):
    """Two content items share one id."""

    def __init__(self, item_id: str, sources: list[str]) -> None:
        self.item_id = item_id
        self.sources = list(sources)
        super().__init__(f"Duplicate item id {item_id!r}: {', '.join(self.sources)}")
