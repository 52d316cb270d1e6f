from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional

from .constants import ScraperConstants


class ChapterStatus(str, Enum):
    PENDING = 'pending'
    LOADING = 'loading'
    COMPLETED = 'completed'
    ERROR = 'error'


@dataclass
class Chapter:
    """A chapter link found on the start page.

    Chapters are created by the discoverer and updated in place while their
    content is fetched. They are never removed from the session's list;
    ``selected`` controls whether they end up in the book.
    """
    index: int
    title: str
    url: str
    base_url: str
    status: ChapterStatus = ChapterStatus.PENDING
    content: Optional[str] = None
    error: Optional[str] = None
    selected: bool = True
    attempts: int = 0

    @property
    def is_packageable(self) -> bool:
        return self.selected and self.status == ChapterStatus.COMPLETED

    def mark_loading(self) -> None:
        self.status = ChapterStatus.LOADING
        self.attempts += 1

    def mark_completed(self, content: str) -> None:
        self.status = ChapterStatus.COMPLETED
        self.content = content
        self.error = None

    def mark_error(self, message: str) -> None:
        self.status = ChapterStatus.ERROR
        self.error = message


@dataclass
class BookMetadata:
    title: str = ''
    author: str = ''
    language: str = ScraperConstants.DEFAULT_LANGUAGE
    description: str = ''
    subject: str = ''
    cover_url: Optional[str] = None
    publisher: str = ScraperConstants.PUBLISHER


@dataclass
class MetadataOverride:
    """User-supplied metadata; non-empty fields win over extracted values."""
    title: str = ''
    author: str = ''
    language: str = ''
    filename: str = ''
    subject: str = ''
    description: str = ''
    cover_url: str = ''

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name).strip() for f in fields(self))

    def apply(self, metadata: BookMetadata) -> BookMetadata:
        changes = {}
        for name in ('title', 'author', 'language', 'subject', 'description', 'cover_url'):
            value = getattr(self, name).strip()
            if value:
                changes[name] = value
        return replace(metadata, **changes)
