"""
Annotation Type Models

Pydantic models for verse highlights and notes. Locations are plain character
offsets into the verse's rendered text, so they survive a full re-render of
the chapter as long as the text itself is unchanged.
"""

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

ANCHOR_ID_PATTERN = re.compile(r"^verse-(\d+)-(\d+)-(\d+)$")
# Ids travel as a URL path segment on delete
ANNOTATION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class AnnotationKind(str, Enum):
    """Visual treatment of an annotation"""

    HIGHLIGHT = "highlight"
    NOTE = "note"


def parse_anchor_id(anchor_id: str) -> tuple[int, int, int] | None:
    """Split ``verse-{bookId}-{chapter}-{verse}`` into its numbers."""
    match = ANCHOR_ID_PATTERN.match(anchor_id)
    if not match:
        return None
    book_id, chapter, verse = (int(part) for part in match.groups())
    return book_id, chapter, verse


def make_anchor_id(book_id: int, chapter: int, verse: int) -> str:
    return f"verse-{book_id}-{chapter}-{verse}"


class Annotation(BaseModel):
    """A persisted highlight or note anchored to one verse"""

    id: str = Field(pattern=ANNOTATION_ID_PATTERN.pattern)
    kind: AnnotationKind
    anchorId: str = Field(pattern=ANCHOR_ID_PATTERN.pattern)

    # Offsets into the anchor's text content
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    note: str | None = None

    # Scope key
    translation: str = Field(min_length=1)
    bookId: int
    chapter: int

    @field_validator("note")
    @classmethod
    def _strip_note(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def _check_consistency(self) -> "Annotation":
        if self.start >= self.end:
            raise ValueError("start must be less than end")

        if self.kind == AnnotationKind.NOTE and not self.note:
            raise ValueError("a note annotation requires a non-empty note")
        if self.kind == AnnotationKind.HIGHLIGHT and self.note:
            raise ValueError("a highlight annotation cannot carry a note")

        book_id, chapter, _ = parse_anchor_id(self.anchorId)
        if (book_id, chapter) != (self.bookId, self.chapter):
            raise ValueError("anchorId does not belong to the given book and chapter")
        return self
