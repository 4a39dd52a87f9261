"""
Reader state record.

The current display scope and the pending selection live in one explicit
record owned by the annotation store instead of in module globals. A new
record replaces the old one on every scope change and when the annotation
dialog closes.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .. import config
from ..models.annotations import Annotation
from .location_codec import TextRange


@dataclass(frozen=True)
class Scope:
    """What is on screen: one chapter of one translation"""

    translation: str
    book_id: int
    chapter: int

    @classmethod
    def default(cls) -> "Scope":
        return cls(config.DEFAULT_TRANSLATION, config.DEFAULT_BOOK_ID, config.DEFAULT_CHAPTER)


@dataclass
class ReaderState:
    scope: Scope
    selection: Optional[TextRange] = None
    note_draft: str = ""
    annotations: list[Annotation] = field(default_factory=list)

    def with_scope(self, scope: Scope) -> "ReaderState":
        return ReaderState(scope=scope)

    def with_selection(self, selection: Optional[TextRange]) -> "ReaderState":
        return replace(self, selection=selection)

    def closed(self) -> "ReaderState":
        """State after the annotation dialog is dismissed."""
        return replace(self, selection=None, note_draft="")
