"""
Definition Lookup Models

Request and response shapes for the Strong's definition sibling feature.
"""

from pydantic import BaseModel


class DefinitionRequest(BaseModel):
    """A word clicked inside a verse, with enough context to find it"""

    word: str
    translation: str
    bookName: str
    chapter: int
    verse: int


class StrongsDefinition(BaseModel):
    strongsNumber: str
    lexeme: str
    transliteration: str
    definition: str


class DefinitionUnavailable(BaseModel):
    """Explicit outcome when no definition could be produced"""

    reason: str
