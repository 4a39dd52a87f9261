"""
Text Provider Models

Shapes returned by the remote scripture text provider. Verse text is markup
and is treated as opaque input by the annotation core.
"""

from pydantic import BaseModel, ConfigDict


class Verse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    verse: int
    text: str


class Book(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bookid: int
    name: str
    chapters: int
