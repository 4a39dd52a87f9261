"""
Reader Package

Client-side annotation core: the location codec, the overlay renderer, the
chapter renderer and the annotation store, plus HTTP clients for the
annotation API, the text provider and the definition lookup.
"""

from .annotation_store import AnnotationStore, DeleteOutcome
from .annotations_client import AnnotationsClient
from .errors import (
    AnnotationError,
    EmptyNoteError,
    InvalidSelectionError,
    PersistenceConflictError,
    PersistenceError,
    StaleLocationError,
    UnknownKindError,
)
from .location_codec import Location, TextPoint, TextRange, decode_location, encode_location
from .overlay_renderer import RenderReport, apply_annotations, apply_overlay, remove_overlay
from .session import ReaderSession
from .state import ReaderState, Scope
from .text_provider import TextProviderClient, TextProviderError

__all__ = [
    "AnnotationStore",
    "DeleteOutcome",
    "AnnotationsClient",
    "AnnotationError",
    "EmptyNoteError",
    "InvalidSelectionError",
    "PersistenceConflictError",
    "PersistenceError",
    "StaleLocationError",
    "UnknownKindError",
    "Location",
    "TextPoint",
    "TextRange",
    "decode_location",
    "encode_location",
    "RenderReport",
    "apply_annotations",
    "apply_overlay",
    "remove_overlay",
    "ReaderSession",
    "ReaderState",
    "Scope",
    "TextProviderClient",
    "TextProviderError",
]
