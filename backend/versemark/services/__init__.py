"""
Services Package

Server-side services: the durable annotation store and the Strong's
definition lookup.
"""

from .annotations_service import AnnotationsService
from .base_database_service import BaseDatabaseService
from .definition_service import DefinitionLookup, DefinitionService
from .errors import (
    AnnotationConflictError,
    DefinitionNotFoundError,
    StorageError,
    UpstreamError,
)

__all__ = [
    "AnnotationsService",
    "BaseDatabaseService",
    "DefinitionLookup",
    "DefinitionService",
    "AnnotationConflictError",
    "DefinitionNotFoundError",
    "StorageError",
    "UpstreamError",
]
