"""
Service Errors

Exceptions raised by the server-side services. Routers translate them into
HTTP status codes.
"""


class StorageError(Exception):
    """The durable store could not complete the operation"""


class AnnotationConflictError(StorageError):
    """An annotation with the same id already exists"""

    def __init__(self, annotation_id: str):
        super().__init__(f"Annotation {annotation_id!r} already exists")
        self.annotation_id = annotation_id


class DefinitionNotFoundError(Exception):
    """The lexicon pages did not contain the requested word"""


class UpstreamError(Exception):
    """The lexicon site answered with an unexpected status"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
