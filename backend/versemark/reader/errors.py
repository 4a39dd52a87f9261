"""
Reader Errors

Failures the reader surfaces while creating, deleting and re-applying
annotations. Selection and note validation failures are recovered locally;
persistence failures are shown to the user with a retry affordance.
"""


class AnnotationError(Exception):
    """Base class for reader-side annotation failures"""

    user_message = "Something went wrong with this annotation."


class InvalidSelectionError(AnnotationError):
    """The selection is collapsed, spans verses, or cannot be resolved"""

    user_message = "Could not save highlight. The selection may be invalid or empty."


class EmptyNoteError(AnnotationError):
    user_message = "Please enter a note before saving."


class UnknownKindError(AnnotationError):
    """The requested kind is neither a highlight nor a note"""

    user_message = "Could not save: unknown annotation type."


class StaleLocationError(AnnotationError):
    """A stored location no longer fits the rendered verse text"""

    def __init__(self, annotation_id: str, reason: str):
        super().__init__(f"{annotation_id}: {reason}")
        self.annotation_id = annotation_id
        self.reason = reason


class PersistenceError(AnnotationError):
    """The annotation API failed or could not be reached"""

    user_message = "There was a problem saving your highlight. Please try again."

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceConflictError(PersistenceError):
    """The API already holds an annotation with this id"""
