"""
Annotations Service Module

This module provides the durable store behind verse highlights and notes.
Rows are keyed by the client-generated annotation id and bulk-loaded by scope
(translation, book, chapter).

Schema:
    annotations (
        id TEXT PRIMARY KEY,
        kind TEXT NOT NULL,
        anchor_id TEXT NOT NULL,
        start_offset INTEGER NOT NULL,
        end_offset INTEGER NOT NULL,
        note TEXT,
        translation TEXT NOT NULL,
        book_id INTEGER NOT NULL,
        chapter INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )

Each operation is independent and non-transactional with respect to the
others. Listing returns rows in insertion order, which is the order the
reader applies overlays in.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..models.annotations import Annotation
from .base_database_service import BaseDatabaseService
from .errors import AnnotationConflictError

logger = logging.getLogger(__name__)


class AnnotationsService(BaseDatabaseService):
    """SQLite helper for verse annotations."""

    def __init__(self, db_path: str | None = None):
        super().__init__(db_path)
        self._init_table()

    def _init_table(self) -> None:
        """Ensure the annotations table & indexes exist."""
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS annotations (
                    id TEXT NOT NULL PRIMARY KEY,   -- Client-generated, globally unique
                    kind TEXT NOT NULL,             -- 'highlight' or 'note'
                    anchor_id TEXT NOT NULL,        -- verse-{bookId}-{chapter}-{verse}
                    start_offset INTEGER NOT NULL,  -- Into the verse's text content
                    end_offset INTEGER NOT NULL,
                    note TEXT,                      -- Only set for notes
                    translation TEXT NOT NULL,
                    book_id INTEGER NOT NULL,
                    chapter INTEGER NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_annotations_scope
                ON annotations(translation, book_id, chapter)
            """)
            conn.commit()

    # ---------------------------------------------------------------------
    # Row mapping
    # ---------------------------------------------------------------------

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "kind": row["kind"],
            "anchorId": row["anchor_id"],
            "start": row["start_offset"],
            "end": row["end_offset"],
            "note": row["note"],
            "translation": row["translation"],
            "bookId": row["book_id"],
            "chapter": row["chapter"],
        }

    # ---------------------------------------------------------------------
    # CRUD helpers
    # ---------------------------------------------------------------------

    def list_annotations(
        self, translation: str, book_id: int, chapter: int
    ) -> List[Annotation]:
        """Return every annotation in a scope, oldest first."""
        query = """
            SELECT * FROM annotations
            WHERE translation = ? AND book_id = ? AND chapter = ?
            ORDER BY rowid ASC
        """
        rows = self.execute_query(query, (translation, book_id, chapter), fetch_all=True)
        return [Annotation(**self._row_to_dict(row)) for row in rows or []]

    def get_annotation(self, annotation_id: str) -> Optional[Annotation]:
        """Retrieve a single annotation by id."""
        row = self.execute_query(
            "SELECT * FROM annotations WHERE id = ?", (annotation_id,), fetch_one=True
        )
        return Annotation(**self._row_to_dict(row)) if row else None

    def insert_annotation(self, annotation: Annotation) -> Annotation:
        """
        Persist a new annotation.

        Raises:
            AnnotationConflictError: If a row with the same id exists
            StorageError: On any other database failure
        """
        query = """
            INSERT INTO annotations (
                id, kind, anchor_id, start_offset, end_offset, note,
                translation, book_id, chapter, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            annotation.id,
            annotation.kind.value,
            annotation.anchorId,
            annotation.start,
            annotation.end,
            annotation.note,
            annotation.translation,
            annotation.bookId,
            annotation.chapter,
            self.get_current_timestamp(),
        )
        try:
            self.execute_insert(query, params)
        except sqlite3.IntegrityError as exc:
            logger.warning("Rejected duplicate annotation id %s", annotation.id)
            raise AnnotationConflictError(annotation.id) from exc

        logger.info(
            "Saved %s %s on %s [%d:%d] (%s)",
            annotation.kind.value,
            annotation.id,
            annotation.anchorId,
            annotation.start,
            annotation.end,
            annotation.translation,
        )
        return annotation

    def delete_annotation(self, annotation_id: str) -> bool:
        """Remove an annotation; False means no row had that id."""
        deleted = self.execute_update_delete(
            "DELETE FROM annotations WHERE id = ?", (annotation_id,)
        )
        if deleted:
            logger.info("Deleted annotation %s", annotation_id)
        else:
            logger.info("Delete requested for unknown annotation %s", annotation_id)
        return deleted
