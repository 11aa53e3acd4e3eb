"""Document record operations used by uploads and video retention.

make_delete_document_callback adapts a database session into the async
callback the video cleanup sweep invokes for each expired video.
"""

import logging
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from ..models.document import Document

logger = logging.getLogger(__name__)


def get_document(db: Session, document_id: int, organisation_id: Optional[int] = None) -> Optional[Document]:
    """Fetch a document, optionally scoped to an organisation."""
    query = db.query(Document).filter(Document.id == document_id)
    if organisation_id is not None:
        query = query.filter(Document.organisation_id == organisation_id)
    return query.first()


def delete_document_record(db: Session, document_id: int) -> bool:
    """Delete a document row by id and commit.

    Returns:
        True if a row was deleted, False if it did not exist
    """
    document = db.query(Document).filter(Document.id == document_id).first()
    if document is None:
        logger.info(
            f"Document {document_id} already deleted",
            extra={"document_id": document_id}
        )
        return False

    try:
        db.delete(document)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Deleted document record {document_id}",
        extra={"document_id": document_id, "org_id": document.organisation_id}
    )
    return True


def make_delete_document_callback(db: Session) -> Callable[[int], Awaitable[None]]:
    """Build the async delete callback for the video cleanup sweep.

    Errors propagate so the sweep counts them and retries the video later.
    """
    async def delete_document(document_id: int) -> None:
        delete_document_record(db, document_id)

    return delete_document
