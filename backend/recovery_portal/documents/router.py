"""Document API endpoints

Upload, download and delete case documents. Video uploads are registered
with the video retention service, downloads are reported to it so the
retention countdown can start, and deleting a document stops its tracking.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..dependencies import Actor, get_current_actor
from ..models.document import Document
from ..observability.metrics import documents_uploaded_total
from ..retention.service import VideoRetentionTracker, get_video_retention_tracker, is_video_file
from .schemas import DocumentResponse, UploadResponse
from .service import get_document
from .storage import FileTooLargeError, LocalFileStorage, StorageError
from .validation import (
    is_accepted_extension,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


def get_storage() -> LocalFileStorage:
    """Dependency for the local upload storage"""
    settings = get_settings()
    return LocalFileStorage(settings.UPLOAD_DIR, max_size=settings.MAX_UPLOAD_SIZE_BYTES)


def _scope_for(actor: Actor):
    """Organisation filter for document lookups; admins see every organisation."""
    return None if actor.is_admin else actor.organisation_id


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    file: UploadFile = File(...),
    case_id: int = Form(...),
    organisation_id: Optional[int] = Form(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> UploadResponse:
    """Upload a document to a case.

    Users upload into their own organisation; admins must name the
    organisation explicitly.

    Raises:
        HTTPException 400: Missing organisation, invalid filename or file type, empty file
        HTTPException 413: File larger than MAX_UPLOAD_SIZE_BYTES
        HTTPException 500: File could not be stored
    """
    target_org = organisation_id if actor.is_admin else actor.organisation_id
    if target_org is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Organisation is required"
        )

    is_valid, error = validate_filename(file.filename or "")
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    file_name = sanitize_filename(file.filename)
    if not is_accepted_extension(file_name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File type of '{file_name}' is not allowed"
        )

    try:
        stored = storage.store_file(file.file, target_org, file_name)
    except FileTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_CONTENT_TOO_LARGE, detail=str(e))
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store file"
        )

    is_valid, error = validate_file_size(stored.size_bytes)
    if not is_valid:
        storage.delete_file(stored.file_path)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    document = Document(
        case_id=case_id,
        organisation_id=target_org,
        file_name=file_name,
        file_size=stored.size_bytes,
        file_type=file.content_type,
        file_path=stored.file_path,
        uploaded_by=actor.user_id,
    )
    try:
        db.add(document)
        db.commit()
        db.refresh(document)
    except Exception:
        db.rollback()
        storage.delete_file(stored.file_path)
        raise

    is_video = is_video_file(file_name)
    retention = None
    if is_video:
        tracker.track_video_upload(
            document_id=document.id,
            file_path=document.file_path,
            file_name=document.file_name,
            uploaded_by_user_id=actor.user_id,
            uploaded_by_admin=actor.is_admin,
            organisation_id=document.organisation_id,
            case_id=document.case_id,
        )
        retention = tracker.get_video_retention_info(document.id)

    documents_uploaded_total.labels(kind="video" if is_video else "document").inc()
    logger.info(
        f"Uploaded document {document.id} ({file_name})",
        extra={"document_id": document.id, "org_id": target_org, "user_id": actor.user_id}
    )

    return UploadResponse(
        document=DocumentResponse.model_validate(document),
        is_video=is_video,
        retention=retention,
    )


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
):
    """Download a document file.

    Raises:
        HTTPException 404: Document not found (or not visible) or file missing on disk
    """
    document = get_document(db, document_id, _scope_for(actor))
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    if not os.path.exists(document.file_path):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found on server")

    if is_video_file(document.file_name):
        tracker.record_video_download(document.id, downloaded_by_admin=actor.is_admin)

    return FileResponse(
        document.file_path,
        filename=document.file_name,
        media_type=document.file_type or "application/octet-stream",
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> None:
    """Delete a document, its file, and any video retention tracking.

    Raises:
        HTTPException 404: Document not found (or not visible)
    """
    document = get_document(db, document_id, _scope_for(actor))
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

    file_path = document.file_path
    db.delete(document)
    db.commit()

    try:
        storage.delete_file(file_path)
    except StorageError:
        logger.warning(
            f"Document {document_id} deleted but its file could not be removed",
            extra={"document_id": document_id}
        )

    tracker.remove_video_tracking(document_id)

    logger.info(
        f"Deleted document {document_id}",
        extra={"document_id": document_id, "user_id": actor.user_id}
    )
